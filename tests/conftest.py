"""Pytest configuration and fixtures.

The chain is replaced by in-memory fake contracts that record every call
in a shared event log, so tests can assert ordering between approvals,
mints and redeems.
"""

import asyncio
import os
from itertools import count
from typing import Optional

import pytest

# Keep tests independent from any local .env
os.environ["GYRO_DEBUG"] = "true"
os.environ.pop("GYRO_DEPLOYMENTS", None)
os.environ.pop("GYRO_ACCOUNT", None)

from gyrosdk.orchestrator import TransactionOrchestrator
from gyrosdk.estimator import BalanceEstimator
from gyrosdk.responses import SubmittedTransaction

OWNER = "0x" + "aa" * 20
OTHER_ACCOUNT = "0x" + "bb" * 20
LIB_ADDRESS = "0x" + "1b" * 20
FUND_ADDRESS = "0x" + "f0" * 20
USDC = "0x" + "c1" * 20
DAI = "0x" + "da" * 20
WETH = "0x" + "e7" * 20


class FakeChain:
    """Shared state of the fake contracts."""

    def __init__(self):
        self.events: list[tuple] = []
        self.tokens: dict[str, "FakeToken"] = {}
        self._tx_ids = count(1)
        self.active_reads = 0
        self.max_concurrent_reads = 0
        self.active_writes = 0
        self.max_concurrent_writes = 0

    def next_tx(self, description: str) -> SubmittedTransaction:
        return SubmittedTransaction(tx_hash=f"0x{next(self._tx_ids):064x}", description=description)

    async def read(self):
        self.active_reads += 1
        self.max_concurrent_reads = max(self.max_concurrent_reads, self.active_reads)
        # Yield so concurrent reads overlap
        await asyncio.sleep(0)
        self.active_reads -= 1

    async def write(self):
        self.active_writes += 1
        self.max_concurrent_writes = max(self.max_concurrent_writes, self.active_writes)
        await asyncio.sleep(0)
        self.active_writes -= 1

    def add_token(self, address: str, decimals: int = 18, name: str = "", symbol: str = "") -> "FakeToken":
        token = FakeToken(self, address, decimals, name or symbol or address[:6], symbol or address[:6])
        self.tokens[address] = token
        return token

    def token_factory(self, address: str) -> "FakeToken":
        return self.tokens[address]

    def calls(self, name: str) -> list[tuple]:
        return [event for event in self.events if event[0] == name]


class FakeToken:
    """In-memory ERC-20."""

    def __init__(self, chain: FakeChain, address: str, decimals: int, name: str, symbol: str):
        self.chain = chain
        self.address = address
        self._decimals = decimals
        self._name = name
        self._symbol = symbol
        self.allowances: dict[tuple[str, str], int] = {}
        self.balances: dict[str, int] = {}
        self.supply = 0
        self.fail_approve: Optional[Exception] = None

    async def allowance(self, owner: str, spender: str) -> int:
        await self.chain.read()
        self.chain.events.append(("allowance", self.address, owner, spender))
        return self.allowances.get((owner, spender), 0)

    async def approve(self, spender: str, amount: int) -> SubmittedTransaction:
        await self.chain.write()
        if self.fail_approve is not None:
            raise self.fail_approve
        self.chain.events.append(("approve", self.address, spender, amount))
        return self.chain.next_tx(f"approve {self.address}")

    async def balance_of(self, address: str) -> int:
        await self.chain.read()
        self.chain.events.append(("balanceOf", self.address, address))
        return self.balances.get(address, 0)

    async def total_supply(self) -> int:
        await self.chain.read()
        return self.supply

    async def decimals(self) -> int:
        await self.chain.read()
        self.chain.events.append(("decimals", self.address))
        return self._decimals

    async def name(self) -> str:
        await self.chain.read()
        return self._name

    async def symbol(self) -> str:
        await self.chain.read()
        return self._symbol


class FakeLib:
    """In-memory GyroLib."""

    def __init__(self, chain: FakeChain, address: str = LIB_ADDRESS):
        self.chain = chain
        self.address = address
        self.minted_estimate = 0
        self.redeemed_estimate = 0
        self.supported_tokens: list[str] = []
        self.reserve_values: tuple[int, list[str], list[int]] = (0, [], [])
        self.fail_main: Optional[Exception] = None

    async def mint_from_underlying_tokens(self, tokens, amounts, min_minted) -> SubmittedTransaction:
        await self.chain.write()
        if self.fail_main is not None:
            raise self.fail_main
        self.chain.events.append(("mint", list(tokens), list(amounts), min_minted))
        return self.chain.next_tx("mint")

    async def redeem_to_underlying_tokens(self, tokens, amounts, max_redeemed) -> SubmittedTransaction:
        await self.chain.write()
        if self.fail_main is not None:
            raise self.fail_main
        self.chain.events.append(("redeem", list(tokens), list(amounts), max_redeemed))
        return self.chain.next_tx("redeem")

    async def estimate_minted_gyro(self, tokens, amounts) -> int:
        await self.chain.read()
        self.chain.events.append(("estimateMinted", list(tokens), list(amounts)))
        return self.minted_estimate

    async def estimate_redeemed_gyro(self, tokens, amounts) -> int:
        await self.chain.read()
        self.chain.events.append(("estimateRedeemed", list(tokens), list(amounts)))
        return self.redeemed_estimate

    async def get_supported_tokens(self) -> list[str]:
        await self.chain.read()
        return list(self.supported_tokens)

    async def get_reserve_values(self):
        await self.chain.read()
        return self.reserve_values


@pytest.fixture
def chain() -> FakeChain:
    """Fake chain with three underlying tokens and the fund token."""
    fake = FakeChain()
    fake.add_token(USDC, decimals=6, name="USD Coin", symbol="USDC")
    fake.add_token(DAI, decimals=18, name="Dai Stablecoin", symbol="DAI")
    fake.add_token(WETH, decimals=18, name="Wrapped Ether", symbol="WETH")
    fake.add_token(FUND_ADDRESS, decimals=18, name="Gyro", symbol="GYRO")
    return fake


@pytest.fixture
def lib(chain: FakeChain) -> FakeLib:
    return FakeLib(chain)


@pytest.fixture
def orchestrator(chain: FakeChain, lib: FakeLib) -> TransactionOrchestrator:
    return TransactionOrchestrator(OWNER, lib, FUND_ADDRESS, chain.token_factory)


@pytest.fixture
def estimator(chain: FakeChain, lib: FakeLib) -> BalanceEstimator:
    return BalanceEstimator(OWNER, lib, chain.tokens[FUND_ADDRESS], chain.token_factory)
