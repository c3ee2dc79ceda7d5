"""Async bindings for the ERC20, GyroFund and GyroLib contracts.

Bindings are thin: they checksum addresses, call the contract through
``web3.AsyncWeb3`` and return plain Python values. Mutating calls are
sent with ``transact`` from the bound account, so the node signs them
(JSON-RPC signer), and every one of them carries the fixed gas ceiling.
Errors raised by web3 (reverts, transport failures) are not caught here.
"""

import logging

from web3 import Web3

from gyrosdk.constants import GAS_LIMIT, TX_TIMEOUT
from gyrosdk.responses import SubmittedTransaction
from gyrosdk.types import Address

logger = logging.getLogger(__name__)


# ERC-20 ABI fragments used by the client
ERC20_ABI = [
    {
        "inputs": [{"name": "owner", "type": "address"}, {"name": "spender", "type": "address"}],
        "name": "allowance",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"name": "spender", "type": "address"}, {"name": "amount", "type": "uint256"}],
        "name": "approve",
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [{"name": "account", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "totalSupply",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "decimals",
        "outputs": [{"name": "", "type": "uint8"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "name",
        "outputs": [{"name": "", "type": "string"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "symbol",
        "outputs": [{"name": "", "type": "string"}],
        "stateMutability": "view",
        "type": "function",
    },
]

# GyroLib ABI fragments (mint/redeem entrypoint and estimates)
GYRO_LIB_ABI = [
    {
        "inputs": [
            {"name": "_tokensIn", "type": "address[]"},
            {"name": "_amountsIn", "type": "uint256[]"},
            {"name": "_minGyroMinted", "type": "uint256"},
        ],
        "name": "mintFromUnderlyingTokens",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "_tokensOut", "type": "address[]"},
            {"name": "_amountsOut", "type": "uint256[]"},
            {"name": "_maxGyroRedeemed", "type": "uint256"},
        ],
        "name": "redeemToUnderlyingTokens",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "_tokensIn", "type": "address[]"},
            {"name": "_amountsIn", "type": "uint256[]"},
        ],
        "name": "estimateMintedGyro",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "_tokensOut", "type": "address[]"},
            {"name": "_amountsOut", "type": "uint256[]"},
        ],
        "name": "estimateRedeemedGyro",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "getSupportedTokens",
        "outputs": [{"name": "", "type": "address[]"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "getReserveValues",
        "outputs": [
            {"name": "", "type": "uint64"},
            {"name": "", "type": "address[]"},
            {"name": "", "type": "uint256[]"},
        ],
        "stateMutability": "view",
        "type": "function",
    },
]


def checksum(address: Address) -> Address:
    return Web3.to_checksum_address(address)


class ContractBinding:
    """Contract handle bound to one account."""

    abi: list[dict] = []

    def __init__(
        self,
        web3,
        address: Address,
        account: Address,
        gas_limit: int = GAS_LIMIT,
        tx_timeout: float = TX_TIMEOUT,
    ):
        self.web3 = web3
        self.address = checksum(address)
        self.account = checksum(account)
        self.gas_limit = gas_limit
        self.tx_timeout = tx_timeout
        self._contract = web3.eth.contract(address=self.address, abi=self.abi)

    def connect(self, account: Address) -> "ContractBinding":
        """Return the same contract bound to another account."""
        return type(self)(self.web3, self.address, account, self.gas_limit, self.tx_timeout)

    async def _transact(self, fn, description: str) -> SubmittedTransaction:
        tx_hash = await fn.transact({"from": self.account, "gas": self.gas_limit})
        submitted = SubmittedTransaction(
            tx_hash=Web3.to_hex(tx_hash),
            description=description,
            web3=self.web3,
            timeout=self.tx_timeout,
        )
        logger.info("Submitted %s: %s", description, submitted.tx_hash)
        return submitted

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(address={self.address}, account={self.account})"


class ERC20Contract(ContractBinding):
    """ERC-20 token."""

    abi = ERC20_ABI

    async def allowance(self, owner: Address, spender: Address) -> int:
        return await self._contract.functions.allowance(checksum(owner), checksum(spender)).call()

    async def approve(self, spender: Address, amount: int) -> SubmittedTransaction:
        fn = self._contract.functions.approve(checksum(spender), amount)
        return await self._transact(fn, f"approve {self.address} for {spender}")

    async def balance_of(self, address: Address) -> int:
        return await self._contract.functions.balanceOf(checksum(address)).call()

    async def total_supply(self) -> int:
        return await self._contract.functions.totalSupply().call()

    async def decimals(self) -> int:
        return await self._contract.functions.decimals().call()

    async def name(self) -> str:
        return await self._contract.functions.name().call()

    async def symbol(self) -> str:
        return await self._contract.functions.symbol().call()


class GyroFundContract(ERC20Contract):
    """The Gyro fund, which is itself the ERC-20 Gyro token."""
    pass


class GyroLibContract(ContractBinding):
    """Library contract that mints and redeems from underlying tokens."""

    abi = GYRO_LIB_ABI

    async def mint_from_underlying_tokens(
        self,
        tokens: list[Address],
        amounts: list[int],
        min_minted: int,
    ) -> SubmittedTransaction:
        fn = self._contract.functions.mintFromUnderlyingTokens(
            [checksum(t) for t in tokens], amounts, min_minted
        )
        return await self._transact(fn, f"mint from {len(tokens)} token(s)")

    async def redeem_to_underlying_tokens(
        self,
        tokens: list[Address],
        amounts: list[int],
        max_redeemed: int,
    ) -> SubmittedTransaction:
        fn = self._contract.functions.redeemToUnderlyingTokens(
            [checksum(t) for t in tokens], amounts, max_redeemed
        )
        return await self._transact(fn, f"redeem to {len(tokens)} token(s)")

    async def estimate_minted_gyro(self, tokens: list[Address], amounts: list[int]) -> int:
        return await self._contract.functions.estimateMintedGyro(
            [checksum(t) for t in tokens], amounts
        ).call()

    async def estimate_redeemed_gyro(self, tokens: list[Address], amounts: list[int]) -> int:
        return await self._contract.functions.estimateRedeemedGyro(
            [checksum(t) for t in tokens], amounts
        ).call()

    async def get_supported_tokens(self) -> list[Address]:
        return list(await self._contract.functions.getSupportedTokens().call())

    async def get_reserve_values(self) -> tuple[int, list[Address], list[int]]:
        error_code, addresses, amounts = await self._contract.functions.getReserveValues().call()
        return error_code, list(addresses), list(amounts)


class TokenFactory:
    """Creates ERC-20 bindings for arbitrary token addresses on one account."""

    def __init__(
        self,
        web3,
        account: Address,
        gas_limit: int = GAS_LIMIT,
        tx_timeout: float = TX_TIMEOUT,
    ):
        self.web3 = web3
        self.account = account
        self.gas_limit = gas_limit
        self.tx_timeout = tx_timeout

    def __call__(self, address: Address) -> ERC20Contract:
        return ERC20Contract(self.web3, address, self.account, self.gas_limit, self.tx_timeout)

    def connect(self, account: Address) -> "TokenFactory":
        return TokenFactory(self.web3, account, self.gas_limit, self.tx_timeout)
