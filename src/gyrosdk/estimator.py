"""Read-only Gyro queries: estimates, balances and reserve composition.

Nothing here submits a transaction or touches allowances. Independent
reads (token metadata, per-token lookups) are issued concurrently.
"""

import asyncio
import logging
from typing import Callable, Optional, Union

from gyrosdk.constants import DECIMALS
from gyrosdk.errors import ReserveDataError
from gyrosdk.monetary import MonetaryAmount
from gyrosdk.types import (
    Address,
    AddressRef,
    Reserve,
    TokenDescriptor,
    TokenRef,
    TokenWithAmount,
    as_token_ref,
    split_basket,
)

logger = logging.getLogger(__name__)


class BalanceEstimator:
    """Read path of the client.

    Args:
        account: Default account for balance queries
        lib: GyroLib binding
        fund: GyroFund binding
        token_factory: Callable returning an ERC-20 binding for an address
    """

    def __init__(self, account: Address, lib, fund, token_factory: Callable):
        self.account = account
        self.lib = lib
        self.fund = fund
        self.token_factory = token_factory

    def rebind(self, account: Address, lib, fund, token_factory: Callable) -> None:
        self.account = account
        self.lib = lib
        self.fund = fund
        self.token_factory = token_factory

    @property
    def fund_address(self) -> Address:
        return self.fund.address

    async def estimate_minted(self, inputs: list[TokenWithAmount]) -> MonetaryAmount:
        """Expected Gyro minted for ``inputs``."""
        tokens, amounts = split_basket(inputs)
        amount = await self.lib.estimate_minted_gyro(tokens, amounts)
        return MonetaryAmount(amount, DECIMALS)

    async def estimate_redeemed(self, outputs: list[TokenWithAmount]) -> MonetaryAmount:
        """Expected Gyro burnt to receive ``outputs``."""
        tokens, amounts = split_basket(outputs)
        amount = await self.lib.estimate_redeemed_gyro(tokens, amounts)
        return MonetaryAmount(amount, DECIMALS)

    async def balance(self, address: Optional[Address] = None) -> MonetaryAmount:
        """Gyro balance of ``address`` (the active account by default)."""
        balance = await self.fund.balance_of(address or self.account)
        return MonetaryAmount(balance, DECIMALS)

    async def total_supply(self) -> MonetaryAmount:
        """Total Gyro in circulation."""
        return MonetaryAmount(await self.fund.total_supply(), DECIMALS)

    async def token_balance(
        self,
        token: Union[TokenRef, Address],
        address: Optional[Address] = None,
    ) -> MonetaryAmount:
        """Balance of an ERC-20 token, at that token's own precision.

        Args:
            token: A TokenDescriptor (decimals known), an AddressRef or a bare
                address string (decimals read from the token contract)
            address: Holder to query, the active account by default
        """
        ref = as_token_ref(token)
        holder = address or self.account
        contract = self.token_factory(ref.address)

        if isinstance(ref, TokenDescriptor):
            decimals = ref.decimals
            balance = await contract.balance_of(holder)
        else:
            decimals, balance = await asyncio.gather(
                contract.decimals(), contract.balance_of(holder)
            )

        return MonetaryAmount(balance, int(decimals))

    async def get_supported_token_addresses(self) -> list[Address]:
        return await self.lib.get_supported_tokens()

    async def get_supported_tokens(self) -> list[TokenDescriptor]:
        """Metadata for every token the protocol accepts."""
        addresses = await self.get_supported_token_addresses()
        return list(await asyncio.gather(*(self.describe_token(a) for a in addresses)))

    async def describe_token(self, token: Union[AddressRef, Address]) -> TokenDescriptor:
        """Resolve name, symbol and decimals of a token concurrently."""
        address = as_token_ref(token).address
        contract = self.token_factory(address)
        name, symbol, decimals = await asyncio.gather(
            contract.name(), contract.symbol(), contract.decimals()
        )
        return TokenDescriptor(address=address, name=name, symbol=symbol, decimals=int(decimals))

    async def get_reserve_values(self) -> list[Reserve]:
        """Current reserve composition, one entry per reserve token.

        The error code reported by the library is attached to every entry;
        a non-zero code flags a degraded read and is left to the caller.

        Raises:
            ReserveDataError: If addresses and amounts differ in length
        """
        error_code, addresses, amounts = await self.lib.get_reserve_values()
        if len(addresses) != len(amounts):
            raise ReserveDataError(len(addresses), len(amounts))

        if error_code:
            logger.warning("Reserve values returned error code %d", error_code)

        return [
            Reserve(error_code=int(error_code), address=address, amount=MonetaryAmount(amount, DECIMALS))
            for address, amount in zip(addresses, amounts)
        ]
