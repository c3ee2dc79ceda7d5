"""Domain types shared by the Gyro client."""

from dataclasses import dataclass
from typing import Union

from gyrosdk.errors import InvalidBasketError
from gyrosdk.monetary import MonetaryAmount, raw_amount

Address = str


@dataclass(frozen=True)
class AddressRef:
    """A token known only by address; its decimals must be read on chain."""

    address: Address


@dataclass(frozen=True)
class TokenDescriptor:
    """An ERC20 token with its resolved metadata."""

    address: Address
    name: str
    symbol: str
    decimals: int


# A token passed to read queries: bare address or full descriptor
TokenRef = Union[AddressRef, TokenDescriptor]


def as_token_ref(token: Union[TokenRef, Address]) -> TokenRef:
    """Promote a bare address string to an AddressRef."""
    if isinstance(token, (AddressRef, TokenDescriptor)):
        return token
    return AddressRef(address=token)


@dataclass(frozen=True)
class TokenWithAmount:
    """One leg of a mint/redeem basket."""

    token: Address
    amount: Union[MonetaryAmount, int]

    @property
    def raw_amount(self) -> int:
        return raw_amount(self.amount)


@dataclass(frozen=True)
class Allowance:
    """Allowance snapshot; fetched fresh for every operation, never cached."""

    owner: Address
    spender: Address
    token: Address
    current: int

    def covers(self, required: int) -> bool:
        return self.current >= required


@dataclass(frozen=True)
class Reserve:
    """One entry of the protocol reserve at query time."""

    error_code: int
    address: Address
    amount: MonetaryAmount


def split_basket(basket: list[TokenWithAmount]) -> tuple[list[Address], list[int]]:
    """Split a basket into the parallel token/amount arrays the contracts expect.

    Raises:
        InvalidBasketError: If any amount is negative
    """
    tokens = []
    amounts = []
    for leg in basket:
        amount = leg.raw_amount
        if amount < 0:
            raise InvalidBasketError(f"negative amount {amount} for token {leg.token}")
        tokens.append(leg.token)
        amounts.append(amount)
    return tokens, amounts
