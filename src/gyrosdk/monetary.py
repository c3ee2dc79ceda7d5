"""Fixed-point monetary amounts.

Token amounts travel on chain as raw integers scaled by ``10**decimals``,
and decimals differ from token to token (6 for USDC, 18 for the Gyro fund
token, ...). ``MonetaryAmount`` keeps the raw integer together with its
precision so amounts from different tokens can be compared safely:
every comparison or arithmetic operation first rescales both sides to
their common (larger) precision.

All conversions stay in the integer domain; ``Decimal`` is only used for
parsing and display, so no context precision can round a large value.
"""

import functools
import operator
from dataclasses import dataclass
from decimal import Decimal
from typing import Union

from gyrosdk.constants import DECIMALS

NormalizedValue = Union[int, str, float, Decimal]


def _truncate_div(value: int, divisor: int) -> int:
    """Integer division truncating toward zero."""
    quotient = abs(value) // divisor
    return -quotient if value < 0 else quotient


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class MonetaryAmount:
    """A raw integer ``value`` tagged with its number of fractional digits."""

    value: int
    decimals: int = DECIMALS

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            # Integer-like values only (numpy ints, ...); floats would truncate
            try:
                value = operator.index(self.value)
            except TypeError:
                raise TypeError(
                    f"raw value must be an integer, got {self.value!r}; "
                    "use MonetaryAmount.from_normalized for human readable values"
                ) from None
            object.__setattr__(self, "value", value)
        if self.decimals < 0:
            raise ValueError(f"decimals must be non-negative, got {self.decimals}")

    @classmethod
    def from_normalized(
        cls, amount: NormalizedValue, decimals: int = DECIMALS
    ) -> "MonetaryAmount":
        """Build from a human readable value, e.g. ``("1.5", 6)`` -> raw 1500000.

        Fractional digits beyond ``decimals`` are truncated toward zero.
        """
        if decimals < 0:
            raise ValueError(f"decimals must be non-negative, got {decimals}")
        if isinstance(amount, float):
            amount = str(amount)

        parsed = Decimal(amount)
        if not parsed.is_finite():
            raise ValueError(f"cannot build a MonetaryAmount from {amount!r}")

        sign, digits, exponent = parsed.as_tuple()
        magnitude = int("".join(map(str, digits)) or "0")
        shift = exponent + decimals
        if shift >= 0:
            raw = magnitude * 10**shift
        else:
            raw = magnitude // 10**(-shift)

        return cls(-raw if sign else raw, decimals)

    @classmethod
    def zero(cls, decimals: int = DECIMALS) -> "MonetaryAmount":
        return cls(0, decimals)

    @property
    def normalized(self) -> Decimal:
        """Exact human readable value."""
        sign, digits, _ = Decimal(self.value).as_tuple()
        return Decimal((sign, digits, -self.decimals))

    def rescale(self, decimals: int) -> "MonetaryAmount":
        """Convert to another precision, truncating toward zero when reducing it."""
        if decimals < 0:
            raise ValueError(f"decimals must be non-negative, got {decimals}")
        if decimals >= self.decimals:
            return MonetaryAmount(self.value * 10**(decimals - self.decimals), decimals)
        return MonetaryAmount(
            _truncate_div(self.value, 10**(self.decimals - decimals)), decimals
        )

    def is_zero(self) -> bool:
        return self.value == 0

    def _aligned(self, other: "MonetaryAmount") -> tuple[int, int, int]:
        """Raw values of self and other at their common precision."""
        common = max(self.decimals, other.decimals)
        return (
            self.value * 10**(common - self.decimals),
            other.value * 10**(common - other.decimals),
            common,
        )

    def _coerce(self, other) -> "MonetaryAmount":
        if isinstance(other, MonetaryAmount):
            return other
        if isinstance(other, int) and not isinstance(other, bool):
            # Bare ints are raw values at our own precision
            return MonetaryAmount(other, self.decimals)
        return NotImplemented

    def __eq__(self, other) -> bool:
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        left, right, _ = self._aligned(other)
        return left == right

    def __lt__(self, other) -> bool:
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        left, right, _ = self._aligned(other)
        return left < right

    def __hash__(self) -> int:
        # Equal amounts at different precisions share one normalized Decimal
        return hash(self.normalized)

    def __add__(self, other) -> "MonetaryAmount":
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        left, right, common = self._aligned(other)
        return MonetaryAmount(left + right, common)

    __radd__ = __add__

    def __sub__(self, other) -> "MonetaryAmount":
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        left, right, common = self._aligned(other)
        return MonetaryAmount(left - right, common)

    def __neg__(self) -> "MonetaryAmount":
        return MonetaryAmount(-self.value, self.decimals)

    def __abs__(self) -> "MonetaryAmount":
        return MonetaryAmount(abs(self.value), self.decimals)

    def __str__(self) -> str:
        return f"{self.normalized:f}"

    def __repr__(self) -> str:
        return f"MonetaryAmount(value={self.value}, decimals={self.decimals})"


def raw_amount(amount: Union[MonetaryAmount, int]) -> int:
    """Raw on-chain integer for a basket amount given as MonetaryAmount or int."""
    if isinstance(amount, MonetaryAmount):
        return amount.value
    return int(amount)
