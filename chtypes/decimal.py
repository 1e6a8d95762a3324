"""Fixed-point decimal values as stored in Decimal columns."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

_MAX_PRECISION = 18
_FACTORS10 = tuple(10**power for power in range(_MAX_PRECISION + 1))
_I64_MIN = -(1 << 63)
_I64_MAX = (1 << 63) - 1


class NoBits(Enum):
    """Width of the integer that stores a decimal."""

    N32 = 32
    N64 = 64

    @classmethod
    def from_precision(cls, precision: int) -> NoBits:
        """Return the storage width that holds ``precision`` digits."""
        if precision <= 9:
            return cls.N32
        if precision <= _MAX_PRECISION:
            return cls.N64
        raise ValueError(f"precision {precision} is greater than {_MAX_PRECISION}")


def _scale_source(source: int | float, factor: int) -> int:
    if isinstance(source, float):
        product = source * factor
        if math.isnan(product):
            return 0
        if math.isinf(product):
            return _I64_MAX if product > 0 else _I64_MIN
        return max(_I64_MIN, min(_I64_MAX, int(product)))
    if isinstance(source, int):
        return source * factor
    raise TypeError(f"cannot build a decimal from {type(source).__name__}")


def _div_toward_zero(value: int, divisor: int) -> int:
    quotient = abs(value) // divisor
    return -quotient if value < 0 else quotient


@dataclass(frozen=True, eq=False, repr=False)
class Decimal:
    """A decimal number kept as an integer and a count of fraction digits."""

    underlying: int
    scale: int
    precision: int = _MAX_PRECISION
    nobits: NoBits | None = None

    def __post_init__(self) -> None:
        if not 0 <= self.scale <= _MAX_PRECISION:
            raise ValueError(f"scale can't be greater than {_MAX_PRECISION}")
        if self.nobits is None:
            object.__setattr__(self, "nobits", NoBits.from_precision(self.precision))

    @classmethod
    def of(cls, source: int | float, scale: int) -> Decimal:
        """Build a decimal from a number, keeping ``scale`` fraction digits."""
        if not 0 <= scale <= _MAX_PRECISION:
            raise ValueError(f"scale can't be greater than {_MAX_PRECISION}")
        underlying = _scale_source(source, _FACTORS10[scale])
        limit = _FACTORS10[_MAX_PRECISION]
        if underlying > limit:
            raise ValueError(f"{underlying} > {limit}")
        return cls(underlying, scale)

    def internal(self) -> int:
        """The stored integer representation."""
        return self.underlying

    def with_scale(self, scale: int) -> Decimal:
        """Return the same value rescaled to ``scale`` fraction digits."""
        if scale == self.scale:
            return self
        if not 0 <= scale <= _MAX_PRECISION:
            raise ValueError(f"scale can't be greater than {_MAX_PRECISION}")
        if scale < self.scale:
            underlying = _div_toward_zero(self.underlying, _FACTORS10[self.scale - scale])
        else:
            underlying = self.underlying * _FACTORS10[scale - self.scale]
        return Decimal(underlying, scale, self.precision, self.nobits)

    def __float__(self) -> float:
        return self.underlying / _FACTORS10[self.scale]

    def __str__(self) -> str:
        text = str(self.underlying)
        if len(text) < self.scale:
            text = text.rjust(self.scale, "0")
        pos = len(text) - self.scale
        text = f"{text[:pos]}.{text[pos:]}"
        if text.startswith("."):
            text = "0" + text
        return text

    __repr__ = __str__

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Decimal):
            return NotImplemented
        if self.scale < other.scale:
            return other.underlying == self.underlying * _FACTORS10[other.scale - self.scale]
        if self.scale > other.scale:
            return self.underlying == other.underlying * _FACTORS10[self.scale - other.scale]
        return self.underlying == other.underlying

    def __hash__(self) -> int:
        underlying, scale = self.underlying, self.scale
        while scale > 0 and underlying % 10 == 0:
            underlying //= 10
            scale -= 1
        return hash((underlying, scale))