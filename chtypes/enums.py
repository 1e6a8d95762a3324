"""Values of Enum8 and Enum16 columns."""

from __future__ import annotations

from dataclasses import dataclass


def _check_range(source: int, bits: int) -> int:
    low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    if not low <= source <= high:
        raise ValueError(f"{source} does not fit in {bits} bits")
    return source


@dataclass(frozen=True, repr=False)
class Enum8:
    """A single Enum8 cell, holding its numeric value."""

    value: int = 0

    def __post_init__(self) -> None:
        _check_range(self.value, 8)

    @classmethod
    def of(cls, source: int) -> Enum8:
        return cls(source)

    def internal(self) -> int:
        return self.value

    def __str__(self) -> str:
        return f"Enum8({self.value})"

    __repr__ = __str__


@dataclass(frozen=True, repr=False)
class Enum16:
    """A single Enum16 cell, holding its numeric value."""

    value: int = 0

    def __post_init__(self) -> None:
        _check_range(self.value, 16)

    @classmethod
    def of(cls, source: int) -> Enum16:
        return cls(source)

    def internal(self) -> int:
        return self.value

    def __str__(self) -> str:
        return f"Enum({self.value})"

    __repr__ = __str__