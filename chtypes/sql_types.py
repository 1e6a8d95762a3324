"""Column type descriptions and server-side bookkeeping records."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum


class TypeKind(Enum):
    """The family a column type belongs to."""

    BOOL = "Bool"
    UINT8 = "UInt8"
    UINT16 = "UInt16"
    UINT32 = "UInt32"
    UINT64 = "UInt64"
    UINT128 = "UInt128"
    INT8 = "Int8"
    INT16 = "Int16"
    INT32 = "Int32"
    INT64 = "Int64"
    INT128 = "Int128"
    STRING = "String"
    FIXED_STRING = "FixedString"
    FLOAT32 = "Float32"
    FLOAT64 = "Float64"
    DATE = "Date"
    DATETIME = "DateTime"
    IPV4 = "IPv4"
    IPV6 = "IPv6"
    UUID = "UUID"
    NULLABLE = "Nullable"
    ARRAY = "Array"
    LOW_CARDINALITY = "LowCardinality"
    DECIMAL = "Decimal"
    ENUM8 = "Enum8"
    ENUM16 = "Enum16"
    SIMPLE_AGGREGATE_FUNCTION = "SimpleAggregateFunction"
    MAP = "Map"


class SimpleAggFunc(Enum):
    """Functions allowed inside a SimpleAggregateFunction column."""

    ANY = "any"
    ANY_LAST = "anyLast"
    MIN = "min"
    MAX = "max"
    SUM = "sum"
    SUM_WITH_OVERFLOW = "sumWithOverflow"
    GROUP_BIT_AND = "groupBitAnd"
    GROUP_BIT_OR = "groupBitOr"
    GROUP_BIT_XOR = "groupBitXor"
    GROUP_ARRAY_ARRAY = "groupArrayArray"
    GROUP_UNIQ_ARRAY_ARRAY = "groupUniqArrayArray"
    SUM_MAP = "sumMap"
    MIN_MAP = "minMap"
    MAX_MAP = "maxMap"
    ARG_MIN = "argMin"
    ARG_MAX = "argMax"

    @classmethod
    def parse(cls, name: str) -> SimpleAggFunc:
        """Return the function with the given server name."""
        try:
            return cls(name)
        except ValueError:
            raise ValueError(f"unknown aggregate function: {name!r}") from None

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class DateTimeType:
    """Flavour of a DateTime column: plain 32-bit, 64-bit with precision, or chrono."""

    precision: int | None = None
    tz: str | None = None
    chrono: bool = False

    @property
    def is_datetime64(self) -> bool:
        return self.precision is not None


_SIMPLE_KINDS = frozenset(
    {
        TypeKind.BOOL,
        TypeKind.UINT8,
        TypeKind.UINT16,
        TypeKind.UINT32,
        TypeKind.UINT64,
        TypeKind.UINT128,
        TypeKind.INT8,
        TypeKind.INT16,
        TypeKind.INT32,
        TypeKind.INT64,
        TypeKind.INT128,
        TypeKind.STRING,
        TypeKind.FLOAT32,
        TypeKind.FLOAT64,
        TypeKind.DATE,
        TypeKind.IPV4,
        TypeKind.IPV6,
        TypeKind.UUID,
    }
)

_INNER_LOW_CARDINALITY = frozenset(
    {
        TypeKind.STRING,
        TypeKind.FIXED_STRING,
        TypeKind.DATE,
        TypeKind.DATETIME,
        TypeKind.UINT8,
        TypeKind.UINT16,
        TypeKind.UINT32,
        TypeKind.UINT64,
        TypeKind.INT8,
        TypeKind.INT16,
        TypeKind.INT32,
        TypeKind.INT64,
    }
)


@dataclass(frozen=True)
class SqlType:
    """A column type; nested types hold their parts in the fields below."""

    kind: TypeKind
    inner: SqlType | None = None
    value: SqlType | None = None
    length: int | None = None
    precision: int | None = None
    scale: int | None = None
    values: tuple[tuple[str, int], ...] = ()
    func: SimpleAggFunc | None = None
    datetime: DateTimeType | None = None

    def is_datetime(self) -> bool:
        return self.kind is TypeKind.DATETIME

    def is_inner_low_cardinality(self) -> bool:
        return self.kind in _INNER_LOW_CARDINALITY

    def level(self) -> int:
        """Nesting depth of the type."""
        if self.kind in (TypeKind.NULLABLE, TypeKind.ARRAY):
            return 1 + self.inner.level()
        if self.kind is TypeKind.MAP:
            return 1 + self.value.level()
        if self.kind is TypeKind.LOW_CARDINALITY:
            return 1
        return 0

    def map_level(self) -> int:
        """Nesting depth as seen from inside a map."""
        if self.kind in (TypeKind.NULLABLE, TypeKind.ARRAY):
            return self.inner.level()
        if self.kind is TypeKind.MAP:
            return 1 + self.value.level()
        return 0

    def __str__(self) -> str:
        kind = self.kind
        if kind in _SIMPLE_KINDS:
            return kind.value
        if kind is TypeKind.FIXED_STRING:
            return f"FixedString({self.length})"
        if kind in (TypeKind.LOW_CARDINALITY, TypeKind.NULLABLE, TypeKind.ARRAY):
            return f"{kind.value}({self.inner})"
        if kind is TypeKind.DATETIME:
            dt = self.datetime
            if dt is not None and dt.is_datetime64:
                return f"DateTime64({dt.precision}, '{dt.tz}')"
            return "DateTime"
        if kind is TypeKind.SIMPLE_AGGREGATE_FUNCTION:
            return f"SimpleAggregateFunction({self.func}, {self.inner})"
        if kind is TypeKind.DECIMAL:
            return f"Decimal({self.precision}, {self.scale})"
        if kind in (TypeKind.ENUM8, TypeKind.ENUM16):
            items = ",".join(f"'{name}' = {number}" for name, number in self.values)
            return f"{kind.value}({items})"
        if kind is TypeKind.MAP:
            return f"Map({self.inner}, {self.value})"
        raise ValueError(f"unsupported type kind: {kind}")


BOOL = SqlType(TypeKind.BOOL)
UINT8 = SqlType(TypeKind.UINT8)
UINT16 = SqlType(TypeKind.UINT16)
UINT32 = SqlType(TypeKind.UINT32)
UINT64 = SqlType(TypeKind.UINT64)
UINT128 = SqlType(TypeKind.UINT128)
INT8 = SqlType(TypeKind.INT8)
INT16 = SqlType(TypeKind.INT16)
INT32 = SqlType(TypeKind.INT32)
INT64 = SqlType(TypeKind.INT64)
INT128 = SqlType(TypeKind.INT128)
STRING = SqlType(TypeKind.STRING)
FLOAT32 = SqlType(TypeKind.FLOAT32)
FLOAT64 = SqlType(TypeKind.FLOAT64)
DATE = SqlType(TypeKind.DATE)
DATETIME = SqlType(TypeKind.DATETIME, datetime=DateTimeType())
IPV4 = SqlType(TypeKind.IPV4)
IPV6 = SqlType(TypeKind.IPV6)
UUID = SqlType(TypeKind.UUID)


def nullable(inner: SqlType) -> SqlType:
    return SqlType(TypeKind.NULLABLE, inner=inner)


def array(inner: SqlType) -> SqlType:
    return SqlType(TypeKind.ARRAY, inner=inner)


def low_cardinality(inner: SqlType) -> SqlType:
    return SqlType(TypeKind.LOW_CARDINALITY, inner=inner)


def map_of(key: SqlType, value: SqlType) -> SqlType:
    return SqlType(TypeKind.MAP, inner=key, value=value)


def decimal(precision: int, scale: int) -> SqlType:
    return SqlType(TypeKind.DECIMAL, precision=precision, scale=scale)


def fixed_string(length: int) -> SqlType:
    return SqlType(TypeKind.FIXED_STRING, length=length)


def _enum_values(
    values: Mapping[str, int] | Iterable[tuple[str, int]], bits: int
) -> tuple[tuple[str, int], ...]:
    pairs = values.items() if isinstance(values, Mapping) else values
    low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    result = []
    for name, number in pairs:
        if not low <= number <= high:
            raise ValueError(f"enum value {number} does not fit in {bits} bits")
        result.append((str(name), int(number)))
    return tuple(result)


def enum8(values: Mapping[str, int] | Iterable[tuple[str, int]]) -> SqlType:
    return SqlType(TypeKind.ENUM8, values=_enum_values(values, 8))


def enum16(values: Mapping[str, int] | Iterable[tuple[str, int]]) -> SqlType:
    return SqlType(TypeKind.ENUM16, values=_enum_values(values, 16))


def datetime64(precision: int, tz: str) -> SqlType:
    return SqlType(TypeKind.DATETIME, datetime=DateTimeType(precision=precision, tz=tz))


def simple_aggregate_function(func: SimpleAggFunc, inner: SqlType) -> SqlType:
    return SqlType(TypeKind.SIMPLE_AGGREGATE_FUNCTION, inner=inner, func=func)


@dataclass
class Progress:
    rows: int = 0
    bytes: int = 0
    total_rows: int = 0
    written_rows: int = 0
    written_bytes: int = 0


@dataclass
class ProfileInfo:
    rows: int = 0
    bytes: int = 0
    blocks: int = 0
    applied_limit: bool = False
    rows_before_limit: int = 0
    calculated_rows_before_limit: bool = False


@dataclass
class TableColumns:
    table_name: str = ""
    columns: str = ""


@dataclass(repr=False)
class ServerInfo:
    name: str = ""
    revision: int = 0
    minor_version: int = 0
    major_version: int = 0
    timezone: str = "UTC"
    display_name: str = field(default="")
    patch_version: int = 0

    def __repr__(self) -> str:
        return (
            f"{self.name} {self.major_version}.{self.minor_version}."
            f"{self.revision}.{self.patch_version} ({self.timezone})"
        )