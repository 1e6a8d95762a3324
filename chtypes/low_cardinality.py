"""Dictionary-encoded (LowCardinality) columns and their key index."""

from __future__ import annotations

import io
import struct
from collections.abc import Callable, Iterable
from enum import Enum
from typing import Any, BinaryIO

from .column import ColumnData, VectorColumn
from .sql_types import SqlType, TypeKind, low_cardinality

NEED_GLOBAL_DICTIONARY_BIT = 1 << 8
HAS_ADDITIONAL_KEYS_BIT = 1 << 9
NEED_UPDATE_DICTIONARY_BIT = 1 << 10

LOW_CARDINALITY_VERSION = 1
INDEX_TYPE_MASK = 0xFF

_U64 = struct.Struct("<Q")


class DeserializeError(ValueError):
    """Raised when LowCardinality data on the wire is malformed or unsupported."""


class IndexType(Enum):
    """Width of the integers that point into the dictionary."""

    UINT8 = 0
    UINT16 = 1
    UINT32 = 2
    UINT64 = 3

    @classmethod
    def from_flags(cls, flags: int) -> IndexType:
        """The index type encoded in the low byte of ``flags``."""
        try:
            return cls(flags & INDEX_TYPE_MASK)
        except ValueError:
            raise DeserializeError("Invalid index serialization version value") from None

    @property
    def kind(self) -> TypeKind:
        return _KINDS[self]

    @property
    def max_len(self) -> int:
        return (1 << (8 << self.value)) - 1

    def wider(self) -> IndexType:
        if self is IndexType.UINT64:
            raise OverflowError("index is already 64 bits wide")
        return IndexType(self.value + 1)


_KINDS = {
    IndexType.UINT8: TypeKind.UINT8,
    IndexType.UINT16: TypeKind.UINT16,
    IndexType.UINT32: TypeKind.UINT32,
    IndexType.UINT64: TypeKind.UINT64,
}


def _as_stream(data: bytes | bytearray | memoryview | BinaryIO) -> BinaryIO:
    if hasattr(data, "read"):
        return data  # type: ignore[return-value]
    return io.BytesIO(bytes(data))


def _read_u64(stream: BinaryIO) -> int:
    raw = stream.read(_U64.size)
    if len(raw) != _U64.size:
        raise EOFError(f"expected {_U64.size} bytes, got {len(raw)}")
    return _U64.unpack(raw)[0]


class LowCardinalityIndex:
    """Per-row positions into the dictionary, widened as rows are added."""

    def __init__(
        self, index_type: IndexType = IndexType.UINT8, values: Iterable[int] = ()
    ) -> None:
        self.index_type = index_type
        self._data = VectorColumn(index_type.kind, values)

    @classmethod
    def load(
        cls,
        data: bytes | bytearray | memoryview | BinaryIO,
        size: int,
        index_type: IndexType,
    ) -> LowCardinalityIndex:
        """Read ``size`` positions of ``index_type`` from bytes or a stream."""
        index = cls(index_type)
        index._data = VectorColumn.load(index_type.kind, data, size)
        return index

    def flags(self) -> int:
        """The serialization flags written before the keys."""
        return self.index_type.value | HAS_ADDITIONAL_KEYS_BIT | NEED_UPDATE_DICTIONARY_BIT

    def _widen(self) -> None:
        wider = self.index_type.wider()
        self._data = VectorColumn(wider.kind, self._data)
        self.index_type = wider

    def push(self, value: int) -> None:
        """Append a dictionary position, widening the index when it is full."""
        if len(self) + 1 > self.index_type.max_len:
            self._widen()
        while value > self.index_type.max_len:
            self._widen()
        self._data.push(value)

    def get(self, index: int) -> int:
        """The dictionary position stored for row ``index``."""
        return self._data.at(index)

    def save(self, start: int, end: int) -> bytes:
        return self._data.save(start, end)

    def __len__(self) -> int:
        return len(self._data)


class LowCardinalityColumn(ColumnData):
    """A column storing each distinct value once and rows as dictionary positions."""

    def __init__(self, inner: ColumnData, index: LowCardinalityIndex | None = None) -> None:
        self.inner = inner
        self.index = index if index is not None else LowCardinalityIndex()
        self._value_map: dict[Any, int] | None = None

    @classmethod
    def load(
        cls,
        data: bytes | bytearray | memoryview | BinaryIO,
        size: int,
        load_inner: Callable[[BinaryIO, int], ColumnData],
    ) -> LowCardinalityColumn:
        """Read ``size`` rows; ``load_inner`` reads the dictionary column."""
        stream = _as_stream(data)
        if size == 0:
            inner = load_inner(stream, 0)
            keys = LowCardinalityIndex.load(stream, 0, IndexType.UINT8)
            return cls(inner, keys)

        version = _read_u64(stream)
        if version != LOW_CARDINALITY_VERSION:
            raise DeserializeError("Invalid low cardinality version")

        flags = _read_u64(stream)
        index_type = IndexType.from_flags(flags)
        if flags & NEED_GLOBAL_DICTIONARY_BIT:
            raise DeserializeError("Global dictionary is not supported.")
        if not flags & HAS_ADDITIONAL_KEYS_BIT:
            raise DeserializeError("HasAdditionalKeysBit is missing.")

        dictionary_size = _read_u64(stream)
        inner = load_inner(stream, dictionary_size)

        keys_rows = _read_u64(stream)
        keys = LowCardinalityIndex.load(stream, keys_rows, index_type)
        if flags != keys.flags():
            raise DeserializeError(f"unexpected index flags {flags:#x}")
        return cls(inner, keys)

    @property
    def sql_type(self) -> SqlType:
        return low_cardinality(self.inner.sql_type)

    def save(self, start: int, end: int) -> bytes:
        if start == end:
            return b""
        dictionary_size = len(self.inner)
        return b"".join(
            (
                _U64.pack(LOW_CARDINALITY_VERSION),
                _U64.pack(self.index.flags()),
                _U64.pack(dictionary_size),
                self.inner.save(0, dictionary_size),
                _U64.pack(end - start),
                self.index.save(start, end),
            )
        )

    def __len__(self) -> int:
        return len(self.index)

    def _build_value_map(self) -> dict[Any, int]:
        positions = (self.index.get(row) for row in range(len(self.index)))
        return {self.inner.at(position): position for position in positions}

    def push(self, value: Any) -> None:
        if self._value_map is None:
            self._value_map = self._build_value_map()
        position = self._value_map.get(value)
        if position is None:
            position = len(self.inner)
            self.inner.push(value)
            self._value_map[self.inner.at(position)] = position
            self._value_map.setdefault(value, position)
        self.index.push(position)

    def at(self, index: int) -> Any:
        return self.inner.at(self.index.get(index))

    def default_value(self) -> Any:
        return self.inner.default_value()

    def get_timezone(self) -> str | None:
        return self.inner.get_timezone()