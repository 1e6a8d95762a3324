"""Column of variable-length byte strings."""

from __future__ import annotations

import io
from collections.abc import Iterable
from itertools import islice
from typing import Any, BinaryIO

from .column import ColumnData
from .sql_types import STRING, SqlType
from .string_pool import StringPool


def _encode_uvarint(value: int) -> bytes:
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def _read_uvarint(stream: BinaryIO) -> int:
    result = 0
    shift = 0
    while True:
        chunk = stream.read(1)
        if not chunk:
            raise EOFError("unexpected end of data while reading length")
        byte = chunk[0]
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return result
        shift += 7
        if shift >= 64:
            raise ValueError("length varint is too long")


def _to_bytes(value: Any) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise TypeError(f"cannot store {type(value).__name__} in a String column")


class StringColumn(ColumnData):
    """A String column backed by a string pool."""

    def __init__(self, capacity: int = 0) -> None:
        self._pool = StringPool(capacity)

    @classmethod
    def from_strings(cls, source: Iterable[str | bytes]) -> StringColumn:
        """Build a column holding each item of ``source``."""
        column = cls()
        column._pool = StringPool.from_strings(_to_bytes(item) for item in source)
        return column

    @classmethod
    def load(
        cls, data: bytes | bytearray | memoryview | BinaryIO, size: int
    ) -> StringColumn:
        """Read ``size`` length-prefixed strings from bytes or a binary stream."""
        stream = data if hasattr(data, "read") else io.BytesIO(bytes(data))
        column = cls(size)
        for _ in range(size):
            length = _read_uvarint(stream)  # type: ignore[arg-type]
            raw = stream.read(length) if length else b""  # type: ignore[union-attr]
            if len(raw) != length:
                raise EOFError(f"expected {length} bytes, got {len(raw)}")
            column._pool.allocate(length)[:] = raw
        return column

    @property
    def sql_type(self) -> SqlType:
        return STRING

    def save(self, start: int, end: int) -> bytes:
        if not 0 <= start <= end <= len(self):
            raise IndexError(f"range {start}..{end} out of bounds for length {len(self)}")
        return b"".join(
            _encode_uvarint(len(item)) + item
            for item in islice(self._pool.strings(), start, end)
        )

    def __len__(self) -> int:
        return len(self._pool)

    def push(self, value: Any) -> None:
        raw = _to_bytes(value)
        self._pool.allocate(len(raw))[:] = raw

    def at(self, index: int) -> bytes:
        return self._pool.get(index)

    def get_string(self, index: int) -> bytes:
        """The raw bytes at ``index``, as used by low-cardinality lookups."""
        return self._pool.get(index)

    def default_value(self) -> bytes:
        return b""