"""Column of key/value maps stored as flat key and value columns plus offsets."""

from __future__ import annotations

import io
import struct
from collections.abc import Callable, Iterable, Mapping
from typing import Any, BinaryIO

from .column import ColumnData
from .sql_types import SqlType, TypeKind, map_of

_U64 = struct.Struct("<Q")

ColumnLoader = Callable[[BinaryIO, int], ColumnData]


def _as_stream(data: bytes | bytearray | memoryview | BinaryIO) -> BinaryIO:
    if hasattr(data, "read"):
        return data  # type: ignore[return-value]
    return io.BytesIO(bytes(data))


def _read_offsets(stream: BinaryIO, rows: int) -> list[int]:
    size = rows * _U64.size
    raw = stream.read(size) if size else b""
    if len(raw) != size:
        raise EOFError(f"expected {size} bytes, got {len(raw)}")
    return [offset for (offset,) in _U64.iter_unpack(raw)]


def _cast(column: ColumnData, target: SqlType | None) -> ColumnData | None:
    if target is None:
        return None
    if column.sql_type == target:
        return column
    return column.cast_to(target)


class MapColumn(ColumnData):
    """A Map column: row ``i`` owns the keys and values between two offsets."""

    def __init__(
        self,
        keys: ColumnData,
        values: ColumnData,
        offsets: Iterable[int] = (),
    ) -> None:
        self.keys = keys
        self.values = values
        self.offsets: list[int] = list(offsets)

    @classmethod
    def load(
        cls,
        data: bytes | bytearray | memoryview | BinaryIO,
        rows: int,
        load_keys: ColumnLoader,
        load_values: ColumnLoader,
    ) -> MapColumn:
        """Read ``rows`` maps; the loaders read the flat key and value columns."""
        stream = _as_stream(data)
        offsets = _read_offsets(stream, rows)
        size = offsets[-1] if offsets else 0
        keys = load_keys(stream, size)
        values = load_values(stream, size)
        return cls(keys, values, offsets)

    @property
    def sql_type(self) -> SqlType:
        return map_of(self.keys.sql_type, self.values.sql_type)

    def save(self, start: int, end: int) -> bytes:
        if not 0 <= start <= end <= len(self.offsets):
            raise IndexError(
                f"range {start}..{end} out of bounds for length {len(self.offsets)}"
            )
        selected = self.offsets[start:end]
        last = selected[-1] if selected else 0
        return b"".join(
            (
                b"".join(_U64.pack(offset) for offset in selected),
                self.keys.save(0, last),
                self.values.save(0, last),
            )
        )

    def __len__(self) -> int:
        return len(self.offsets)

    def push(self, value: Any) -> None:
        if not isinstance(value, Mapping):
            raise TypeError(f"value should be a map, got {type(value).__name__}")
        previous = self.offsets[-1] if self.offsets else 0
        for key, item in value.items():
            self.keys.push(key)
            self.values.push(item)
        self.offsets.append(previous + len(value))

    def at(self, index: int) -> dict[Any, Any]:
        end = self.offsets[index]
        start = self.offsets[index - 1] if index > 0 else 0
        return {self.keys.at(i): self.values.at(i) for i in range(start, end)}

    def default_value(self) -> dict[Any, Any]:
        return {}

    def cast_to(self, target: SqlType) -> ColumnData | None:
        if target.kind is not TypeKind.MAP:
            return None
        keys = _cast(self.keys, target.inner)
        if keys is None:
            return None
        values = _cast(self.values, target.value)
        if values is None:
            return None
        return MapColumn(keys, values, self.offsets)

    def get_timezone(self) -> str | None:
        return self.values.get_timezone()