"""Column storage for fixed-width scalars, nullable and aggregate-function columns."""

from __future__ import annotations

import io
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from typing import Any, BinaryIO

from .marshal import buffer, marshal, unmarshal
from .sql_types import (
    SimpleAggFunc,
    SqlType,
    TypeKind,
    nullable,
    simple_aggregate_function,
)


def _as_stream(data: bytes | bytearray | memoryview | BinaryIO) -> BinaryIO:
    if hasattr(data, "read"):
        return data  # type: ignore[return-value]
    return io.BytesIO(bytes(data))


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    raw = stream.read(size) if size else b""
    if len(raw) != size:
        raise EOFError(f"expected {size} bytes, got {len(raw)}")
    return raw


def _check_range(start: int, end: int, length: int) -> None:
    if not 0 <= start <= end <= length:
        raise IndexError(f"range {start}..{end} out of bounds for length {length}")


class ColumnData(ABC):
    """Common interface of every column's in-memory data."""

    @property
    @abstractmethod
    def sql_type(self) -> SqlType:
        """The type of the values held."""

    @abstractmethod
    def save(self, start: int, end: int) -> bytes:
        """Wire encoding of the rows ``start`` up to ``end``."""

    @abstractmethod
    def __len__(self) -> int:
        """Number of rows."""

    @abstractmethod
    def push(self, value: Any) -> None:
        """Append one value."""

    @abstractmethod
    def at(self, index: int) -> Any:
        """The value at row ``index``."""

    @abstractmethod
    def default_value(self) -> Any:
        """The value stored in place of a null."""

    def cast_to(self, target: SqlType) -> ColumnData | None:
        """A view of this data as ``target``, or None when it cannot be cast."""
        return None

    def get_timezone(self) -> str | None:
        return None

    def __iter__(self) -> Iterator[Any]:
        for index in range(len(self)):
            yield self.at(index)


class VectorColumn(ColumnData):
    """A column of fixed-width numbers or booleans."""

    def __init__(self, kind: TypeKind | SqlType, values: Iterable[Any] = ()) -> None:
        self._type = kind if isinstance(kind, SqlType) else SqlType(kind)
        self._width = len(buffer(self._type))
        self._data: list[Any] = []
        for value in values:
            self.push(value)

    @classmethod
    def load(
        cls,
        kind: TypeKind | SqlType,
        data: bytes | bytearray | memoryview | BinaryIO,
        size: int,
    ) -> VectorColumn:
        """Read ``size`` values of ``kind`` from bytes or a binary stream."""
        column = cls(kind)
        width = column._width
        raw = _read_exact(_as_stream(data), size * width)
        column._data = [
            unmarshal(raw[offset : offset + width], column._type)
            for offset in range(0, len(raw), width)
        ]
        return column

    @property
    def sql_type(self) -> SqlType:
        return self._type

    def save(self, start: int, end: int) -> bytes:
        _check_range(start, end, len(self._data))
        return b"".join(marshal(value, self._type) for value in self._data[start:end])

    def __len__(self) -> int:
        return len(self._data)

    def push(self, value: Any) -> None:
        self._data.append(unmarshal(marshal(value, self._type), self._type))

    def at(self, index: int) -> Any:
        return self._data[index]

    def default_value(self) -> Any:
        return unmarshal(buffer(self._type), self._type)


class NullableColumn(ColumnData):
    """A column wrapping another one with a per-row null flag."""

    def __init__(self, inner: ColumnData, nulls: Iterable[int] | None = None) -> None:
        self.inner = inner
        self.nulls = bytearray(nulls) if nulls is not None else bytearray(len(inner))

    @property
    def sql_type(self) -> SqlType:
        return nullable(self.inner.sql_type)

    def save(self, start: int, end: int) -> bytes:
        _check_range(start, end, len(self))
        return bytes(self.nulls[start:end]) + self.inner.save(start, end)

    def __len__(self) -> int:
        size = len(self.inner)
        if len(self.nulls) != size:
            raise RuntimeError(
                f"null map has {len(self.nulls)} entries but inner column has {size}"
            )
        return size

    def push(self, value: Any) -> None:
        if value is None:
            self.inner.push(self.inner.default_value())
            self.nulls.append(1)
        else:
            self.inner.push(value)
            self.nulls.append(0)

    def at(self, index: int) -> Any:
        if self.nulls[index] == 1:
            return None
        return self.inner.at(index)

    def default_value(self) -> Any:
        return None

    def cast_to(self, target: SqlType) -> ColumnData | None:
        if target.kind is TypeKind.NULLABLE and target.inner is not None:
            inner = self.inner.cast_to(target.inner)
            if inner is not None:
                return NullableColumn(inner, self.nulls)
        return None

    def get_timezone(self) -> str | None:
        return self.inner.get_timezone()


class SimpleAggregateFunctionColumn(ColumnData):
    """A column tagged with the aggregate function that merges its values."""

    def __init__(self, inner: ColumnData, func: SimpleAggFunc) -> None:
        self.inner = inner
        self.func = func

    @property
    def sql_type(self) -> SqlType:
        return simple_aggregate_function(self.func, self.inner.sql_type)

    def save(self, start: int, end: int) -> bytes:
        return self.inner.save(start, end)

    def __len__(self) -> int:
        return len(self.inner)

    def push(self, value: Any) -> None:
        self.inner.push(value)

    def at(self, index: int) -> Any:
        return self.inner.at(index)

    def default_value(self) -> Any:
        return self.inner.default_value()

    def cast_to(self, target: SqlType) -> ColumnData | None:
        if target.kind is TypeKind.SIMPLE_AGGREGATE_FUNCTION and target.inner is not None:
            inner = self.inner.cast_to(target.inner)
            if inner is not None and target.func is not None:
                return SimpleAggregateFunctionColumn(inner, target.func)
        return None

    def get_timezone(self) -> str | None:
        return self.inner.get_timezone()


def extract_nulls_and_values(
    column: ColumnData, start: int, end: int
) -> tuple[bytes, list[Any]]:
    """Null flags and optional values of a nullable column's rows ``start``..``end``."""
    nulls = bytearray()
    values: list[Any] = []
    for index in range(start, end):
        if column.sql_type.kind is not TypeKind.NULLABLE:
            raise TypeError(f"{column.sql_type} cannot be cast to Nullable")
        value = column.at(index)
        nulls.append(1 if value is None else 0)
        values.append(value)
    return bytes(nulls), values