"""Fixed-width little-endian encoding of scalar column values."""

from __future__ import annotations

import struct

from .sql_types import SqlType, TypeKind

_INT_LAYOUT = {
    TypeKind.UINT8: (1, False),
    TypeKind.UINT16: (2, False),
    TypeKind.UINT32: (4, False),
    TypeKind.UINT64: (8, False),
    TypeKind.UINT128: (16, False),
    TypeKind.INT8: (1, True),
    TypeKind.INT16: (2, True),
    TypeKind.INT32: (4, True),
    TypeKind.INT64: (8, True),
    TypeKind.INT128: (16, True),
}

_FLOAT_FORMAT = {
    TypeKind.FLOAT32: "<f",
    TypeKind.FLOAT64: "<d",
}


def _kind(kind: TypeKind | SqlType) -> TypeKind:
    return kind.kind if isinstance(kind, SqlType) else kind


def _size(kind: TypeKind) -> int:
    if kind is TypeKind.BOOL:
        return 1
    if kind in _INT_LAYOUT:
        return _INT_LAYOUT[kind][0]
    if kind in _FLOAT_FORMAT:
        return struct.calcsize(_FLOAT_FORMAT[kind])
    raise ValueError(f"{kind.value} has no fixed-width encoding")


def buffer(kind: TypeKind | SqlType) -> bytearray:
    """A zeroed scratch buffer large enough for one value of ``kind``."""
    return bytearray(_size(_kind(kind)))


def marshal(value: bool | int | float, kind: TypeKind | SqlType) -> bytes:
    """Encode ``value`` as the little-endian bytes of ``kind``."""
    k = _kind(kind)
    if k is TypeKind.BOOL:
        return bytes([1 if value else 0])
    if k in _INT_LAYOUT:
        if not isinstance(value, int):
            raise TypeError(f"{k.value} needs an integer, got {type(value).__name__}")
        width, signed = _INT_LAYOUT[k]
        try:
            return value.to_bytes(width, "little", signed=signed)
        except OverflowError:
            raise OverflowError(f"{value} does not fit in {k.value}") from None
    if k in _FLOAT_FORMAT:
        try:
            return struct.pack(_FLOAT_FORMAT[k], value)
        except struct.error as exc:
            raise TypeError(str(exc)) from None
    raise ValueError(f"{k.value} has no fixed-width encoding")


def unmarshal(data: bytes | bytearray | memoryview, kind: TypeKind | SqlType) -> bool | int | float:
    """Decode one value of ``kind`` from its little-endian bytes."""
    k = _kind(kind)
    size = _size(k)
    raw = bytes(data)
    if len(raw) != size:
        raise ValueError(f"{k.value} needs {size} bytes, got {len(raw)}")
    if k is TypeKind.BOOL:
        return raw[0] != 0
    if k in _INT_LAYOUT:
        return int.from_bytes(raw, "little", signed=_INT_LAYOUT[k][1])
    return struct.unpack(_FLOAT_FORMAT[k], raw)[0]