"""Chunked storage for many short byte strings."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import NamedTuple

_AVG_STR_SIZE = 80


class _StringPtr(NamedTuple):
    chunk: int
    shift: int
    length: int


class StringPool:
    """Byte strings packed into a few large chunks, addressed by index."""

    def __init__(self, capacity: int = 0) -> None:
        self._chunks: list[bytearray] = []
        self._pointers: list[_StringPtr] = []
        self._position = 0
        self._capacity = capacity

    @classmethod
    def from_strings(cls, source: Iterable[bytes | str]) -> StringPool:
        """Build a pool holding each item of ``source`` in order."""
        items = [s.encode() if isinstance(s, str) else bytes(s) for s in source]
        pool = cls(len(items))
        for item in items:
            pool.allocate(len(item))[:] = item
        return pool

    def _free_space(self) -> int:
        if not self._chunks:
            return 0
        return len(self._chunks[-1]) - self._position

    def _reserve(self, size: int) -> None:
        self._position = 0
        self._chunks.append(bytearray(max(self._capacity * _AVG_STR_SIZE, size)))

    def allocate(self, size: int) -> memoryview:
        """Append a new zeroed string of ``size`` bytes and return a writable view of it."""
        if size < 0:
            raise ValueError("size must not be negative")
        if not self._chunks or self._free_space() < size:
            self._reserve(size)
        chunk = len(self._chunks) - 1
        shift = self._position
        self._position += size
        self._pointers.append(_StringPtr(chunk, shift, size))
        return memoryview(self._chunks[chunk])[shift : shift + size]

    def get(self, index: int) -> bytes:
        """The string stored at ``index``."""
        chunk, shift, length = self._pointers[index]
        return bytes(self._chunks[chunk][shift : shift + length])

    def __len__(self) -> int:
        return len(self._pointers)

    def strings(self) -> Iterator[bytes]:
        """Yield every stored string in order."""
        for index in range(len(self._pointers)):
            yield self.get(index)