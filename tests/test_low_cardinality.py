import io
import struct

import pytest
from hypothesis import given
from hypothesis import strategies as st

from chtypes.column import VectorColumn
from chtypes.low_cardinality import (
    HAS_ADDITIONAL_KEYS_BIT,
    LOW_CARDINALITY_VERSION,
    NEED_GLOBAL_DICTIONARY_BIT,
    NEED_UPDATE_DICTIONARY_BIT,
    DeserializeError,
    IndexType,
    LowCardinalityColumn,
    LowCardinalityIndex,
)
from chtypes.sql_types import STRING, UINT32, TypeKind, low_cardinality
from chtypes.string_column import StringColumn


def u64(value):
    return struct.pack("<Q", value)


def load_strings(stream, size):
    return StringColumn.load(stream, size)


def load_uint32(stream, size):
    return VectorColumn.load(TypeKind.UINT32, stream, size)


def string_column(values):
    column = LowCardinalityColumn(StringColumn())
    for value in values:
        column.push(value)
    return column


def test_from_flags_reads_low_byte():
    assert IndexType.from_flags(0) is IndexType.UINT8
    assert IndexType.from_flags(1 | HAS_ADDITIONAL_KEYS_BIT) is IndexType.UINT16
    assert IndexType.from_flags(2) is IndexType.UINT32
    assert IndexType.from_flags(3 | NEED_UPDATE_DICTIONARY_BIT) is IndexType.UINT64


def test_from_flags_rejects_unknown_type():
    with pytest.raises(DeserializeError, match="Invalid index serialization"):
        IndexType.from_flags(4)


def test_index_flags_carry_type_and_bits():
    index = LowCardinalityIndex(IndexType.UINT32)
    assert index.flags() == 2 | HAS_ADDITIONAL_KEYS_BIT | NEED_UPDATE_DICTIONARY_BIT
    assert IndexType.from_flags(index.flags()) is IndexType.UINT32


def test_index_widens_past_255_entries():
    index = LowCardinalityIndex()
    for _ in range(255):
        index.push(0)
    assert index.index_type is IndexType.UINT8
    index.push(7)
    assert index.index_type is IndexType.UINT16
    assert len(index) == 256
    assert index.get(255) == 7
    assert index.get(0) == 0


def test_index_load_and_save_round_trip():
    index = LowCardinalityIndex(IndexType.UINT16, [1, 2, 3])
    raw = index.save(0, 3)
    loaded = LowCardinalityIndex.load(raw, 3, IndexType.UINT16)
    assert [loaded.get(i) for i in range(len(loaded))] == [1, 2, 3]


def test_push_deduplicates_values():
    column = string_column(["a", "b", "a", "a", "b"])
    assert len(column) == 5
    assert len(column.inner) == 2
    assert [column.at(i) for i in range(5)] == [b"a", b"b", b"a", b"a", b"b"]


def test_sql_type_wraps_inner():
    assert string_column([]).sql_type == low_cardinality(STRING)
    assert str(string_column([]).sql_type) == "LowCardinality(String)"


def test_save_wire_layout():
    column = string_column(["a", "b", "a"])
    expected = (
        u64(LOW_CARDINALITY_VERSION)
        + u64(HAS_ADDITIONAL_KEYS_BIT | NEED_UPDATE_DICTIONARY_BIT)
        + u64(2)
        + b"\x01a\x01b"
        + u64(3)
        + bytes([0, 1, 0])
    )
    assert column.save(0, 3) == expected


def test_save_empty_range_is_empty():
    assert string_column(["x"]).save(1, 1) == b""


def test_load_round_trip_strings():
    column = string_column(["x", "y", "x", "z"])
    loaded = LowCardinalityColumn.load(column.save(0, 4), 4, load_strings)
    assert list(loaded) == list(column)
    assert loaded.sql_type == column.sql_type


def test_load_round_trip_numbers():
    column = LowCardinalityColumn(VectorColumn(TypeKind.UINT32))
    for value in [5, 9, 5, 5, 100]:
        column.push(value)
    loaded = LowCardinalityColumn.load(io.BytesIO(column.save(0, 5)), 5, load_uint32)
    assert list(loaded) == [5, 9, 5, 5, 100]
    assert loaded.sql_type == low_cardinality(UINT32)


def test_push_after_load_reuses_dictionary():
    column = string_column(["x", "y"])
    loaded = LowCardinalityColumn.load(column.save(0, 2), 2, load_strings)
    loaded.push(b"y")
    loaded.push("w")
    assert len(loaded.inner) == 3
    assert list(loaded) == [b"x", b"y", b"y", b"w"]


def test_load_empty_column():
    loaded = LowCardinalityColumn.load(b"\x00", 0, load_strings)
    assert len(loaded) == 0
    assert len(loaded.inner) == 0


def test_load_rejects_wrong_version():
    data = u64(2) + u64(HAS_ADDITIONAL_KEYS_BIT)
    with pytest.raises(DeserializeError, match="version"):
        LowCardinalityColumn.load(data, 1, load_strings)


def test_load_rejects_global_dictionary():
    data = u64(1) + u64(HAS_ADDITIONAL_KEYS_BIT | NEED_GLOBAL_DICTIONARY_BIT)
    with pytest.raises(DeserializeError, match="Global dictionary"):
        LowCardinalityColumn.load(data, 1, load_strings)


def test_load_rejects_missing_additional_keys():
    data = u64(1) + u64(NEED_UPDATE_DICTIONARY_BIT)
    with pytest.raises(DeserializeError, match="HasAdditionalKeysBit"):
        LowCardinalityColumn.load(data, 1, load_strings)


def test_load_truncated_data():
    data = string_column(["a", "b"]).save(0, 2)[:-1]
    with pytest.raises(EOFError):
        LowCardinalityColumn.load(data, 2, load_strings)


@given(st.lists(st.text(alphabet="abc", max_size=3), max_size=40))
def test_push_preserves_values_and_distinct_count(values):
    column = string_column(values)
    assert list(column) == [v.encode() for v in values]
    assert len(column.inner) == len(set(values))
    if values:
        loaded = LowCardinalityColumn.load(column.save(0, len(values)), len(values), load_strings)
        assert list(loaded) == list(column)