import pytest

from chtypes.sql_types import (
    DATE,
    DATETIME,
    FLOAT64,
    INT32,
    IPV4,
    IPV6,
    STRING,
    UINT8,
    UINT64,
    UUID,
    ServerInfo,
    SimpleAggFunc,
    array,
    datetime64,
    decimal,
    enum8,
    enum16,
    fixed_string,
    low_cardinality,
    map_of,
    nullable,
    simple_aggregate_function,
)


def test_display():
    assert str(UINT8) == "UInt8"
    assert f"{array(UINT8)}" == "Array(UInt8)"
    assert "{}".format(low_cardinality(UINT8)) == "LowCardinality(UInt8)"


def test_to_string():
    assert str(nullable(UINT8)) == "Nullable(UInt8)"


@pytest.mark.parametrize(
    "sql_type, expected",
    [
        (STRING, "String"),
        (IPV4, "IPv4"),
        (IPV6, "IPv6"),
        (UUID, "UUID"),
        (DATE, "Date"),
        (DATETIME, "DateTime"),
        (fixed_string(10), "FixedString(10)"),
        (array(INT32), "Array(Int32)"),
        (low_cardinality(STRING), "LowCardinality(String)"),
        (map_of(STRING, UINT8), "Map(String, UInt8)"),
        (decimal(9, 4), "Decimal(9, 4)"),
        (datetime64(3, "UTC"), "DateTime64(3, 'UTC')"),
        (
            simple_aggregate_function(SimpleAggFunc.SUM, UINT64),
            "SimpleAggregateFunction(sum, UInt64)",
        ),
        (enum8([("a", 1), ("b", 2)]), "Enum8('a' = 1,'b' = 2)"),
        (enum16({"x": -5}), "Enum16('x' = -5)"),
        (nullable(array(FLOAT64)), "Nullable(Array(Float64))"),
    ],
)
def test_type_names(sql_type, expected):
    assert str(sql_type) == expected


@pytest.mark.parametrize("func", list(SimpleAggFunc))
def test_agg_func_round_trip(func):
    assert SimpleAggFunc.parse(str(func)) is func


def test_agg_func_names():
    assert SimpleAggFunc.parse("anyLast") is SimpleAggFunc.ANY_LAST
    assert SimpleAggFunc.parse("groupUniqArrayArray") is SimpleAggFunc.GROUP_UNIQ_ARRAY_ARRAY


def test_agg_func_unknown():
    with pytest.raises(ValueError):
        SimpleAggFunc.parse("median")


def test_levels():
    assert UINT8.level() == 0
    assert nullable(UINT8).level() == 1
    assert array(nullable(UINT8)).level() == 2
    assert map_of(STRING, array(UINT8)).level() == 2
    assert low_cardinality(nullable(STRING)).level() == 1


def test_map_levels():
    assert UINT8.map_level() == 0
    assert array(array(UINT8)).map_level() == 1
    assert map_of(STRING, UINT8).map_level() == 1
    assert low_cardinality(STRING).map_level() == 0


def test_is_datetime():
    assert DATETIME.is_datetime()
    assert datetime64(6, "UTC").is_datetime()
    assert not DATE.is_datetime()


def test_inner_low_cardinality():
    assert STRING.is_inner_low_cardinality()
    assert fixed_string(4).is_inner_low_cardinality()
    assert DATETIME.is_inner_low_cardinality()
    assert not FLOAT64.is_inner_low_cardinality()
    assert not nullable(STRING).is_inner_low_cardinality()


def test_equality_and_hash():
    assert nullable(UINT8) == nullable(UINT8)
    assert nullable(UINT8) != nullable(UINT64)
    cache = {map_of(STRING, UINT8): "m"}
    assert cache[map_of(STRING, UINT8)] == "m"


def test_enum_value_out_of_range():
    with pytest.raises(ValueError):
        enum8([("big", 200)])


def test_server_info_repr():
    info = ServerInfo(
        name="ClickHouse",
        revision=54449,
        minor_version=8,
        major_version=21,
        timezone="UTC",
        patch_version=1,
    )
    assert repr(info) == "ClickHouse 21.8.54449.1 (UTC)"