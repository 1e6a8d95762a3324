# chtypes

Value types, scalar encoding and in-memory column storage for the
ClickHouse native protocol. Pure Python, no runtime dependencies.

## Modules

- `chtypes.sql_types`: `SqlType`, a frozen description of a column type
  built from a `TypeKind`. It has ready-made constants (`UINT8`, `STRING`,
  `DATETIME`, and so on) and helpers for the compound types: `nullable`,
  `array`, `low_cardinality`, `map_of`, `decimal`, `fixed_string`, `enum8`,
  `enum16`, `datetime64` and `simple_aggregate_function`. `str()` gives the
  ClickHouse type name, for example `Nullable(UInt8)`. `level()` and
  `map_level()` report how deeply a type is nested. `SimpleAggFunc.parse`
  maps a function name such as `"anyLast"` to its member. The module also
  holds the plain records `Progress`, `ProfileInfo`, `TableColumns` and
  `ServerInfo`.
- `chtypes.decimal`: `Decimal`, a fixed-point value of up to 18 digits,
  stored as an integer and a scale. `Decimal.of(source, scale)` builds one
  from an int or a float. `with_scale` rescales it, truncating toward zero.
  `internal()` returns the stored integer. Two decimals with different scales
  compare equal when they have the same value. `NoBits.from_precision` gives
  the storage width needed for a precision.
- `chtypes.enums`: `Enum8` and `Enum16`, which hold a range-checked numeric
  enum value.
- `chtypes.query`: `Query`, SQL text with a query id. `with_id` and
  `map_sql` return modified copies.
- `chtypes.marshal`: `marshal(value, kind)` and `unmarshal(data, kind)`
  encode and decode the little-endian form of Bool, the integer types (8 to
  128 bits) and the float types. `buffer(kind)` returns a zeroed scratch
  buffer of the right size.
- `chtypes.date_converter`: `get_days(date)` gives days since 1970-01-01 as
  an unsigned 16-bit value. `get_stamp(datetime)` gives the Unix timestamp of
  a timezone-aware datetime as an unsigned 32-bit value.
- `chtypes.string_pool`: `StringPool`, which packs byte strings into large
  chunks. Strings are read back by index or through `strings()`.
- `chtypes.column`: the `ColumnData` interface and three implementations.
  `VectorColumn` stores fixed-width scalars, `NullableColumn` wraps another
  column and adds a null map, and `SimpleAggregateFunctionColumn` tags a
  column with an aggregate function. `extract_nulls_and_values` returns the
  null flags and values for a range of a nullable column.
- `chtypes.string_column`: `StringColumn`, a String column backed by a
  `StringPool`. It stores bytes, and `str` values are encoded as UTF-8.
- `chtypes.low_cardinality`: `LowCardinalityColumn`, which stores each
  distinct value once. Its `LowCardinalityIndex` starts 8 bits wide and
  widens as it grows. `IndexType.from_flags` decodes the wire flags.
- `chtypes.map_column`: `MapColumn`, which keeps flat key and value columns
  and a list of offsets.

Every column implements `push`, `at`, `len()` and iteration. Each one also
has `save(start, end)`, which returns the wire bytes for those rows. Columns
can be read back with `VectorColumn.load`, `StringColumn.load`,
`LowCardinalityColumn.load` and `MapColumn.load`. The last two take callables
that read their inner columns.

## Example

```python
from chtypes.decimal import Decimal
from chtypes.sql_types import nullable, SqlType, TypeKind
from chtypes.column import NullableColumn, VectorColumn
from chtypes.string_column import StringColumn
from chtypes.map_column import MapColumn

d = Decimal.of(2, 4)
print(d)             # 2.0000
print(d.internal())  # 20000

print(nullable(SqlType(TypeKind.UINT8)))  # Nullable(UInt8)

col = NullableColumn(VectorColumn(TypeKind.UINT8))
col.push(None)
col.push(5)
print(list(col))     # [None, 5]

maps = MapColumn(StringColumn(), VectorColumn(TypeKind.UINT8))
maps.push({"a": 1})
print(maps.at(0))    # {b'a': 1}
```

## What it does not do

This package only models values and columns in memory. It does not:

- open connections or run queries;
- build or stream blocks;
- parse type names from strings;
- provide column storage for Array, FixedString, Date, DateTime, Decimal,
  Enum, IPv4/IPv6 or UUID values.

## Install

```
pip install .
```

## Running the tests

```
pip install ".[test]"
pytest
```