"""ClickHouse value types, scalar encoding and in-memory column storage."""

__version__ = "0.1.0"

__all__ = [
    "column",
    "date_converter",
    "decimal",
    "enums",
    "low_cardinality",
    "map_column",
    "marshal",
    "query",
    "sql_types",
    "string_column",
    "string_pool",
]