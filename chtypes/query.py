"""An SQL statement together with its query id."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace


@dataclass(frozen=True)
class Query:
    """SQL text and an optional identifier sent with it."""

    sql: str
    query_id: str = ""

    def with_id(self, query_id: str) -> Query:
        """Return a copy carrying the given query id."""
        return replace(self, query_id=str(query_id))

    def map_sql(self, func: Callable[[str], str]) -> Query:
        """Return a copy whose SQL text is rewritten by ``func``."""
        return replace(self, sql=func(self.sql))