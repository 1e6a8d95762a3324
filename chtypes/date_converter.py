"""Conversion of dates and datetimes to their on-wire integer form."""

from __future__ import annotations

import datetime as _dt

_UNIX_EPOCH_DAY = 719_163


def get_days(value: _dt.date) -> int:
    """Days since 1970-01-01, truncated to an unsigned 16-bit value."""
    return (value.toordinal() - _UNIX_EPOCH_DAY) & 0xFFFF


def get_stamp(value: _dt.datetime) -> int:
    """Unix timestamp in seconds, truncated to an unsigned 32-bit value."""
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError("datetime must carry a timezone")
    return int(value.timestamp()) & 0xFFFFFFFF