"""Cocoa reference-date conversions.

`NSDate` stores seconds since 2001-01-01T00:00:00Z as a float (`NS.time`).
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

COCOA_EPOCH = datetime(2001, 1, 1, tzinfo=timezone.utc)
COCOA_EPOCH_UNIX_OFFSET = 978307200


def nsdate_to_datetime(timestamp: float) -> datetime:
    """Convert an `NS.time` value into an aware UTC datetime.

    Precision is kept to the microsecond, the finest `datetime` offers.
    """

    return COCOA_EPOCH + timedelta(seconds=float(timestamp))


def datetime_to_nsdate(value: datetime) -> float:
    """Convert a datetime into an `NS.time` value. Naive values are UTC."""

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return (value - COCOA_EPOCH).total_seconds()
