from datetime import datetime, timezone

from core.services.nsdate import COCOA_EPOCH_UNIX_OFFSET, datetime_to_nsdate, nsdate_to_datetime


def test_reference_date_matches_unix_offset():
    assert nsdate_to_datetime(0).timestamp() == COCOA_EPOCH_UNIX_OFFSET


def test_known_timestamp():
    assert nsdate_to_datetime(600000000.5) == datetime(2020, 1, 6, 10, 40, 0, 500000, tzinfo=timezone.utc)


def test_naive_datetimes_are_utc():
    assert datetime_to_nsdate(datetime(2001, 1, 2)) == 86400.0
    assert datetime_to_nsdate(datetime(2001, 1, 1, tzinfo=timezone.utc)) == 0.0
