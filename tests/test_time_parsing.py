from __future__ import annotations

from datetime import datetime

from utils.time_parsing import parse_timestamp, timestamp_sort_key


def test_parse_timestamp_formats():
    assert parse_timestamp("2024-07-15 12:00:00") == datetime(2024, 7, 15, 12, 0, 0)
    assert parse_timestamp("2024-07-15T12:00:00+02:00") == datetime(2024, 7, 15, 10, 0, 0)
    assert parse_timestamp("15.07.2024") == datetime(2024, 7, 15)
    assert parse_timestamp("") is None
    assert parse_timestamp("garbage") is None


def test_offset_outside_datetime_range_is_unparsable():
    assert parse_timestamp("0001-01-01T00:00:00+05:00") is None
    assert timestamp_sort_key("0001-01-01T00:00:00+05:00") == datetime.min
