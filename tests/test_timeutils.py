"""Tests for core/timeutils.py: HH:mm parsing and per-zone wall clock."""

import logging
from datetime import datetime, timezone

import pytest

from dayplanner.core.exceptions import TimeFormatError
from dayplanner.core.timeutils import (
    compare_times,
    current_date_in_zone,
    current_time_in_zone,
    ensure_utc,
    format_remaining,
    format_time_display,
    is_valid_time,
    minutes_to_time,
    time_to_minutes,
)

NOW = datetime(2026, 3, 2, 3, 30, tzinfo=timezone.utc)


@pytest.mark.parametrize("value, expected", [("00:00", 0), ("09:30", 570), ("23:59", 1439)])
def test_time_to_minutes(value, expected):
    assert time_to_minutes(value) == expected


@pytest.mark.parametrize("value", ["24:00", "9:00", "12:60", "ab:cd", "", "12:00:00", None])
def test_time_to_minutes_rejects_malformed(value):
    with pytest.raises(TimeFormatError):
        time_to_minutes(value)


def test_format_error_is_a_value_error():
    with pytest.raises(ValueError):
        time_to_minutes("25:00")


def test_time_to_minutes_strictly_increases_over_the_day():
    values = [time_to_minutes(minutes_to_time(m)) for m in range(24 * 60)]
    assert values == list(range(24 * 60))
    assert all(a < b for a, b in zip(values, values[1:]))


def test_minutes_to_time_inverts_parsing():
    for value in ["00:00", "07:05", "12:30", "23:59"]:
        assert minutes_to_time(time_to_minutes(value)) == value


def test_is_valid_time_and_compare():
    assert is_valid_time("18:45")
    assert not is_valid_time("18:5")
    assert compare_times("09:00", "10:30") == -90


def test_format_helpers():
    assert format_time_display("00:05") == "12:05 AM"
    assert format_time_display("13:30") == "1:30 PM"
    assert format_remaining(45) == "45m"
    assert format_remaining(125) == "2h 5m"
    assert format_remaining(-3) == "0m"


def test_current_time_in_zone_applies_offset():
    assert current_time_in_zone("Asia/Kolkata", NOW) == "09:00"
    assert current_time_in_zone("UTC", NOW) == "03:30"


def test_current_date_in_zone_can_lag_utc():
    # 03:30 UTC is still the previous evening in New York
    assert current_date_in_zone("America/New_York", NOW) == "2026-03-01"
    assert current_date_in_zone("Asia/Tokyo", NOW) == "2026-03-02"


@pytest.mark.parametrize("zone", ["Mars/Olympus_Mons", "Europe", "Etc", "America/"])
def test_unknown_zone_falls_back_to_utc(caplog, zone):
    with caplog.at_level(logging.WARNING):
        assert current_time_in_zone(zone, NOW) == "03:30"
        assert current_date_in_zone(zone, NOW) == "2026-03-02"
    assert repr(zone) in caplog.text


def test_ensure_utc_treats_naive_as_utc():
    naive = datetime(2026, 3, 2, 9, 0)
    assert ensure_utc(naive) == datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)
    assert ensure_utc(None) is None
