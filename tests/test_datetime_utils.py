"""Tests for timezone / work-rule helpers."""

from datetime import datetime, timedelta, timezone

import pytest

from geoattend.core.datetime_utils import (ensure_utc, is_late, local_day,
                                           local_hhmm, parse_tz_offset)


@pytest.mark.parametrize(
    "offset, expected",
    [("+05:30", timedelta(hours=5, minutes=30)), ("-04:00", timedelta(hours=-4)), ("+00:00", timedelta(0))],
)
def test_parse_tz_offset(offset, expected):
    assert parse_tz_offset(offset).utcoffset(None) == expected


def test_ensure_utc_tags_naive_timestamps():
    naive = datetime(2024, 1, 10, 3, 0)
    assert ensure_utc(naive).tzinfo == timezone.utc
    aware = datetime(2024, 1, 10, 3, 0, tzinfo=parse_tz_offset("+05:30"))
    assert ensure_utc(aware) is aware


def test_local_day_crosses_midnight():
    late_evening_utc = datetime(2024, 1, 10, 20, 0, tzinfo=timezone.utc)
    assert local_day(late_evening_utc, "+05:30") == "2024-01-11"
    assert local_day(late_evening_utc, "-04:00") == "2024-01-10"


def test_local_hhmm():
    assert local_hhmm(datetime(2024, 1, 10, 3, 30), "+05:30") == "09:00"
    assert local_hhmm(None, "+05:30") is None


@pytest.mark.parametrize(
    "utc_hour, utc_minute, late",
    [(3, 0, False), (3, 45, False), (3, 46, True), (5, 0, True)],
)
def test_is_late_uses_grace_period(utc_hour, utc_minute, late):
    # work starts 09:00 local (+05:30), 15 minutes grace -> cutoff 03:45 UTC
    check_in = datetime(2024, 1, 10, utc_hour, utc_minute, tzinfo=timezone.utc)
    assert is_late(check_in, "09:00", 15, "+05:30") is late
