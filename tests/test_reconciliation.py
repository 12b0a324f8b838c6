"""Tests for the attendance / timesheet reconciliation rules."""

import math
from datetime import date

import pytest

from geoattend.core.enums import AttendanceStatus, DiscrepancyType, Severity
from geoattend.core.exceptions import InvalidRecord
from geoattend.schemas.reconciliation import (AttendanceRecord, BreakPeriod,
                                              TimesheetEntry)
from geoattend.services.reconciliation import (auto_resolvable,
                                               is_auto_resolvable, reconcile,
                                               records_to_sync, summarize)

DAY = date(2024, 1, 10)


def _att(day=DAY, hours=8.0, status=AttendanceStatus.PRESENT, breaks=()):
    return AttendanceRecord(
        date=day,
        total_hours=hours,
        status=status,
        breaks=[BreakPeriod(duration_minutes=m) for m in breaks],
    )


def _ts(day=DAY, hours=8.0, break_minutes=0.0):
    return TimesheetEntry(date=day, total_hours=hours, break_duration_minutes=break_minutes)


# ── Detection rules ─────────────────────────────────────────────────
def test_missing_timesheet_for_present_day():
    result = reconcile([_att()], [])

    assert len(result) == 1
    d = result[0]
    assert d.type == DiscrepancyType.MISSING_TIMESHEET
    assert d.severity == Severity.HIGH
    assert d.date == DAY
    assert d.attendance_hours == 8.0
    assert d.timesheet_hours is None
    assert d.suggested_action == "Create timesheet entry from attendance data"


@pytest.mark.parametrize(
    "status",
    [AttendanceStatus.LATE, AttendanceStatus.ABSENT, AttendanceStatus.EARLY_DEPARTURE, AttendanceStatus.OVERTIME],
)
def test_non_present_day_without_timesheet_is_not_flagged(status):
    assert reconcile([_att(status=status)], []) == []


def test_missing_attendance_for_timesheet_entry():
    result = reconcile([], [_ts(hours=6.0)])

    assert len(result) == 1
    d = result[0]
    assert d.type == DiscrepancyType.MISSING_ATTENDANCE
    assert d.severity == Severity.MEDIUM
    assert d.timesheet_hours == 6.0
    assert d.attendance_hours is None


def test_large_time_mismatch_is_high():
    result = reconcile([_att(hours=8.0)], [_ts(hours=5.5)])

    assert [d.type for d in result] == [DiscrepancyType.TIME_MISMATCH]
    assert result[0].severity == Severity.HIGH
    assert result[0].description == "Time difference of 2.50 hours between attendance and timesheet"
    assert result[0].attendance_hours == 8.0
    assert result[0].timesheet_hours == 5.5


def test_moderate_time_mismatch_is_medium():
    result = reconcile([_att(hours=8.0)], [_ts(hours=7.0)])

    assert result[0].type == DiscrepancyType.TIME_MISMATCH
    assert result[0].severity == Severity.MEDIUM
    assert "1.00 hours" in result[0].description


def test_exactly_two_hours_is_medium():
    result = reconcile([_att(hours=8.0)], [_ts(hours=6.0)])
    assert result[0].severity == Severity.MEDIUM


def test_small_time_difference_is_tolerated():
    assert reconcile([_att(hours=8.0)], [_ts(hours=7.8)]) == []


def test_break_mismatch_reports_minutes():
    result = reconcile([_att(breaks=[30, 30])], [_ts(break_minutes=30)])

    assert len(result) == 1
    assert result[0].type == DiscrepancyType.BREAK_MISMATCH
    assert result[0].severity == Severity.LOW
    assert result[0].description == "Break time difference of 30 minutes"


def test_break_difference_at_tolerance_is_not_flagged():
    assert reconcile([_att(breaks=[45])], [_ts(break_minutes=30)]) == []


def test_time_and_break_mismatch_on_same_day():
    result = reconcile([_att(hours=8.0, breaks=[60])], [_ts(hours=9.0)])
    assert [d.type for d in result] == [DiscrepancyType.TIME_MISMATCH, DiscrepancyType.BREAK_MISMATCH]


def test_matching_records_produce_nothing():
    assert reconcile([_att(breaks=[30])], [_ts(break_minutes=30)]) == []


def test_empty_inputs():
    assert reconcile([], []) == []


# ── Ordering ────────────────────────────────────────────────────────
def test_sorted_by_severity_then_date():
    attendance = [
        _att(day=date(2024, 1, 12), hours=8.0),  # no timesheet -> HIGH
        _att(day=date(2024, 1, 11), hours=8.0, breaks=[60]),  # break -> LOW
        _att(day=date(2024, 1, 10), hours=8.0),  # no timesheet -> HIGH
    ]
    timesheet = [
        _ts(day=date(2024, 1, 11), hours=8.0),
        _ts(day=date(2024, 1, 13), hours=4.0),  # no attendance -> MEDIUM
    ]

    result = reconcile(attendance, timesheet)

    assert [(d.date.day, d.severity) for d in result] == [
        (10, Severity.HIGH),
        (12, Severity.HIGH),
        (13, Severity.MEDIUM),
        (11, Severity.LOW),
    ]


def test_reconcile_is_idempotent():
    attendance = [_att(), _att(day=date(2024, 1, 11), hours=3.0)]
    timesheet = [_ts(day=date(2024, 1, 11), hours=8.0), _ts(day=date(2024, 1, 12))]

    assert reconcile(attendance, timesheet) == reconcile(attendance, timesheet)


def test_inputs_are_not_mutated():
    attendance = [_att(day=date(2024, 1, 11)), _att(day=date(2024, 1, 10), breaks=[20])]
    timesheet = [_ts(day=date(2024, 1, 11), hours=2.0)]
    before = ([a.model_copy(deep=True) for a in attendance], [t.model_copy(deep=True) for t in timesheet])

    reconcile(attendance, timesheet)

    assert (attendance, timesheet) == before


# ── Invalid input ───────────────────────────────────────────────────
def test_duplicate_attendance_dates_rejected():
    with pytest.raises(InvalidRecord, match="Duplicate attendance"):
        reconcile([_att(), _att(hours=4.0)], [])


def test_duplicate_timesheet_dates_rejected():
    with pytest.raises(InvalidRecord, match="Duplicate timesheet"):
        reconcile([], [_ts(), _ts()])


@pytest.mark.parametrize("hours", [-1.0, math.nan, math.inf])
def test_bad_attendance_hours_rejected(hours):
    with pytest.raises(InvalidRecord):
        reconcile([_att(hours=hours)], [])


@pytest.mark.parametrize("hours", [-0.5, math.nan])
def test_bad_timesheet_hours_rejected(hours):
    with pytest.raises(InvalidRecord):
        reconcile([], [_ts(hours=hours)])


def test_negative_break_rejected():
    with pytest.raises(InvalidRecord):
        reconcile([_att(breaks=[-5])], [_ts()])


# ── Thresholds ──────────────────────────────────────────────────────
def test_custom_thresholds():
    attendance = [_att(hours=8.0, breaks=[10])]
    timesheet = [_ts(hours=7.8)]

    assert reconcile(attendance, timesheet) == []

    strict = reconcile(
        attendance, timesheet, hours_tolerance=0.1, hours_high_threshold=0.15, break_tolerance=0.1
    )
    assert [(d.type, d.severity) for d in strict] == [
        (DiscrepancyType.TIME_MISMATCH, Severity.HIGH),
        (DiscrepancyType.BREAK_MISMATCH, Severity.LOW),
    ]


# ── Auto-resolution / sync / summary ────────────────────────────────
def test_auto_resolvable_types():
    attendance = [
        _att(day=date(2024, 1, 10)),
        _att(day=date(2024, 1, 11), hours=8.0, breaks=[60]),
    ]
    timesheet = [_ts(day=date(2024, 1, 11), hours=5.0), _ts(day=date(2024, 1, 12))]
    result = reconcile(attendance, timesheet)

    fixable = auto_resolvable(result)
    assert {d.type for d in fixable} == {DiscrepancyType.MISSING_TIMESHEET, DiscrepancyType.TIME_MISMATCH}
    assert all(is_auto_resolvable(d) for d in fixable)
    assert len(result) - len(fixable) == 2


def test_records_to_sync_only_worked_present_days():
    attendance = [
        _att(day=date(2024, 1, 10), hours=8.0),
        _att(day=date(2024, 1, 11), hours=0.0),
        _att(day=date(2024, 1, 12), hours=8.0, status=AttendanceStatus.LATE),
        _att(day=date(2024, 1, 13), hours=7.0),
    ]
    timesheet = [_ts(day=date(2024, 1, 13))]

    assert [r.date for r in records_to_sync(attendance, timesheet)] == [date(2024, 1, 10)]


def test_summary_counts():
    attendance = [
        _att(day=date(2024, 1, 10)),
        _att(day=date(2024, 1, 11), hours=8.0),
        _att(day=date(2024, 1, 12), status=AttendanceStatus.ABSENT, hours=0.0),
    ]
    timesheet = [_ts(day=date(2024, 1, 11), hours=5.0)]
    result = reconcile(attendance, timesheet)

    summary = summarize(attendance, timesheet, result)

    assert summary.total_attendance_days == 2
    assert summary.total_timesheet_days == 1
    assert summary.total_discrepancies == 2
    assert summary.high_severity_issues == 2
    assert summary.auto_resolvable == 2
    assert summary.sync_percentage == 50


def test_summary_with_no_present_days():
    summary = summarize([], [], [])
    assert summary.sync_percentage == 0
    assert summary.total_discrepancies == 0
