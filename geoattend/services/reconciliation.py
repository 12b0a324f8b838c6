"""
Attendance ↔ timesheet reconciliation.

Compares one employee's attendance records with their timesheet entries over
a date range and reports every day where the two disagree. Pure functions:
inputs are never mutated and no I/O is performed.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from datetime import date
from typing import TypeVar

from geoattend.core.config import settings
from geoattend.core.enums import AttendanceStatus, DiscrepancyType, Severity
from geoattend.core.exceptions import InvalidRecord
from geoattend.schemas.reconciliation import (AttendanceRecord, Discrepancy,
                                              ReconciliationSummary,
                                              TimesheetEntry)

AUTO_RESOLVABLE_TYPES = frozenset(
    {DiscrepancyType.MISSING_TIMESHEET, DiscrepancyType.TIME_MISMATCH}
)

_R = TypeVar("_R", AttendanceRecord, TimesheetEntry)


# ── Helpers ─────────────────────────────────────────────────────────
def _check_amount(value: float, what: str, day: date) -> None:
    if not math.isfinite(value) or value < 0:
        raise InvalidRecord(f"Invalid {what} on {day.isoformat()}: {value!r}")


def _check_attendance(record: AttendanceRecord) -> None:
    _check_amount(record.total_hours, "attendance total_hours", record.date)
    for brk in record.breaks:
        _check_amount(brk.duration_minutes, "break duration_minutes", record.date)


def _check_timesheet(entry: TimesheetEntry) -> None:
    _check_amount(entry.total_hours, "timesheet total_hours", entry.date)
    _check_amount(entry.break_duration_minutes, "timesheet break_duration_minutes", entry.date)


def _index_by_date(records: Iterable[_R], source: str) -> dict[date, _R]:
    indexed: dict[date, _R] = {}
    for record in records:
        if record.date in indexed:
            raise InvalidRecord(
                f"Duplicate {source} entries for {record.date.isoformat()}"
            )
        indexed[record.date] = record
    return indexed


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# ── Reconciliation ──────────────────────────────────────────────────
def reconcile(
    attendance: Sequence[AttendanceRecord],
    timesheet: Sequence[TimesheetEntry],
    *,
    hours_tolerance: float | None = None,
    hours_high_threshold: float | None = None,
    break_tolerance: float | None = None,
) -> list[Discrepancy]:
    """Return discrepancies sorted by severity (HIGH first).

    Within one severity, days come in ascending date order and each day's
    discrepancies keep their detection order.
    """
    hours_tolerance = (
        settings.TIME_MISMATCH_TOLERANCE_HOURS if hours_tolerance is None else hours_tolerance
    )
    hours_high_threshold = (
        settings.TIME_MISMATCH_HIGH_HOURS if hours_high_threshold is None else hours_high_threshold
    )
    break_tolerance = (
        settings.BREAK_MISMATCH_TOLERANCE_HOURS if break_tolerance is None else break_tolerance
    )

    for record in attendance:
        _check_attendance(record)
    for entry in timesheet:
        _check_timesheet(entry)

    attendance_by_date = _index_by_date(attendance, "attendance")
    timesheet_by_date = _index_by_date(timesheet, "timesheet")

    found: list[Discrepancy] = []
    for day in sorted(attendance_by_date.keys() | timesheet_by_date.keys()):
        record = attendance_by_date.get(day)
        entry = timesheet_by_date.get(day)

        if record is not None and entry is None and record.status == AttendanceStatus.PRESENT:
            found.append(
                Discrepancy(
                    date=day,
                    type=DiscrepancyType.MISSING_TIMESHEET,
                    severity=Severity.HIGH,
                    description="No timesheet entry found for attendance record",
                    attendance_hours=record.total_hours,
                    suggested_action="Create timesheet entry from attendance data",
                )
            )

        if entry is not None and record is None:
            found.append(
                Discrepancy(
                    date=day,
                    type=DiscrepancyType.MISSING_ATTENDANCE,
                    severity=Severity.MEDIUM,
                    description="No attendance record found for timesheet entry",
                    timesheet_hours=entry.total_hours,
                    suggested_action="Verify attendance or update timesheet",
                )
            )

        if record is None or entry is None:
            continue

        hours_diff = abs(record.total_hours - entry.total_hours)
        if hours_diff > hours_tolerance:
            found.append(
                Discrepancy(
                    date=day,
                    type=DiscrepancyType.TIME_MISMATCH,
                    severity=Severity.HIGH if hours_diff > hours_high_threshold else Severity.MEDIUM,
                    description=(
                        f"Time difference of {hours_diff:.2f} hours "
                        "between attendance and timesheet"
                    ),
                    attendance_hours=record.total_hours,
                    timesheet_hours=entry.total_hours,
                    suggested_action="Review and reconcile time entries",
                )
            )

        attendance_break_hours = sum(b.duration_minutes for b in record.breaks) / 60
        break_diff = abs(attendance_break_hours - entry.break_duration_minutes / 60)
        if break_diff > break_tolerance:
            found.append(
                Discrepancy(
                    date=day,
                    type=DiscrepancyType.BREAK_MISMATCH,
                    severity=Severity.LOW,
                    description=f"Break time difference of {_round_half_up(break_diff * 60)} minutes",
                    suggested_action="Verify break times in both systems",
                )
            )

    # sorted() is stable, so ties keep their detection order
    return sorted(found, key=lambda d: d.severity.weight, reverse=True)


def is_auto_resolvable(discrepancy: Discrepancy) -> bool:
    """Only missing timesheets and hour mismatches can be fixed from attendance data."""
    return discrepancy.type in AUTO_RESOLVABLE_TYPES


def auto_resolvable(discrepancies: Iterable[Discrepancy]) -> list[Discrepancy]:
    return [d for d in discrepancies if is_auto_resolvable(d)]


def records_to_sync(
    attendance: Sequence[AttendanceRecord],
    timesheet: Sequence[TimesheetEntry],
) -> list[AttendanceRecord]:
    """Worked days (PRESENT, hours > 0) that still have no timesheet entry."""
    covered = {entry.date for entry in timesheet}
    return [
        record
        for record in attendance
        if record.date not in covered
        and record.status == AttendanceStatus.PRESENT
        and record.total_hours > 0
    ]


def summarize(
    attendance: Sequence[AttendanceRecord],
    timesheet: Sequence[TimesheetEntry],
    discrepancies: Sequence[Discrepancy],
) -> ReconciliationSummary:
    present_days = sum(1 for r in attendance if r.status == AttendanceStatus.PRESENT)
    sync_percentage = round(len(timesheet) / present_days * 100) if present_days else 0
    return ReconciliationSummary(
        total_attendance_days=present_days,
        total_timesheet_days=len(timesheet),
        total_discrepancies=len(discrepancies),
        high_severity_issues=sum(1 for d in discrepancies if d.severity == Severity.HIGH),
        auto_resolvable=len(auto_resolvable(discrepancies)),
        sync_percentage=sync_percentage,
    )
