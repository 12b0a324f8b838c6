"""Pydantic schemas for attendance / timesheet reconciliation."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field

from geoattend.core.enums import (AttendanceStatus, DiscrepancyType, Severity,
                                  TimesheetStatus)


# ── Reconciliation input ────────────────────────────────────────────
class BreakPeriod(BaseModel):
    start: datetime | None = None
    end: datetime | None = None
    duration_minutes: float = 0.0


class AttendanceRecord(BaseModel):
    date: date
    check_in_time: datetime | None = None
    check_out_time: datetime | None = None
    total_hours: float = 0.0
    status: AttendanceStatus = AttendanceStatus.PRESENT
    breaks: list[BreakPeriod] = Field(default_factory=list)


class TimesheetEntry(BaseModel):
    date: date
    start_time: str | None = None  # HH:MM
    end_time: str | None = None  # HH:MM
    break_duration_minutes: float = 0.0
    total_hours: float = 0.0
    status: TimesheetStatus = TimesheetStatus.DRAFT


# ── Reconciliation output ───────────────────────────────────────────
class Discrepancy(BaseModel):
    date: date
    type: DiscrepancyType
    severity: Severity
    description: str
    attendance_hours: float | None = None
    timesheet_hours: float | None = None
    suggested_action: str


class ReconciliationSummary(BaseModel):
    total_attendance_days: int
    total_timesheet_days: int
    total_discrepancies: int
    high_severity_issues: int
    auto_resolvable: int
    sync_percentage: int


class DiscrepancyReport(BaseModel):
    employee_id: int
    start_date: date
    end_date: date
    summary: ReconciliationSummary
    discrepancies: list[Discrepancy]


# ── Timesheet entries (API) ─────────────────────────────────────────
class TimesheetEntryCreate(BaseModel):
    employee_id: int
    date: date
    start_time: str = Field(pattern=r"^\d{2}:\d{2}$")
    end_time: str = Field(pattern=r"^\d{2}:\d{2}$")
    break_duration_minutes: float = Field(default=0.0, ge=0)
    total_hours: float = Field(ge=0, le=24)
    status: TimesheetStatus = TimesheetStatus.DRAFT
    description: str | None = Field(default=None, max_length=500)


class TimesheetEntryRead(BaseModel):
    id: int
    employee_id: int
    date: str
    start_time: str | None
    end_time: str | None
    break_duration_minutes: float
    total_hours: float
    status: TimesheetStatus
    description: str | None = None

    model_config = {"from_attributes": True}


class ResolveDiscrepanciesRequest(BaseModel):
    employee_id: int
    start_date: date
    end_date: date


class ResolvedItem(BaseModel):
    date: date
    type: DiscrepancyType
    action: str
    timesheet_id: int


class ResolveDiscrepanciesResponse(BaseModel):
    success: bool
    resolved: list[ResolvedItem]
    skipped: list[Discrepancy]


class SyncRequest(BaseModel):
    employee_id: int
    start_date: date
    end_date: date


class SyncResponse(BaseModel):
    success: bool
    created: int
    message: str
