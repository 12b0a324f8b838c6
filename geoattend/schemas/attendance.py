"""Pydantic schemas for Employee / Attendance / Settings."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from geoattend.core.enums import AttendanceStatus, RequestStatus
from geoattend.schemas.geofence import GeofenceVerdict

_CODE_RE = re.compile(r"^[A-Za-z0-9_-]{2,32}$")
_HHMM_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
_OFFSET_RE = re.compile(r"^[+-]\d{2}:\d{2}$")


# ── Employee ────────────────────────────────────────────────────────
class EmployeeCreate(BaseModel):
    name: str
    employee_code: str
    email: str | None = None
    department: str | None = None
    position: str | None = None

    @field_validator("employee_code")
    @classmethod
    def _code(cls, v: str) -> str:
        v = v.strip()
        if not _CODE_RE.match(v):
            raise ValueError("Employee code must be 2-32 alphanumeric chars")
        return v

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name must not be empty")
        if len(v) > 200:
            raise ValueError("Name must not exceed 200 characters")
        return v


class EmployeeRead(BaseModel):
    id: int
    name: str
    employee_code: str
    email: str | None
    department: str | None
    position: str | None
    is_active: bool
    created_at: datetime | None

    model_config = {"from_attributes": True}


# ── Attendance ──────────────────────────────────────────────────────
class BreakRead(BaseModel):
    id: int
    started_at: datetime
    ended_at: datetime | None
    duration_minutes: float | None

    model_config = {"from_attributes": True}


class AttendanceRead(BaseModel):
    id: int
    employee_id: int
    date: str
    check_in: datetime | None
    check_out: datetime | None
    total_hours: float
    status: AttendanceStatus
    method: str
    notes: str | None = None
    breaks: list[BreakRead] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class AttendanceRequestRead(BaseModel):
    id: int
    employee_id: int
    date: str
    check_in_time: datetime
    reason: str
    status: RequestStatus
    location: dict | None = None
    reviewed_at: datetime | None = None
    review_comments: str | None = None

    model_config = {"from_attributes": True}


class CheckInResponse(BaseModel):
    success: bool
    requires_approval: bool
    message: str
    attendance: AttendanceRead | None = None
    attendance_request: AttendanceRequestRead | None = None
    verdict: GeofenceVerdict


class CheckOutResponse(BaseModel):
    success: bool
    message: str
    attendance: AttendanceRead
    verdict: GeofenceVerdict | None = None


class BreakRequest(BaseModel):
    employee_id: int


class BreakResponse(BaseModel):
    success: bool
    event: str
    attendance_id: int
    break_id: int
    duration_minutes: float | None = None


class RequestDecision(BaseModel):
    action: Literal["approve", "reject"]
    comments: str | None = Field(default=None, max_length=500)


class RequestDecisionResponse(BaseModel):
    success: bool
    message: str
    attendance_request: AttendanceRequestRead
    attendance: AttendanceRead | None = None


# ── Attendance Settings ────────────────────────────────────────────
class AttendanceSettingsRead(BaseModel):
    work_start: str
    work_end: str
    grace_minutes: int
    timezone_offset: str

    model_config = {"from_attributes": True}


class AttendanceSettingsUpdate(BaseModel):
    work_start: str | None = None
    work_end: str | None = None
    grace_minutes: int | None = Field(default=None, ge=0, le=240)
    timezone_offset: str | None = None

    @field_validator("work_start", "work_end")
    @classmethod
    def _hhmm(cls, v: str | None) -> str | None:
        if v is not None and not _HHMM_RE.match(v):
            raise ValueError("Time must be HH:MM (24h)")
        return v

    @field_validator("timezone_offset")
    @classmethod
    def _offset(cls, v: str | None) -> str | None:
        if v is None:
            return v
        if not _OFFSET_RE.match(v):
            raise ValueError("Timezone offset must look like +05:30")
        hours, minutes = int(v[1:3]), int(v[4:6])
        if hours > 14 or minutes > 59 or (hours == 14 and minutes > 0):
            raise ValueError("Timezone offset must be between -14:00 and +14:00")
        return v


# ── Health ─────────────────────────────────────────────────────────
class HealthResponse(BaseModel):
    db: bool
