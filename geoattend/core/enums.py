"""
Status / classification enums shared by the services, models and schemas.
"""

from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LATE = "LATE"
    EARLY_DEPARTURE = "EARLY_DEPARTURE"
    OVERTIME = "OVERTIME"


class TimesheetStatus(str, Enum):
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    APPROVED = "APPROVED"


class RequestStatus(str, Enum):
    """Approval state of an out-of-range check-in."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class DiscrepancyType(str, Enum):
    MISSING_TIMESHEET = "MISSING_TIMESHEET"
    MISSING_ATTENDANCE = "MISSING_ATTENDANCE"
    TIME_MISMATCH = "TIME_MISMATCH"
    BREAK_MISMATCH = "BREAK_MISMATCH"


class Severity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    @property
    def weight(self) -> int:
        return _SEVERITY_WEIGHT[self]


_SEVERITY_WEIGHT = {Severity.HIGH: 3, Severity.MEDIUM: 2, Severity.LOW: 1}


class AccuracyConfidence(str, Enum):
    """Confidence tier of a GPS fix, derived from its reported accuracy."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
