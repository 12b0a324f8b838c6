"""
Timesheet model: hours an employee reports for a day, authored
independently of the attendance record.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

from sqlalchemy import (Column, DateTime, Float, ForeignKey, Index, Integer,
                        String, UniqueConstraint)

from geoattend.core.enums import TimesheetStatus
from geoattend.db.base import Base
from geoattend.schemas.reconciliation import TimesheetEntry


class Timesheet(Base):
    __tablename__ = "timesheet_entries"
    __table_args__ = (
        UniqueConstraint("employee_id", "date", name="uq_timesheet_emp_date"),
        Index("ix_timesheet_employee_date", "employee_id", "date"),
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    employee_id: int = Column(Integer, ForeignKey("employees.id"), nullable=False)  # type: ignore[assignment]
    date: str = Column(String(10), nullable=False)  # type: ignore[assignment]  # YYYY-MM-DD
    start_time: str | None = Column(String(5), nullable=True)  # type: ignore[assignment]  # HH:MM
    end_time: str | None = Column(String(5), nullable=True)  # type: ignore[assignment]  # HH:MM
    break_duration_minutes: float = Column(Float, nullable=False, default=0.0)  # type: ignore[assignment]
    total_hours: float = Column(Float, nullable=False, default=0.0)  # type: ignore[assignment]
    status: str = Column(  # type: ignore[assignment]
        String(20),
        nullable=False,
        default=TimesheetStatus.DRAFT.value,
    )
    description: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def to_entry(self) -> TimesheetEntry:
        return TimesheetEntry(
            date=date.fromisoformat(self.date),
            start_time=self.start_time,
            end_time=self.end_time,
            break_duration_minutes=self.break_duration_minutes or 0.0,
            total_hours=self.total_hours or 0.0,
            status=TimesheetStatus(self.status),
        )
