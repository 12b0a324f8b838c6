"""
Attendance models: one record per employee per day, its breaks, and the
approval requests raised by check-ins from outside every geofence.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

from sqlalchemy import (JSON, Column, DateTime, Float, ForeignKey, Index,
                        Integer, String, UniqueConstraint)
from sqlalchemy.orm import relationship

from geoattend.core.enums import AttendanceStatus, RequestStatus
from geoattend.db.base import Base
from geoattend.schemas.reconciliation import AttendanceRecord, BreakPeriod


class Attendance(Base):
    __tablename__ = "attendance"
    __table_args__ = (
        UniqueConstraint("employee_id", "date", name="uq_attendance_emp_date"),
        Index("ix_attendance_employee_date", "employee_id", "date"),
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    employee_id: int = Column(Integer, ForeignKey("employees.id"), nullable=False)  # type: ignore[assignment]
    date: str = Column(String(10), nullable=False, index=True)  # type: ignore[assignment]  # YYYY-MM-DD
    check_in: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    check_out: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    total_hours: float = Column(Float, nullable=False, default=0.0)  # type: ignore[assignment]
    status: str = Column(  # type: ignore[assignment]
        String(20),
        nullable=False,
        default=AttendanceStatus.PRESENT.value,
    )
    method: str = Column(String(10), nullable=False, default="GPS")  # type: ignore[assignment]
    # Reported fix plus the geofence verdict, kept as an opaque document
    location: dict | None = Column(JSON, nullable=True)  # type: ignore[assignment]
    check_out_location: dict | None = Column(JSON, nullable=True)  # type: ignore[assignment]
    notes: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]

    breaks = relationship(
        "AttendanceBreak",
        back_populates="attendance",
        cascade="all, delete-orphan",
        order_by="AttendanceBreak.started_at",
    )

    def to_record(self) -> AttendanceRecord:
        """Snapshot for reconciliation. ``breaks`` must already be loaded."""
        return AttendanceRecord(
            date=date.fromisoformat(self.date),
            check_in_time=self.check_in,
            check_out_time=self.check_out,
            total_hours=self.total_hours or 0.0,
            status=AttendanceStatus(self.status),
            breaks=[
                BreakPeriod(start=b.started_at, end=b.ended_at, duration_minutes=b.duration_minutes or 0.0)
                for b in self.breaks
            ],
        )


class AttendanceBreak(Base):
    __tablename__ = "attendance_breaks"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    attendance_id: int = Column(Integer, ForeignKey("attendance.id"), nullable=False, index=True)  # type: ignore[assignment]
    started_at: datetime = Column(DateTime(timezone=True), nullable=False)  # type: ignore[assignment]
    ended_at: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    duration_minutes: float | None = Column(Float, nullable=True)  # type: ignore[assignment]

    attendance = relationship("Attendance", back_populates="breaks")


class AttendanceRequest(Base):
    __tablename__ = "attendance_requests"
    __table_args__ = (Index("ix_attendance_request_employee_date", "employee_id", "date"),)

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    employee_id: int = Column(Integer, ForeignKey("employees.id"), nullable=False)  # type: ignore[assignment]
    date: str = Column(String(10), nullable=False)  # type: ignore[assignment]  # YYYY-MM-DD
    check_in_time: datetime = Column(DateTime(timezone=True), nullable=False)  # type: ignore[assignment]
    location: dict | None = Column(JSON, nullable=True)  # type: ignore[assignment]
    reason: str = Column(String(500), nullable=False)  # type: ignore[assignment]
    status: str = Column(  # type: ignore[assignment]
        String(20),
        nullable=False,
        default=RequestStatus.PENDING.value,
    )
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    reviewed_at: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    review_comments: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
