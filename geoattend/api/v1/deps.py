"""
FastAPI dependencies and shared lookups: database session, employee,
work-location and work-rule loading.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from geoattend.db.session import async_session_factory
from geoattend.models.attendance_settings import AttendanceSettings
from geoattend.models.employee import Employee, WorkLocation


# ── Database session ────────────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


# ── Lookups ─────────────────────────────────────────────────────────
async def get_active_employee(db: AsyncSession, employee_id: int) -> Employee:
    """Fetch an active employee or raise 404 (deactivated employees are 403)."""
    result = await db.execute(select(Employee).where(Employee.id == employee_id))
    employee = result.scalar_one_or_none()
    if employee is None:
        raise HTTPException(status_code=404, detail="Employee not found")
    if not employee.is_active:
        raise HTTPException(status_code=403, detail="Employee account is deactivated")
    return employee


async def get_active_locations(db: AsyncSession, employee_id: int) -> list[WorkLocation]:
    """Active work locations in assignment order (oldest first)."""
    result = await db.execute(
        select(WorkLocation)
        .where(WorkLocation.employee_id == employee_id, WorkLocation.is_active.is_(True))
        .order_by(WorkLocation.id.asc())
    )
    return list(result.scalars().all())


# ── Work rules ──────────────────────────────────────────────────────
DEFAULT_WORK_RULES = {
    "work_start": "09:00",
    "work_end": "18:00",
    "grace_minutes": 15,
    "timezone_offset": "+05:30",
}


async def get_work_rules(db: AsyncSession) -> AttendanceSettings:
    """The settings row, or an unsaved one holding the defaults."""
    result = await db.execute(select(AttendanceSettings).limit(1))
    rules = result.scalar_one_or_none()
    if rules is None:
        return AttendanceSettings(id=1, **DEFAULT_WORK_RULES)
    return rules
