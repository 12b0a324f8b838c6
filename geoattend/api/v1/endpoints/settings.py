"""
Work-rule settings endpoints.

Singleton pattern: only one row in attendance_settings. GET retrieves it,
PUT updates it. If no row exists, one is created with defaults on first use.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from geoattend.api.v1.deps import DEFAULT_WORK_RULES, get_db
from geoattend.models.attendance_settings import AttendanceSettings
from geoattend.schemas.attendance import AttendanceSettingsRead, AttendanceSettingsUpdate

router = APIRouter(tags=["settings"])
logger = logging.getLogger(__name__)


async def _get_or_create_settings(db: AsyncSession) -> AttendanceSettings:
    """Fetch the singleton settings row, creating it with defaults if absent."""
    result = await db.execute(select(AttendanceSettings).limit(1))
    rules = result.scalar_one_or_none()
    if rules is None:
        rules = AttendanceSettings(id=1, **DEFAULT_WORK_RULES)
        db.add(rules)
        await db.commit()
        await db.refresh(rules)
        logger.info("Created default attendance settings")
    return rules


@router.get("/settings", response_model=AttendanceSettingsRead)
async def get_settings(db: AsyncSession = Depends(get_db)) -> AttendanceSettings:
    """Current work rules (start, end, grace period, timezone)."""
    return await _get_or_create_settings(db)


@router.put("/settings", response_model=AttendanceSettingsRead)
async def update_settings(
    body: AttendanceSettingsUpdate,
    db: AsyncSession = Depends(get_db),
) -> AttendanceSettings:
    rules = await _get_or_create_settings(db)

    for field, value in body.model_dump(exclude_unset=True).items():
        setattr(rules, field, value)

    await db.commit()
    await db.refresh(rules)
    logger.info("Attendance settings updated: %s", body.model_dump(exclude_unset=True))
    return rules
