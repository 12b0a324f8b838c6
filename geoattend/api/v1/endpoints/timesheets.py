"""
Timesheet entry endpoints + the two write-back actions driven by
reconciliation: auto-resolving discrepancies and syncing attendance into
missing timesheet entries.
"""

from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from geoattend.api.v1.deps import get_active_employee, get_db, get_work_rules
from geoattend.api.v1.endpoints.reports import check_date_range, load_range
from geoattend.core.datetime_utils import local_hhmm
from geoattend.core.enums import DiscrepancyType, TimesheetStatus
from geoattend.models.attendance import Attendance
from geoattend.models.timesheet import Timesheet
from geoattend.schemas.reconciliation import (ResolveDiscrepanciesRequest,
                                              ResolveDiscrepanciesResponse,
                                              ResolvedItem, SyncRequest,
                                              SyncResponse,
                                              TimesheetEntryCreate,
                                              TimesheetEntryRead)
from geoattend.services.reconciliation import (is_auto_resolvable, reconcile,
                                               records_to_sync)

router = APIRouter(prefix="/timesheets", tags=["timesheets"])
logger = logging.getLogger(__name__)


# ── Helpers ─────────────────────────────────────────────────────────
def _timesheet_from_attendance(attendance: Attendance, tz_offset: str) -> Timesheet:
    return Timesheet(
        employee_id=attendance.employee_id,
        date=attendance.date,
        start_time=local_hhmm(attendance.check_in, tz_offset),
        end_time=local_hhmm(attendance.check_out, tz_offset),
        break_duration_minutes=sum((b.duration_minutes or 0.0) for b in attendance.breaks),
        total_hours=attendance.total_hours,
        status=TimesheetStatus.DRAFT.value,
        description="Created from attendance data",
    )


# ── Entries ─────────────────────────────────────────────────────────
@router.post("/entries", response_model=TimesheetEntryRead, status_code=201)
async def create_timesheet_entry(
    body: TimesheetEntryCreate,
    db: AsyncSession = Depends(get_db),
) -> Timesheet:
    await get_active_employee(db, body.employee_id)
    day = body.date.isoformat()

    existing = await db.execute(
        select(Timesheet).where(Timesheet.employee_id == body.employee_id, Timesheet.date == day)
    )
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=409, detail=f"Timesheet entry for {day} already exists")

    entry = Timesheet(**{**body.model_dump(), "date": day, "status": body.status.value})
    db.add(entry)
    await db.commit()
    await db.refresh(entry)
    logger.info("Timesheet entry %s for employee %d (%.2f h)", day, body.employee_id, body.total_hours)
    return entry


@router.get("/entries", response_model=list[TimesheetEntryRead])
async def list_timesheet_entries(
    employee_id: int,
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: AsyncSession = Depends(get_db),
) -> list[Timesheet]:
    check_date_range(start_date, end_date)
    _, timesheet_rows = await load_range(db, employee_id, start_date, end_date)
    return timesheet_rows


# ── Reconciliation write-backs ──────────────────────────────────────
@router.post("/resolve-discrepancies", response_model=ResolveDiscrepanciesResponse)
async def resolve_discrepancies(
    body: ResolveDiscrepanciesRequest,
    db: AsyncSession = Depends(get_db),
) -> ResolveDiscrepanciesResponse:
    """Fix what attendance data can fix; everything else needs a human.

    MISSING_TIMESHEET creates a DRAFT entry from the attendance record and
    TIME_MISMATCH aligns the entry's hours with attendance (back to DRAFT
    for re-approval). Other types, and days not yet checked out, are
    returned as ``skipped``.
    """
    check_date_range(body.start_date, body.end_date)
    await get_active_employee(db, body.employee_id)
    tz_offset = (await get_work_rules(db)).timezone_offset

    attendance_rows, timesheet_rows = await load_range(
        db, body.employee_id, body.start_date, body.end_date
    )
    discrepancies = reconcile(
        [row.to_record() for row in attendance_rows],
        [row.to_entry() for row in timesheet_rows],
    )

    attendance_by_date = {row.date: row for row in attendance_rows}
    timesheet_by_date = {row.date: row for row in timesheet_rows}

    created: list[tuple[DiscrepancyType, date, Timesheet]] = []
    skipped = []
    for d in discrepancies:
        if not is_auto_resolvable(d):
            skipped.append(d)
            continue
        day = d.date.isoformat()
        attendance = attendance_by_date[day]
        # An open day has no final hours to copy
        if attendance.check_out is None or (attendance.total_hours or 0.0) <= 0:
            skipped.append(d)
            continue
        if d.type == DiscrepancyType.MISSING_TIMESHEET:
            entry = _timesheet_from_attendance(attendance, tz_offset)
            db.add(entry)
        else:
            entry = timesheet_by_date[day]
            entry.total_hours = attendance.total_hours
            entry.status = TimesheetStatus.DRAFT.value
            entry.description = "Hours aligned with attendance data"
        created.append((d.type, d.date, entry))

    await db.commit()

    resolved = [
        ResolvedItem(
            date=day,
            type=kind,
            action=(
                "Created timesheet entry from attendance data"
                if kind == DiscrepancyType.MISSING_TIMESHEET
                else "Adjusted timesheet hours to match attendance"
            ),
            timesheet_id=entry.id,
        )
        for kind, day, entry in created
    ]
    logger.info(
        "Auto-resolved %d discrepancies for employee %d (%d need manual review)",
        len(resolved),
        body.employee_id,
        len(skipped),
    )
    return ResolveDiscrepanciesResponse(success=True, resolved=resolved, skipped=skipped)


@router.post("/sync", response_model=SyncResponse)
async def sync_from_attendance(
    body: SyncRequest,
    db: AsyncSession = Depends(get_db),
) -> SyncResponse:
    """Create DRAFT timesheet entries for worked days that have none."""
    check_date_range(body.start_date, body.end_date)
    await get_active_employee(db, body.employee_id)
    tz_offset = (await get_work_rules(db)).timezone_offset

    attendance_rows, timesheet_rows = await load_range(
        db, body.employee_id, body.start_date, body.end_date
    )
    pending = records_to_sync(
        [row.to_record() for row in attendance_rows],
        [row.to_entry() for row in timesheet_rows],
    )
    if not pending:
        return SyncResponse(
            success=True,
            created=0,
            message="All attendance records already have corresponding timesheet entries",
        )

    attendance_by_date = {row.date: row for row in attendance_rows}
    for record in pending:
        db.add(_timesheet_from_attendance(attendance_by_date[record.date.isoformat()], tz_offset))
    await db.commit()

    logger.info("Synced %d timesheet entries for employee %d", len(pending), body.employee_id)
    return SyncResponse(
        success=True,
        created=len(pending),
        message=f"Created {len(pending)} timesheet entries from attendance data",
    )
