"""
GPS check-in / check-out + break endpoints.

Check-in runs the geofence validator against the employee's active work
locations:

- no locations assigned  → 400, the employee must contact HR
- outside every geofence → a PENDING attendance request for manager approval
- inside a geofence      → an attendance record, PRESENT or LATE

A manager approving a pending request turns it into a PRESENT record.
"""

from __future__ import annotations

import logging
from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from geoattend.api.v1.deps import (get_active_employee, get_active_locations,
                                   get_db, get_work_rules)
from geoattend.core.datetime_utils import ensure_utc, is_late, local_day, now_utc
from geoattend.core.enums import AttendanceStatus, RequestStatus
from geoattend.core.exceptions import NoLocationsConfigured
from geoattend.models.attendance import Attendance, AttendanceBreak, AttendanceRequest
from geoattend.schemas.attendance import (AttendanceRead, AttendanceRequestRead,
                                          BreakRequest, BreakResponse,
                                          CheckInResponse, CheckOutResponse,
                                          RequestDecision,
                                          RequestDecisionResponse)
from geoattend.schemas.geofence import (Coordinate, GeofenceVerdict,
                                        GpsCheckInRequest, GpsCheckOutRequest,
                                        LocationCheckRequest)
from geoattend.services.geofence import validate

router = APIRouter(prefix="/attendance", tags=["attendance"])
logger = logging.getLogger(__name__)


# ── Helpers ─────────────────────────────────────────────────────────
def _minutes_between(start: datetime, end: datetime) -> float:
    return round((end - ensure_utc(start)).total_seconds() / 60, 2)


async def _verdict_for(db: AsyncSession, employee_id: int, current: Coordinate) -> GeofenceVerdict:
    locations = await get_active_locations(db, employee_id)
    return validate(current, [loc.to_assigned() for loc in locations])


async def _load_attendance(
    db: AsyncSession, employee_id: int, day: str
) -> Attendance | None:
    result = await db.execute(
        select(Attendance)
        .where(Attendance.employee_id == employee_id, Attendance.date == day)
        .options(selectinload(Attendance.breaks))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _require_open_attendance(db: AsyncSession, employee_id: int, day: str) -> Attendance:
    attendance = await _load_attendance(db, employee_id, day)
    if attendance is None or attendance.check_in is None:
        raise HTTPException(status_code=400, detail="No check-in record found for today")
    if attendance.check_out is not None:
        raise HTTPException(status_code=400, detail="Already checked out today")
    return attendance


def _location_snapshot(current: Coordinate, verdict: GeofenceVerdict) -> dict:
    return {**current.model_dump(mode="json"), "validation": verdict.model_dump(mode="json")}


def _worked_hours(attendance: Attendance, until: datetime) -> float:
    elapsed = (until - ensure_utc(attendance.check_in)).total_seconds()
    break_seconds = sum((b.duration_minutes or 0.0) * 60 for b in attendance.breaks)
    return round(max(elapsed - break_seconds, 0.0) / 3600, 2)


# ── Location check ──────────────────────────────────────────────────
@router.post("/validate-location", response_model=GeofenceVerdict)
async def validate_location(
    body: LocationCheckRequest,
    db: AsyncSession = Depends(get_db),
) -> GeofenceVerdict:
    """Dry run: report where the employee stands relative to their geofences."""
    await get_active_employee(db, body.employee_id)
    return await _verdict_for(db, body.employee_id, body.location)


# ── Check-in / check-out ────────────────────────────────────────────
@router.post("/gps-check-in", response_model=CheckInResponse)
async def gps_check_in(
    body: GpsCheckInRequest,
    db: AsyncSession = Depends(get_db),
) -> CheckInResponse:
    employee = await get_active_employee(db, body.employee_id)
    rules = await get_work_rules(db)

    now = now_utc()
    today = local_day(now, rules.timezone_offset)

    existing = await _load_attendance(db, employee.id, today)
    if existing is not None and existing.check_in is not None:
        raise HTTPException(status_code=400, detail="Already checked in today")

    verdict = await _verdict_for(db, employee.id, body.location)
    if verdict.no_locations_configured:
        raise NoLocationsConfigured()

    snapshot = _location_snapshot(body.location, verdict)

    if verdict.requires_approval:
        request = AttendanceRequest(
            employee_id=employee.id,
            date=today,
            check_in_time=now,
            location=snapshot,
            reason=body.notes or "Check-in from outside assigned location",
            status=RequestStatus.PENDING.value,
        )
        db.add(request)
        await db.commit()
        await db.refresh(request)

        nearest = verdict.nearest_location
        message = "You are outside your assigned work location(s). An attendance request has been submitted for approval."
        if nearest is not None:
            message += f" Distance to nearest assigned location: {round(nearest.distance_meters)}m"
        logger.warning(
            "Out-of-range check-in for employee %d (nearest %s at %.0fm), request %d pending",
            employee.id,
            nearest.name if nearest else "-",
            nearest.distance_meters if nearest else 0.0,
            request.id,
        )
        return CheckInResponse(
            success=False,
            requires_approval=True,
            message=message,
            attendance_request=AttendanceRequestRead.model_validate(request),
            verdict=verdict,
        )

    status = (
        AttendanceStatus.LATE
        if is_late(now, rules.work_start, rules.grace_minutes, rules.timezone_offset)
        else AttendanceStatus.PRESENT
    )
    attendance = existing or Attendance(employee_id=employee.id, date=today, breaks=[])
    attendance.check_in = now
    attendance.status = status.value
    attendance.method = "GPS"
    attendance.location = snapshot
    attendance.notes = body.notes
    attendance.total_hours = 0.0
    if existing is None:
        db.add(attendance)
    await db.commit()

    attendance = await _load_attendance(db, employee.id, today)
    logger.info("Check-in %s for employee %d at %s", status.value, employee.id, now.isoformat())
    return CheckInResponse(
        success=True,
        requires_approval=False,
        message=f"Checked in at {verdict.nearest_location.name}" if verdict.nearest_location else "Checked in",
        attendance=AttendanceRead.model_validate(attendance),
        verdict=verdict,
    )


@router.post("/gps-check-out", response_model=CheckOutResponse)
async def gps_check_out(
    body: GpsCheckOutRequest,
    db: AsyncSession = Depends(get_db),
) -> CheckOutResponse:
    """Close today's record. The location is recorded but does not gate check-out."""
    employee = await get_active_employee(db, body.employee_id)
    rules = await get_work_rules(db)

    now = now_utc()
    today = local_day(now, rules.timezone_offset)
    attendance = await _require_open_attendance(db, employee.id, today)

    verdict = None
    if body.location is not None:
        verdict = await _verdict_for(db, employee.id, body.location)
        attendance.check_out_location = _location_snapshot(body.location, verdict)

    # Close a break left open
    for brk in attendance.breaks:
        if brk.ended_at is None:
            brk.ended_at = now
            brk.duration_minutes = _minutes_between(brk.started_at, now)

    attendance.check_out = now
    attendance.total_hours = _worked_hours(attendance, now)
    if body.notes:
        attendance.notes = body.notes
    await db.commit()

    attendance = await _load_attendance(db, employee.id, today)
    logger.info("Check-out for employee %d, %.2f h worked", employee.id, attendance.total_hours)
    return CheckOutResponse(
        success=True,
        message=f"Checked out after {attendance.total_hours:.2f} hours",
        attendance=AttendanceRead.model_validate(attendance),
        verdict=verdict,
    )


# ── Break endpoints ─────────────────────────────────────────────────
@router.post("/break/start", response_model=BreakResponse)
async def break_start(
    body: BreakRequest,
    db: AsyncSession = Depends(get_db),
) -> BreakResponse:
    employee = await get_active_employee(db, body.employee_id)
    rules = await get_work_rules(db)
    now = now_utc()
    today = local_day(now, rules.timezone_offset)

    attendance = await _require_open_attendance(db, employee.id, today)
    if any(b.ended_at is None for b in attendance.breaks):
        raise HTTPException(status_code=409, detail="A break is already in progress")

    brk = AttendanceBreak(attendance_id=attendance.id, started_at=now)
    db.add(brk)
    await db.commit()
    await db.refresh(brk)

    logger.info("Break start for employee %d", employee.id)
    return BreakResponse(success=True, event="BREAK_START", attendance_id=attendance.id, break_id=brk.id)


@router.post("/break/end", response_model=BreakResponse)
async def break_end(
    body: BreakRequest,
    db: AsyncSession = Depends(get_db),
) -> BreakResponse:
    employee = await get_active_employee(db, body.employee_id)
    rules = await get_work_rules(db)
    now = now_utc()
    today = local_day(now, rules.timezone_offset)

    attendance = await _require_open_attendance(db, employee.id, today)
    brk = next((b for b in attendance.breaks if b.ended_at is None), None)
    if brk is None:
        raise HTTPException(status_code=409, detail="No break in progress")

    brk.ended_at = now
    brk.duration_minutes = _minutes_between(brk.started_at, now)
    await db.commit()

    logger.info("Break end for employee %d (%.1f min)", employee.id, brk.duration_minutes)
    return BreakResponse(
        success=True,
        event="BREAK_END",
        attendance_id=attendance.id,
        break_id=brk.id,
        duration_minutes=brk.duration_minutes,
    )


# ── Listings ────────────────────────────────────────────────────────
@router.get("", response_model=list[AttendanceRead])
async def list_attendance(
    employee_id: int,
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: AsyncSession = Depends(get_db),
) -> list[Attendance]:
    result = await db.execute(
        select(Attendance)
        .where(
            Attendance.employee_id == employee_id,
            Attendance.date >= start_date.isoformat(),
            Attendance.date <= end_date.isoformat(),
        )
        .options(selectinload(Attendance.breaks))
        .order_by(Attendance.date.asc())
    )
    return list(result.scalars().all())


@router.get("/requests", response_model=list[AttendanceRequestRead])
async def list_attendance_requests(
    employee_id: int | None = None,
    status: RequestStatus = RequestStatus.PENDING,
    db: AsyncSession = Depends(get_db),
) -> list[AttendanceRequest]:
    """Out-of-range check-ins waiting for (or past) manager review."""
    query = select(AttendanceRequest).where(AttendanceRequest.status == status.value)
    if employee_id is not None:
        query = query.where(AttendanceRequest.employee_id == employee_id)
    result = await db.execute(query.order_by(AttendanceRequest.created_at.desc()))
    return list(result.scalars().all())


@router.post("/requests/{request_id}/approve", response_model=RequestDecisionResponse)
async def decide_attendance_request(
    request_id: int,
    body: RequestDecision,
    db: AsyncSession = Depends(get_db),
) -> RequestDecisionResponse:
    """Approve or reject an out-of-range check-in.

    Approval upserts a PRESENT attendance record for the request's day, using
    the check-in time and location captured when the request was made.
    """
    result = await db.execute(select(AttendanceRequest).where(AttendanceRequest.id == request_id))
    request = result.scalar_one_or_none()
    if request is None:
        raise HTTPException(status_code=404, detail="Attendance request not found")
    if request.status != RequestStatus.PENDING.value:
        raise HTTPException(status_code=400, detail="Attendance request has already been processed")

    request.reviewed_at = now_utc()
    request.review_comments = body.comments

    if body.action == "reject":
        request.status = RequestStatus.REJECTED.value
        if not body.comments:
            request.review_comments = "Request rejected"
        await db.commit()
        logger.info("Attendance request %d rejected", request.id)
        return RequestDecisionResponse(
            success=True,
            message="Attendance request rejected",
            attendance_request=AttendanceRequestRead.model_validate(request),
        )

    request.status = RequestStatus.APPROVED.value
    attendance = await _load_attendance(db, request.employee_id, request.date)
    if attendance is None:
        attendance = Attendance(employee_id=request.employee_id, date=request.date, breaks=[])
        db.add(attendance)
    attendance.check_in = request.check_in_time
    attendance.status = AttendanceStatus.PRESENT.value
    attendance.method = "GPS"
    attendance.location = request.location
    attendance.notes = f"Approved out-of-location check-in. {body.comments or ''}".strip()
    if attendance.total_hours is None:
        attendance.total_hours = 0.0
    await db.commit()

    attendance = await _load_attendance(db, request.employee_id, request.date)
    logger.info(
        "Attendance request %d approved, employee %d present on %s",
        request.id,
        request.employee_id,
        request.date,
    )
    return RequestDecisionResponse(
        success=True,
        message="Attendance request approved successfully",
        attendance_request=AttendanceRequestRead.model_validate(request),
        attendance=AttendanceRead.model_validate(attendance),
    )
