"""
Discrepancy reporting endpoints.

Each report loads one employee's attendance records and timesheet entries
for a date range in two queries, then hands them to the reconciler.
"""

from __future__ import annotations

import csv
import io
import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from geoattend.api.v1.deps import get_active_employee, get_db
from geoattend.models.attendance import Attendance
from geoattend.models.timesheet import Timesheet
from geoattend.schemas.attendance import HealthResponse
from geoattend.schemas.reconciliation import Discrepancy, DiscrepancyReport
from geoattend.services.reconciliation import reconcile, summarize

router = APIRouter(tags=["reports"])
logger = logging.getLogger(__name__)

CSV_COLUMNS = ["Date", "Type", "Severity", "Description", "Suggested Action"]


# ── Helpers ─────────────────────────────────────────────────────────
def check_date_range(start_date: date, end_date: date) -> None:
    if start_date > end_date:
        raise HTTPException(status_code=400, detail="start_date must not be after end_date")


async def load_range(
    db: AsyncSession, employee_id: int, start_date: date, end_date: date
) -> tuple[list[Attendance], list[Timesheet]]:
    """Attendance rows (breaks loaded) and timesheet rows for the range."""
    start, end = start_date.isoformat(), end_date.isoformat()
    att_result = await db.execute(
        select(Attendance)
        .where(
            Attendance.employee_id == employee_id,
            Attendance.date >= start,
            Attendance.date <= end,
        )
        .options(selectinload(Attendance.breaks))
        .order_by(Attendance.date.asc())
    )
    ts_result = await db.execute(
        select(Timesheet)
        .where(
            Timesheet.employee_id == employee_id,
            Timesheet.date >= start,
            Timesheet.date <= end,
        )
        .order_by(Timesheet.date.asc())
    )
    return list(att_result.scalars().all()), list(ts_result.scalars().all())


async def build_report(
    db: AsyncSession, employee_id: int, start_date: date, end_date: date
) -> DiscrepancyReport:
    check_date_range(start_date, end_date)
    await get_active_employee(db, employee_id)

    attendance_rows, timesheet_rows = await load_range(db, employee_id, start_date, end_date)
    attendance = [row.to_record() for row in attendance_rows]
    timesheet = [row.to_entry() for row in timesheet_rows]

    discrepancies = reconcile(attendance, timesheet)
    logger.info(
        "Reconciled employee %d %s..%s: %d discrepancies",
        employee_id,
        start_date,
        end_date,
        len(discrepancies),
    )
    return DiscrepancyReport(
        employee_id=employee_id,
        start_date=start_date,
        end_date=end_date,
        summary=summarize(attendance, timesheet, discrepancies),
        discrepancies=discrepancies,
    )


def discrepancies_to_csv(discrepancies: list[Discrepancy]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for d in discrepancies:
        writer.writerow(
            [d.date.isoformat(), d.type.value, d.severity.value, d.description, d.suggested_action]
        )
    return buf.getvalue()


# ── Discrepancies ───────────────────────────────────────────────────
@router.get("/reports/discrepancies", response_model=DiscrepancyReport)
async def discrepancy_report(
    employee_id: int,
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: AsyncSession = Depends(get_db),
) -> DiscrepancyReport:
    """Attendance vs timesheet discrepancies, most severe first."""
    return await build_report(db, employee_id, start_date, end_date)


@router.get("/reports/discrepancies/csv")
async def discrepancy_csv(
    employee_id: int,
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: AsyncSession = Depends(get_db),
) -> StreamingResponse:
    """Export the discrepancy report as a CSV file download."""
    report = await build_report(db, employee_id, start_date, end_date)
    filename = f"attendance-discrepancies-{employee_id}-{start_date}-{end_date}.csv"
    return StreamingResponse(
        iter([discrepancies_to_csv(report.discrepancies)]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


# ── Health ──────────────────────────────────────────────────────────
@router.get("/health", response_model=HealthResponse)
async def health(db: AsyncSession = Depends(get_db)) -> HealthResponse:
    """Public health check: DB connectivity."""
    result = HealthResponse(db=False)
    try:
        await db.execute(select(1))
        result.db = True
    except Exception as e:
        logger.error("Health check DB failure: %s", e)
    return result
