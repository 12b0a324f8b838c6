"""
Employee CRUD + work-location assignment endpoints.

Assigning locations replaces the employee's active set: previous
assignments are deactivated, never deleted, so past verdicts that name
them stay meaningful.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from geoattend.api.v1.deps import get_active_employee, get_active_locations, get_db
from geoattend.core.config import settings
from geoattend.models.employee import Employee, WorkLocation
from geoattend.schemas.attendance import EmployeeCreate, EmployeeRead
from geoattend.schemas.geofence import WorkLocationAssign, WorkLocationRead

router = APIRouter(prefix="/employees", tags=["employees"])
logger = logging.getLogger(__name__)


# ── Employee CRUD ───────────────────────────────────────────────────
@router.get("", response_model=list[EmployeeRead])
async def list_employees(
    skip: int = 0,
    limit: int = Query(default=50, le=500),
    search: str | None = None,
    db: AsyncSession = Depends(get_db),
) -> list[Employee]:
    query = (
        select(Employee)
        .where(Employee.is_active.is_(True))
        .order_by(Employee.name)
        .offset(skip)
        .limit(limit)
    )
    if search:
        # Escape SQL LIKE metacharacters to prevent wildcard injection
        safe_search = search.replace("%", r"\%").replace("_", r"\_")
        query = query.where(Employee.name.ilike(f"%{safe_search}%", escape="\\"))
    result = await db.execute(query)
    return list(result.scalars().all())


@router.post("", response_model=EmployeeRead, status_code=201)
async def create_employee(
    body: EmployeeCreate,
    db: AsyncSession = Depends(get_db),
) -> Employee:
    existing = await db.execute(
        select(Employee).where(Employee.employee_code == body.employee_code)
    )
    if existing.scalar_one_or_none():
        raise HTTPException(
            status_code=400,
            detail=f"Employee code '{body.employee_code}' already registered",
        )

    employee = Employee(**body.model_dump())
    db.add(employee)
    await db.commit()
    await db.refresh(employee)
    logger.info("Created employee %s (%s)", employee.name, employee.employee_code)
    return employee


@router.get("/{employee_id}", response_model=EmployeeRead)
async def get_employee(
    employee_id: int,
    db: AsyncSession = Depends(get_db),
) -> Employee:
    return await get_active_employee(db, employee_id)


# ── Work locations ──────────────────────────────────────────────────
@router.get("/{employee_id}/locations", response_model=list[WorkLocationRead])
async def list_employee_locations(
    employee_id: int,
    db: AsyncSession = Depends(get_db),
) -> list[WorkLocation]:
    await get_active_employee(db, employee_id)
    return await get_active_locations(db, employee_id)


@router.put("/{employee_id}/locations", response_model=list[WorkLocationRead])
async def assign_employee_locations(
    employee_id: int,
    body: WorkLocationAssign,
    db: AsyncSession = Depends(get_db),
) -> list[WorkLocation]:
    """Replace the employee's active work locations."""
    await get_active_employee(db, employee_id)

    if len(body.locations) > settings.MAX_LOCATIONS_PER_EMPLOYEE:
        raise HTTPException(
            status_code=400,
            detail=(
                f"Maximum {settings.MAX_LOCATIONS_PER_EMPLOYEE} locations "
                "can be assigned per employee"
            ),
        )

    await db.execute(
        update(WorkLocation)
        .where(WorkLocation.employee_id == employee_id)
        .values(is_active=False)
    )
    for loc in body.locations:
        db.add(
            WorkLocation(
                employee_id=employee_id,
                name=loc.name,
                latitude=loc.latitude,
                longitude=loc.longitude,
                radius_meters=loc.radius_meters or settings.DEFAULT_LOCATION_RADIUS_METERS,
                is_office_location=loc.is_office_location,
                is_active=True,
            )
        )
    await db.commit()

    logger.info("Assigned %d location(s) to employee %d", len(body.locations), employee_id)
    return await get_active_locations(db, employee_id)
