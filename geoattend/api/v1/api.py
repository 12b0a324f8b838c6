"""
V1 API router aggregator; wires all endpoint modules together.
"""

from fastapi import APIRouter

from geoattend.api.v1.endpoints import (attendance, employees, reports,
                                        settings, timesheets)

api_router = APIRouter()

# Employees and their assigned work locations
api_router.include_router(employees.router)

# GPS check-in / check-out, breaks, approval requests
api_router.include_router(attendance.router)

# Timesheet entries, auto-resolve, sync
api_router.include_router(timesheets.router)

# Discrepancy reports, CSV export, health
api_router.include_router(reports.router)

# Work rules
api_router.include_router(settings.router)
