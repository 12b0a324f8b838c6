"""
GeoAttend application entry point.

This is the **only** file that assembles the app. Geofence validation and
attendance/timesheet reconciliation live in `services/`; the HTTP layer in
`api/` loads data, calls them and persists the outcome.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from geoattend.api.v1.api import api_router
from geoattend.core.config import settings
from geoattend.core.exceptions import register_exception_handlers
from geoattend.db.base import Base
from geoattend.db.session import engine

# Ensure all models are imported so metadata.create_all can see them
from geoattend.models.attendance import (Attendance,  # noqa: F401
                                         AttendanceBreak, AttendanceRequest)
from geoattend.models.attendance_settings import AttendanceSettings  # noqa: F401
from geoattend.models.employee import Employee, WorkLocation  # noqa: F401
from geoattend.models.timesheet import Timesheet  # noqa: F401

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(_app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialised")

    logger.info("%s v%s started", settings.PROJECT_NAME, settings.VERSION)
    yield
    await engine.dispose()
    logger.info("Shutdown complete")


# ── App factory ─────────────────────────────────────────────────────
def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME,
        description="Geofenced attendance and timesheet reconciliation",
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Global exception handlers (prevent stack-trace leakage)
    register_exception_handlers(application)

    application.include_router(api_router, prefix=settings.API_V1_PREFIX)

    return application


app = create_app()
