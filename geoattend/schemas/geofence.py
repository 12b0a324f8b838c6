"""Pydantic schemas for GPS coordinates, work locations and geofence verdicts."""

from __future__ import annotations

from pydantic import BaseModel, Field, computed_field, field_validator

from geoattend.core.enums import AccuracyConfidence


# ── Core values ─────────────────────────────────────────────────────
class Coordinate(BaseModel):
    """A reported GPS fix. Range checks happen in the validator."""

    latitude: float
    longitude: float
    accuracy_meters: float | None = Field(default=None, ge=0)

    model_config = {"frozen": True}


class AssignedLocation(BaseModel):
    id: int
    name: str
    latitude: float
    longitude: float
    radius_meters: float
    is_office_location: bool = False

    model_config = {"frozen": True, "from_attributes": True}


class LocationDistance(BaseModel):
    location_id: int
    name: str
    distance_meters: float
    is_within_radius: bool


class NearestLocation(BaseModel):
    location_id: int
    name: str
    distance_meters: float


class GeofenceVerdict(BaseModel):
    is_within_any_geofence: bool
    nearest_location: NearestLocation | None = None
    requires_approval: bool
    per_location: list[LocationDistance] = Field(default_factory=list)
    accuracy_confidence: AccuracyConfidence | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def no_locations_configured(self) -> bool:
        return not self.per_location


# ── Location management ─────────────────────────────────────────────
class WorkLocationCreate(BaseModel):
    name: str
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    radius_meters: float | None = Field(default=None, gt=0)
    is_office_location: bool = False

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Location name must not be empty")
        if len(v) > 200:
            raise ValueError("Location name must not exceed 200 characters")
        return v


class WorkLocationAssign(BaseModel):
    locations: list[WorkLocationCreate]


class WorkLocationRead(BaseModel):
    id: int
    employee_id: int
    name: str
    latitude: float
    longitude: float
    radius_meters: float
    is_office_location: bool
    is_active: bool

    model_config = {"from_attributes": True}


# ── Check-in / check-out ────────────────────────────────────────────
class LocationCheckRequest(BaseModel):
    employee_id: int
    location: Coordinate


class GpsCheckInRequest(BaseModel):
    employee_id: int
    location: Coordinate
    notes: str | None = Field(default=None, max_length=500)


class GpsCheckOutRequest(BaseModel):
    employee_id: int
    location: Coordinate | None = None
    notes: str | None = Field(default=None, max_length=500)
