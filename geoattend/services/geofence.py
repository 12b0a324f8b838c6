"""
Geofence validation for GPS check-ins.

A check-in is accepted when the reported coordinate falls inside the radius
of at least one of the employee's assigned locations. Reported GPS accuracy
is surfaced as a confidence tier only; it never widens or narrows a radius.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from math import atan2, cos, radians, sin, sqrt

from geoattend.core.enums import AccuracyConfidence
from geoattend.core.exceptions import InvalidCoordinate
from geoattend.schemas.geofence import (AssignedLocation, Coordinate,
                                        GeofenceVerdict, LocationDistance,
                                        NearestLocation)

EARTH_RADIUS_METERS = 6_371_000

HIGH_ACCURACY_METERS = 10
MEDIUM_ACCURACY_METERS = 50


def haversine_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in metres between two lat/lng points."""
    φ1, φ2 = radians(lat1), radians(lat2)
    Δφ = radians(lat2 - lat1)
    Δλ = radians(lng2 - lng1)

    a = sin(Δφ / 2) ** 2 + cos(φ1) * cos(φ2) * sin(Δλ / 2) ** 2
    c = 2 * atan2(sqrt(a), sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def accuracy_confidence(accuracy_meters: float | None) -> AccuracyConfidence | None:
    if accuracy_meters is None:
        return None
    if accuracy_meters <= HIGH_ACCURACY_METERS:
        return AccuracyConfidence.HIGH
    if accuracy_meters <= MEDIUM_ACCURACY_METERS:
        return AccuracyConfidence.MEDIUM
    return AccuracyConfidence.LOW


def check_coordinate(latitude: float, longitude: float) -> None:
    """Raise :class:`InvalidCoordinate` unless lat/lng are finite and in range."""
    if not (math.isfinite(latitude) and -90 <= latitude <= 90):
        raise InvalidCoordinate(f"Latitude must be between -90 and 90, got {latitude}")
    if not (math.isfinite(longitude) and -180 <= longitude <= 180):
        raise InvalidCoordinate(f"Longitude must be between -180 and 180, got {longitude}")


def validate(current: Coordinate, assigned: Sequence[AssignedLocation]) -> GeofenceVerdict:
    """Classify ``current`` against every assigned location.

    An empty ``assigned`` yields a verdict with no per-location entries and
    ``requires_approval`` false; the caller must treat that as "no locations
    configured" rather than as an out-of-range check-in.
    """
    check_coordinate(current.latitude, current.longitude)

    per_location: list[LocationDistance] = []
    nearest: NearestLocation | None = None

    for location in assigned:
        distance = haversine_distance(
            current.latitude,
            current.longitude,
            location.latitude,
            location.longitude,
        )
        per_location.append(
            LocationDistance(
                location_id=location.id,
                name=location.name,
                distance_meters=distance,
                is_within_radius=distance <= location.radius_meters,
            )
        )
        # Strict comparison keeps the first location on ties
        if nearest is None or distance < nearest.distance_meters:
            nearest = NearestLocation(
                location_id=location.id,
                name=location.name,
                distance_meters=distance,
            )

    within_any = any(entry.is_within_radius for entry in per_location)

    return GeofenceVerdict(
        is_within_any_geofence=within_any,
        nearest_location=nearest,
        requires_approval=bool(per_location) and not within_any,
        per_location=per_location,
        accuracy_confidence=accuracy_confidence(current.accuracy_meters),
    )
