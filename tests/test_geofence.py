"""Tests for haversine distance and geofence verdicts."""

import math

import pytest
from pydantic import ValidationError

from geoattend.core.enums import AccuracyConfidence
from geoattend.core.exceptions import InvalidCoordinate
from geoattend.schemas.geofence import AssignedLocation, Coordinate
from geoattend.services.geofence import (accuracy_confidence,
                                         haversine_distance, validate)

BANGALORE = Coordinate(latitude=12.9716, longitude=77.5946)

HQ = AssignedLocation(id=1, name="HQ", latitude=12.9716, longitude=77.5946, radius_meters=100)
BRANCH = AssignedLocation(id=2, name="Branch", latitude=13.0827, longitude=80.2707, radius_meters=100)
# ~500 m north of HQ
ANNEX = AssignedLocation(id=3, name="Annex", latitude=12.9761, longitude=77.5946, radius_meters=100)


# ── Distance ────────────────────────────────────────────────────────
@pytest.mark.parametrize(
    "a, b",
    [
        ((12.9716, 77.5946), (13.0827, 80.2707)),
        ((51.5074, -0.1278), (40.7128, -74.0060)),
        ((-33.8688, 151.2093), (35.6762, 139.6503)),
        ((0.0, 179.9), (0.0, -179.9)),
    ],
)
def test_distance_is_symmetric(a, b):
    assert haversine_distance(*a, *b) == pytest.approx(haversine_distance(*b, *a))


def test_distance_to_self_is_zero():
    assert haversine_distance(12.9716, 77.5946, 12.9716, 77.5946) == 0


def test_distance_bangalore_to_chennai():
    """Roughly 290 km as the crow flies."""
    d = haversine_distance(12.9716, 77.5946, 13.0827, 80.2707)
    assert 280_000 < d < 300_000


def test_distance_across_antimeridian_is_short():
    d = haversine_distance(0.0, 179.9, 0.0, -179.9)
    assert d < 25_000


# ── Verdicts ────────────────────────────────────────────────────────
def test_at_location_is_within_range():
    """Standing on the HQ coordinate: zero distance, auto-approved."""
    verdict = validate(BANGALORE, [HQ])

    assert verdict.per_location[0].distance_meters == pytest.approx(0, abs=1e-6)
    assert verdict.per_location[0].is_within_radius is True
    assert verdict.is_within_any_geofence is True
    assert verdict.requires_approval is False
    assert verdict.nearest_location.name == "HQ"


def test_far_location_requires_approval():
    """Checking in from Bangalore against a Chennai branch."""
    verdict = validate(BANGALORE, [BRANCH])

    assert verdict.is_within_any_geofence is False
    assert verdict.requires_approval is True
    assert verdict.nearest_location.name == "Branch"
    assert verdict.nearest_location.location_id == 2
    assert verdict.no_locations_configured is False


def test_no_assigned_locations():
    """No locations is its own state, never a pending approval."""
    verdict = validate(BANGALORE, [])

    assert verdict.per_location == []
    assert verdict.nearest_location is None
    assert verdict.is_within_any_geofence is False
    assert verdict.requires_approval is False
    assert verdict.no_locations_configured is True


def test_nearest_is_minimum_distance():
    verdict = validate(BANGALORE, [BRANCH, ANNEX, HQ])

    distances = [entry.distance_meters for entry in verdict.per_location]
    assert verdict.nearest_location.distance_meters == min(distances)
    assert verdict.nearest_location.name == "HQ"


def test_per_location_keeps_input_order():
    verdict = validate(BANGALORE, [BRANCH, ANNEX, HQ])
    assert [e.name for e in verdict.per_location] == ["Branch", "Annex", "HQ"]


def test_within_any_iff_some_location_within_radius():
    for assigned in ([BRANCH], [ANNEX], [BRANCH, ANNEX], [BRANCH, HQ], [ANNEX, HQ, BRANCH]):
        verdict = validate(BANGALORE, assigned)
        assert verdict.is_within_any_geofence == any(
            e.is_within_radius for e in verdict.per_location
        )


def test_nearest_tie_goes_to_first_location():
    twin_a = AssignedLocation(id=10, name="A", latitude=13.0, longitude=77.6, radius_meters=50)
    twin_b = AssignedLocation(id=11, name="B", latitude=13.0, longitude=77.6, radius_meters=50)

    assert validate(BANGALORE, [twin_a, twin_b]).nearest_location.location_id == 10
    assert validate(BANGALORE, [twin_b, twin_a]).nearest_location.location_id == 11


def test_radius_boundary_is_inclusive():
    exact = haversine_distance(12.9716, 77.5946, ANNEX.latitude, ANNEX.longitude)
    on_edge = ANNEX.model_copy(update={"radius_meters": exact})
    just_short = ANNEX.model_copy(update={"radius_meters": exact - 0.01})

    assert validate(BANGALORE, [on_edge]).is_within_any_geofence is True
    assert validate(BANGALORE, [just_short]).is_within_any_geofence is False


def test_wider_radius_admits_annex():
    wide_annex = ANNEX.model_copy(update={"radius_meters": 1_000})
    verdict = validate(BANGALORE, [BRANCH, wide_annex])

    assert verdict.is_within_any_geofence is True
    assert verdict.requires_approval is False
    assert [e.is_within_radius for e in verdict.per_location] == [False, True]


def test_accuracy_does_not_change_radius_decision():
    """A poor fix is reported as low confidence but judged on distance alone."""
    sloppy = Coordinate(latitude=12.9716, longitude=77.5946, accuracy_meters=500)
    verdict = validate(sloppy, [HQ])

    assert verdict.is_within_any_geofence is True
    assert verdict.accuracy_confidence == AccuracyConfidence.LOW


# ── Input validation ───────────────────────────────────────────────
@pytest.mark.parametrize(
    "lat, lng",
    [(90.0001, 0.0), (-91.0, 0.0), (0.0, 180.5), (0.0, -181.0), (math.nan, 0.0), (0.0, math.inf)],
)
def test_out_of_range_coordinate_rejected(lat, lng):
    with pytest.raises(InvalidCoordinate):
        validate(Coordinate(latitude=lat, longitude=lng), [HQ])


def test_invalid_coordinate_rejected_even_without_locations():
    with pytest.raises(InvalidCoordinate):
        validate(Coordinate(latitude=123.0, longitude=0.0), [])


@pytest.mark.parametrize("lat, lng", [(90.0, 180.0), (-90.0, -180.0)])
def test_range_limits_are_accepted(lat, lng):
    verdict = validate(Coordinate(latitude=lat, longitude=lng), [HQ])
    assert verdict.requires_approval is True


# ── Accuracy tiers ──────────────────────────────────────────────────
@pytest.mark.parametrize(
    "accuracy, tier",
    [
        (None, None),
        (3.0, AccuracyConfidence.HIGH),
        (10.0, AccuracyConfidence.HIGH),
        (10.5, AccuracyConfidence.MEDIUM),
        (50.0, AccuracyConfidence.MEDIUM),
        (51.0, AccuracyConfidence.LOW),
    ],
)
def test_accuracy_confidence_tiers(accuracy, tier):
    assert accuracy_confidence(accuracy) == tier


def test_negative_accuracy_is_not_a_valid_fix():
    with pytest.raises(ValidationError):
        Coordinate(latitude=12.9716, longitude=77.5946, accuracy_meters=-5)
