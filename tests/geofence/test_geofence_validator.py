from __future__ import annotations

import math

import pytest

from src.shift_payroll.shift_payroll.core.exceptions import ValidationError
from src.shift_payroll.shift_payroll.geofence.validator import Coordinate, GeofenceValidator, distance_m, is_in_zone

KINDERGARTEN = Coordinate(lat=55.7558, lon=37.6173)


def _north_of(origin: Coordinate, meters: float) -> Coordinate:
    return Coordinate(lat=origin.lat + math.degrees(meters / 6371000.0), lon=origin.lon)


def test_450m_away_is_out_of_zone():
    candidate = _north_of(KINDERGARTEN, 450)
    result = GeofenceValidator(KINDERGARTEN, radius_m=100).evaluate(candidate)

    assert result.checked is True
    assert result.in_zone is False
    assert result.distance_m == pytest.approx(450, abs=1)


def test_inside_radius_and_on_the_boundary():
    validator = GeofenceValidator(KINDERGARTEN, radius_m=100)

    assert validator.evaluate(_north_of(KINDERGARTEN, 40)).in_zone is True
    assert validator.evaluate(KINDERGARTEN).in_zone is True
    assert is_in_zone(KINDERGARTEN, _north_of(KINDERGARTEN, 99.5), 100)


def test_distance_is_symmetric():
    other = Coordinate(lat=55.7600, lon=37.6300)
    assert distance_m(KINDERGARTEN.lat, KINDERGARTEN.lon, other.lat, other.lon) == pytest.approx(
        distance_m(other.lat, other.lon, KINDERGARTEN.lat, KINDERGARTEN.lon)
    )


def test_missing_inputs_are_not_checked():
    no_location = GeofenceValidator(KINDERGARTEN).evaluate(None)
    not_configured = GeofenceValidator(None).evaluate(KINDERGARTEN)

    assert (no_location.checked, no_location.in_zone, no_location.reason) == (False, None, "no_location")
    assert not_configured.reason == "institution_not_configured"


def test_default_radius_is_100m():
    assert GeofenceValidator(KINDERGARTEN).radius_m == 100


@pytest.mark.parametrize(
    "payload, expected",
    [
        (None, None),
        ({}, None),
        ({"latitude": "55.1", "longitude": "37.2"}, Coordinate(55.1, 37.2)),
        ({"lat": 1, "lon": 2}, Coordinate(1.0, 2.0)),
    ],
)
def test_coordinate_parse(payload, expected):
    assert Coordinate.parse(payload) == expected


def test_coordinate_out_of_range():
    with pytest.raises(ValidationError):
        Coordinate(lat=91, lon=0)
    with pytest.raises(ValidationError):
        Coordinate.parse({"lat": "north", "lon": "east"})
