"""Advisory geofence check for check-in/check-out coordinates.

The result only annotates the attempt; blocking out-of-zone check-ins is left to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from math import asin, cos, radians, sin, sqrt
from typing import Optional

from ..core.constants import DEFAULT_GEOFENCE_RADIUS_M, EARTH_RADIUS_M
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lon: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.lat <= 90.0 or not -180.0 <= self.lon <= 180.0:
            raise ValidationError(f"Coordinate out of range: ({self.lat}, {self.lon})")

    @classmethod
    def parse(cls, payload: Optional[dict]) -> Optional["Coordinate"]:
        """Build from a {"latitude": .., "longitude": ..} payload; None when absent."""
        if not payload:
            return None
        lat = payload.get("latitude", payload.get("lat"))
        lon = payload.get("longitude", payload.get("lon"))
        if lat is None or lon is None:
            return None
        try:
            return cls(lat=float(lat), lon=float(lon))
        except (TypeError, ValueError):
            raise ValidationError("Coordinate must be numeric")


@dataclass(frozen=True)
class GeofenceResult:
    checked: bool
    in_zone: Optional[bool]
    distance_m: Optional[float]
    radius_m: float
    reason: Optional[str] = None

    def as_dict(self) -> dict:
        return {
            "checked": self.checked,
            "in_zone": self.in_zone,
            "distance_m": self.distance_m,
            "radius_m": self.radius_m,
            "reason": self.reason,
        }


def distance_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters (haversine)."""
    lat1_rad = radians(lat1)
    lat2_rad = radians(lat2)
    delta_lat = lat2_rad - lat1_rad
    delta_lon = radians(lon2) - radians(lon1)

    a = sin(delta_lat / 2) ** 2 + cos(lat1_rad) * cos(lat2_rad) * sin(delta_lon / 2) ** 2
    c = 2 * asin(min(1.0, sqrt(a)))
    return EARTH_RADIUS_M * c


class GeofenceValidator:
    def __init__(self, institution: Optional[Coordinate], *, radius_m: float = DEFAULT_GEOFENCE_RADIUS_M):
        if radius_m < 0:
            raise ValidationError("Geofence radius must be non-negative")
        self._institution = institution
        self._radius_m = float(radius_m)

    @property
    def radius_m(self) -> float:
        return self._radius_m

    def evaluate(self, candidate: Optional[Coordinate]) -> GeofenceResult:
        if candidate is None:
            return GeofenceResult(checked=False, in_zone=None, distance_m=None, radius_m=self._radius_m, reason="no_location")
        if self._institution is None:
            return GeofenceResult(
                checked=False, in_zone=None, distance_m=None, radius_m=self._radius_m, reason="institution_not_configured"
            )

        distance = distance_m(self._institution.lat, self._institution.lon, candidate.lat, candidate.lon)
        return GeofenceResult(
            checked=True,
            in_zone=distance <= self._radius_m,
            distance_m=round(distance, 2),
            radius_m=self._radius_m,
        )


def is_in_zone(reference: Coordinate, candidate: Coordinate, radius_m: float) -> bool:
    return distance_m(reference.lat, reference.lon, candidate.lat, candidate.lon) <= radius_m
