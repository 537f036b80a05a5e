from __future__ import annotations

from math import radians, sin, cos, atan2, sqrt

from .schema import Coordinate

EARTH_RADIUS_M = 6_371_000.0


def haversine_m(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance in metres between two lat/lng points."""
    phi1 = radians(a.lat)
    phi2 = radians(b.lat)
    dphi = radians(b.lat - a.lat)
    dlmb = radians(b.lng - a.lng)
    h = sin(dphi / 2) ** 2 + cos(phi1) * cos(phi2) * sin(dlmb / 2) ** 2
    h = min(1.0, h)  # rounding near antipodes
    return 2 * EARTH_RADIUS_M * atan2(sqrt(h), sqrt(1 - h))


def haversine_km(a: Coordinate, b: Coordinate) -> float:
    return haversine_m(a, b) / 1000.0
