from __future__ import annotations
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import requests

from .config import DEFAULT_ROUTES_API_URL, RoutesConfig
from .schema import Coordinate

logger = logging.getLogger(__name__)

VEHICLE_TYPES = ("Gas", "EV", "Mix")
TRANSIT_MODES = ["BUS", "SUBWAY", "TRAIN", "LIGHT_RAIL", "RAIL"]
_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)s?\s*$")


class RoutesApiError(RuntimeError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class RouteLeg:
    vehicle_type: str
    origin: Coordinate
    destination: Coordinate
    encoded_polyline: str
    distance_m: float
    duration_s: float
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "vehicle_type": self.vehicle_type,
            "origin": {"lat": self.origin.lat, "lng": self.origin.lng},
            "destination": {"lat": self.destination.lat, "lng": self.destination.lng},
            "encoded_polyline": self.encoded_polyline,
            "distance_m": self.distance_m,
            "duration_s": self.duration_s,
        }


def parse_duration_s(value: Any) -> float:
    """Routes API durations look like "523s"; anything else counts as 0."""
    if isinstance(value, (int, float)):
        return float(value)
    m = _DURATION_RE.match(str(value or ""))
    return float(m.group(1)) if m else 0.0

def _waypoint(p: Coordinate) -> Dict[str, Any]:
    return {"location": {"latLng": {"latitude": p.lat, "longitude": p.lng}}}

def leg_from_response(body: Dict[str, Any], origin: Coordinate, destination: Coordinate, vehicle_type: str) -> RouteLeg:
    routes = body.get("routes") or []
    if not routes:
        raise RoutesApiError("Routes API returned no routes")
    route = routes[0]
    encoded = (route.get("polyline") or {}).get("encodedPolyline")
    if not encoded:
        raise RoutesApiError("Routes API returned no polyline")

    # Prefer route totals; fall back to summing legs
    legs = route.get("legs") or []
    distance = route.get("distanceMeters")
    if distance is None:
        distance = sum(float(leg.get("distanceMeters") or 0) for leg in legs)
    duration = route.get("duration")
    duration_s = parse_duration_s(duration) if duration is not None else sum(parse_duration_s(leg.get("duration")) for leg in legs)

    return RouteLeg(
        vehicle_type=vehicle_type,
        origin=origin,
        destination=destination,
        encoded_polyline=encoded,
        distance_m=float(distance or 0.0),
        duration_s=float(duration_s),
        raw=body,
    )


class RoutesClient:
    """Thin adapter over Google Routes API v2 computeRoutes."""

    def __init__(self, api_key: str, base_url: str = DEFAULT_ROUTES_API_URL, timeout: float = 30.0, session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, cfg: RoutesConfig) -> "RoutesClient":
        return cls(api_key=cfg.require_key(), base_url=cfg.base_url, timeout=cfg.timeout_sec)

    def _post(self, body: Dict[str, Any]) -> Dict[str, Any]:
        headers = {
            "Content-Type": "application/json",
            "X-Goog-Api-Key": self.api_key,
            "X-Goog-FieldMask": "routes.*",
        }
        try:
            response = self.session.post(self.base_url, json=body, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise RoutesApiError(f"Routes API request failed: {e}") from e

        if not response.ok:
            logger.warning("Routes API error %s: %s", response.status_code, response.text[:200])
            raise RoutesApiError(response.text or f"HTTP {response.status_code}", status_code=response.status_code)
        return response.json()

    def compute_drive_route(self, origin: Coordinate, destination: Coordinate, vehicle_type: str = "Mix") -> RouteLeg:
        if vehicle_type not in VEHICLE_TYPES:
            raise ValueError(f"Unknown vehicle type {vehicle_type!r}")
        body = {
            "origin": _waypoint(origin),
            "destination": _waypoint(destination),
            "travelMode": "DRIVE",
            "computeAlternativeRoutes": False,
            "routeModifiers": {
                "avoidTolls": False,
                "avoidHighways": False,
                "avoidFerries": False,
            },
            "languageCode": "en-US",
            "units": "METRIC",
        }
        return leg_from_response(self._post(body), origin, destination, vehicle_type)

    def compute_transit_route(self, origin: Coordinate, destination: Coordinate, departure_time: Optional[str] = None) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "origin": _waypoint(origin),
            "destination": _waypoint(destination),
            "travelMode": "TRANSIT",
            "computeAlternativeRoutes": True,
            "transitPreferences": {
                "routingPreference": "LESS_WALKING",
                "allowedTravelModes": TRANSIT_MODES,
            },
            "languageCode": "en-US",
            "units": "METRIC",
        }
        body["departureTime"] = departure_time or datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        return self._post(body)
