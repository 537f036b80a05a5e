from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from math import isfinite
from typing import Any, Dict, List, Optional, Tuple

EV_PREFIX = "E"


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lng: float

    def as_tuple(self) -> Tuple[float, float]:
        return (self.lat, self.lng)


Path = List[Coordinate]


class VehicleType(str, Enum):
    ELECTRIC = "electric"
    OTHER = "other"

    @classmethod
    def from_raw(cls, value: Any) -> "VehicleType":
        text = str(value or "").strip()
        return cls.ELECTRIC if text == cls.ELECTRIC.value else cls.OTHER


@dataclass(frozen=True)
class Branch:
    """A depot on the map plus the vehicle ids allocated to it."""
    name: str
    location: Coordinate
    vehicle_ids: Tuple[str, ...] = ()

    def electric_vehicle_ids(self) -> List[str]:
        ids = [vid.strip() for vid in self.vehicle_ids]
        return [vid for vid in ids if vid.startswith(EV_PREFIX)]


@dataclass(frozen=True)
class Vehicle:
    id: str
    type: VehicleType
    range_km: Optional[float] = None
    trip_ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Trip:
    """
    A booking record. Only the calendar date of its timestamp matters.

    `departure_raw` / `arrival_raw` hold the cell text as read, so a value
    that was present but unparseable can be told apart from a blank one.
    """
    vehicle_id: str
    departure_time: Optional[datetime] = None
    arrival_time: Optional[datetime] = None
    departure_raw: str = ""
    arrival_raw: str = ""


@dataclass(frozen=True)
class EligibleEv:
    range_km: float
    trip_ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class NearbyBranch:
    name: str
    distance_to_route_m: float
    min_distance_location: Coordinate


@dataclass(frozen=True)
class Candidate:
    branch: str
    location: Coordinate
    distance_to_route_m: float
    min_distance_location: Coordinate
    ev_id: str
    trip_ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ScoredCandidate:
    branch: str
    location: Coordinate
    distance_to_route_m: float
    min_distance_location: Coordinate
    ev_id: str
    trip_ids: Tuple[str, ...]
    distance_to_min_location_m: float
    score: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "branch": self.branch,
            "lat": self.location.lat,
            "lng": self.location.lng,
            "ev_id": self.ev_id,
            "trip_ids": list(self.trip_ids),
            "distance_to_route_m": self.distance_to_route_m,
            "distance_to_min_location_m": self.distance_to_min_location_m,
            "min_distance_location": {
                "lat": self.min_distance_location.lat,
                "lng": self.min_distance_location.lng,
            },
            "score": self.score if isfinite(self.score) else None,
        }


# Reason codes carried by SelectionOutcome
BRANCH_FOUND = "BRANCH_FOUND"
DEGENERATE_PATH = "DEGENERATE_PATH"
NO_NEARBY_BRANCHES = "NO_NEARBY_BRANCHES"
NO_EV_CANDIDATES = "NO_EV_CANDIDATES"
ALL_EVS_BOOKED = "ALL_EVS_BOOKED"


@dataclass(frozen=True)
class SelectionOutcome:
    """
    Result of one branch selection run.

    `best` is None for every "none found" outcome; `reason_code` says which
    stage emptied the pipeline. The counts are per-stage survivors.
    """
    best: Optional[ScoredCandidate]
    reason_code: str
    path_points: int = 0
    nearby_count: int = 0
    candidate_count: int = 0
    available_count: int = 0
    target_date: Optional[str] = None
    nearby: Tuple[NearbyBranch, ...] = field(default=(), compare=False)

    @property
    def found(self) -> bool:
        return self.best is not None

    def diagnostics(self) -> Dict[str, Any]:
        return {
            "reason_code": self.reason_code,
            "path_points": self.path_points,
            "nearby_count": self.nearby_count,
            "candidate_count": self.candidate_count,
            "available_count": self.available_count,
            "target_date": self.target_date,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "found": self.found,
            "branch": self.best.to_dict() if self.best else None,
            **self.diagnostics(),
        }
