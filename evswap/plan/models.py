from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


# -----------------------------
# Shared pieces
# -----------------------------

class LatLng(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class BranchOut(BaseModel):
    branch: str
    lat: float
    lng: float
    ev_id: str
    trip_ids: List[str] = []
    distance_to_route_m: float
    distance_to_min_location_m: float
    min_distance_location: LatLng
    score: Optional[float] = None


class SelectionDiagnostics(BaseModel):
    reason_code: str
    path_points: int = 0
    nearby_count: int = 0
    candidate_count: int = 0
    available_count: int = 0
    target_date: Optional[str] = None


# -----------------------------
# /plan/branch
# -----------------------------

class BranchRequest(BaseModel):
    encoded_polyline: str = Field(
        ...,
        description="Encoded route polyline (precision 1e-5)",
    )
    date: Optional[str] = Field(
        None,
        description="Travel date or timestamp, e.g. 2024-06-01; defaults to today",
    )
    lateral_threshold_m: Optional[float] = Field(
        None,
        gt=0,
        description="Override max distance from route in metres",
    )
    range_threshold_km: Optional[float] = Field(
        None,
        ge=0,
        description="Override minimum EV range in km (strict)",
    )


class BranchResponse(BaseModel):
    found: bool
    reason_code: str
    branch: Optional[BranchOut] = None
    diagnostics: SelectionDiagnostics


# -----------------------------
# /plan/trip
# -----------------------------

class TripRequest(BaseModel):
    origin: LatLng
    destination: LatLng
    departure_time: Optional[str] = None
    arrival_time: Optional[str] = None


class LegOut(BaseModel):
    vehicle_type: str
    origin: LatLng
    destination: LatLng
    encoded_polyline: str
    distance_m: float
    duration_s: float


class TripResponse(BaseModel):
    merged_encoded: str
    branch: Optional[BranchOut] = None
    direct: LegOut
    legs: Dict[str, LegOut] = {}
    summary: Dict[str, Any] = {}
    diagnostics: SelectionDiagnostics


class TransitRequest(BaseModel):
    origin: LatLng
    destination: LatLng
    departure_time: Optional[str] = None


# -----------------------------
# /plan/branches
# -----------------------------

class BranchSummaryOut(BaseModel):
    name: str
    lat: float
    lng: float
    vehicles: int
    electric_vehicles: int


class BranchListResponse(BaseModel):
    branches: List[BranchSummaryOut]
    count: int
    source: str
