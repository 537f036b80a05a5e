from __future__ import annotations
import logging
import time
from typing import Any, Callable, Dict

from fastapi import APIRouter, HTTPException

from ..io_fleet import FleetDataError, FleetSnapshot
from ..timeparse import to_local_date, today_local
from .config import ConfigError, PlannerConfig
from .emissions import Rates
from .models import (
    BranchListResponse, BranchRequest, BranchResponse, BranchSummaryOut,
    TransitRequest, TripRequest, TripResponse,
)
from .routes_client import RoutesApiError, RoutesClient
from .schema import Coordinate, SelectionOutcome
from .solve import select_branch
from .trip import plan_trip, trip_target_date

logger = logging.getLogger(__name__)


def _coord(p) -> Coordinate:
    return Coordinate(lat=p.lat, lng=p.lng)


def _elapsed_ms(t0: float) -> float:
    return round((time.perf_counter() - t0) * 1000.0, 3)


def _branch_body(outcome: SelectionOutcome, **extra: Any) -> Dict[str, Any]:
    return {
        "found": outcome.found,
        "reason_code": outcome.reason_code,
        "branch": outcome.best.to_dict() if outcome.best else None,
        "diagnostics": outcome.diagnostics(),
        **extra,
    }


def create_router(
    get_fleet: Callable[[], FleetSnapshot],
    get_config: Callable[[], PlannerConfig],
    get_routes_client: Callable[[], RoutesClient],
    get_rates: Callable[[], Rates],
) -> APIRouter:
    """
    Factory that returns the /plan router. Fleet data is fetched through
    `get_fleet` on every request; nothing is cached between requests.
    """
    router = APIRouter(prefix="/plan", tags=["Plan"])

    # ------------------- Shared Helpers -------------------

    def load_fleet() -> FleetSnapshot:
        try:
            return get_fleet()
        except FleetDataError as e:
            logger.warning("Fleet data unavailable: %s", e)
            raise HTTPException(status_code=503, detail=f"Fleet data unavailable: {e}")

    def routes_client() -> RoutesClient:
        try:
            return get_routes_client()
        except ConfigError as e:
            raise HTTPException(status_code=500, detail=str(e))

    # ------------------- Endpoints -------------------

    @router.post("/branch", response_model=BranchResponse)
    def plan_branch(req: BranchRequest):
        """Best swap branch along an already computed route."""
        cfg = get_config().with_overrides(
            lateral_threshold_m=req.lateral_threshold_m,
            range_threshold_km=req.range_threshold_km,
        )
        if req.date:
            target = to_local_date(req.date, cfg.tz)
            if target is None:
                raise HTTPException(status_code=400, detail=f"Unparseable date: {req.date!r}")
        else:
            target = today_local(cfg.tz)

        fleet = load_fleet()
        outcome = select_branch(req.encoded_polyline, target, fleet, cfg)
        return BranchResponse(**_branch_body(outcome))

    @router.post("/trip", response_model=TripResponse)
    def plan_trip_endpoint(req: TripRequest):
        """Route A->B, pick a swap branch and route the legs around it."""
        t0 = time.perf_counter()
        cfg = get_config()
        client = routes_client()
        fleet = load_fleet()
        target = trip_target_date(req.departure_time, req.arrival_time, cfg.tz)

        try:
            plan = plan_trip(_coord(req.origin), _coord(req.destination), target, fleet, cfg, client, get_rates())
        except RoutesApiError as e:
            raise HTTPException(status_code=502, detail=f"Routes API error: {e}")

        body = plan.to_dict()
        body["summary"] = {**body["summary"], "performance": {"total_ms": _elapsed_ms(t0)}}
        return TripResponse(**body)

    @router.post("/transit")
    def plan_transit(req: TransitRequest):
        client = routes_client()
        try:
            return client.compute_transit_route(_coord(req.origin), _coord(req.destination), req.departure_time)
        except RoutesApiError as e:
            raise HTTPException(status_code=e.status_code or 502, detail=str(e))

    @router.get("/branches", response_model=BranchListResponse)
    def list_branches():
        fleet = load_fleet()
        rows = [
            BranchSummaryOut(
                name=b.name,
                lat=b.location.lat,
                lng=b.location.lng,
                vehicles=len(b.vehicle_ids),
                electric_vehicles=len(b.electric_vehicle_ids()),
            )
            for b in fleet.branches
        ]
        return BranchListResponse(branches=rows, count=len(rows), source=fleet.source)

    return router
