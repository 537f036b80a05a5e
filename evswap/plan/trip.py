"""
Trip planning around the branch selection.

Given origin and destination:
1. route A->B once (vehicle type Mix) and select a swap branch on that polyline
2. with no branch, the direct route is the plan
3. with a branch, route A->branch (Gas), branch->B (EV) and the return pair
   B->branch (EV), branch->A (Gas) concurrently, then merge the outbound legs
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date, tzinfo
from typing import Any, Dict, Optional

from ..io_fleet import FleetSnapshot
from ..timeparse import to_local_date, today_local
from .config import PlannerConfig
from .emissions import Rates, summarize_legs
from .polylines import merge_encoded
from .routes_client import RouteLeg, RoutesClient
from .schema import Coordinate, SelectionOutcome
from .solve import select_branch

logger = logging.getLogger(__name__)

LEG_PLAN = (
    ("to_branch", "origin", "branch", "Gas"),
    ("to_dest", "branch", "destination", "EV"),
    ("back_to_branch", "destination", "branch", "EV"),
    ("back_to_origin", "branch", "origin", "Gas"),
)


@dataclass(frozen=True)
class TripPlan:
    merged_encoded: str
    direct: RouteLeg
    outcome: SelectionOutcome
    legs: Dict[str, RouteLeg] = field(default_factory=dict)
    summary: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "merged_encoded": self.merged_encoded,
            "branch": self.outcome.best.to_dict() if self.outcome.best else None,
            "direct": self.direct.to_dict(),
            "legs": {name: leg.to_dict() for name, leg in self.legs.items()},
            "summary": self.summary,
            "diagnostics": self.outcome.diagnostics(),
        }


def trip_target_date(departure_time: Optional[str], arrival_time: Optional[str], tz: tzinfo) -> date:
    """
    Day the EV is needed. Lookup order: departure_time, arrival_time, today.
    Unparseable values are skipped like missing ones.
    """
    for value in (departure_time, arrival_time):
        day = to_local_date(value, tz) if value else None
        if day is not None:
            return day
    return today_local(tz)


def plan_trip(
    origin: Coordinate,
    destination: Coordinate,
    target_date: date,
    fleet: FleetSnapshot,
    config: PlannerConfig,
    client: RoutesClient,
    rates: Optional[Rates] = None,
) -> TripPlan:
    rates = rates or Rates()

    direct = client.compute_drive_route(origin, destination, "Mix")
    outcome = select_branch(direct.encoded_polyline, target_date, fleet, config)

    if outcome.best is None:
        logger.info("No swap branch (%s); returning direct route", outcome.reason_code)
        return TripPlan(
            merged_encoded=direct.encoded_polyline,
            direct=direct,
            outcome=outcome,
            summary=summarize_legs([direct], rates),
        )

    points = {"origin": origin, "destination": destination, "branch": outcome.best.location}
    with ThreadPoolExecutor(max_workers=len(LEG_PLAN)) as executor:
        futures = {
            name: executor.submit(client.compute_drive_route, points[src], points[dst], vehicle_type)
            for name, src, dst, vehicle_type in LEG_PLAN
        }
        legs = {name: f.result() for name, f in futures.items()}

    merged = merge_encoded(legs["to_branch"].encoded_polyline, legs["to_dest"].encoded_polyline)
    return TripPlan(
        merged_encoded=merged,
        direct=direct,
        outcome=outcome,
        legs=legs,
        summary=summarize_legs(legs.values(), rates),
    )
