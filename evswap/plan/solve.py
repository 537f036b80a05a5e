# evswap/plan/solve.py
from __future__ import annotations
import logging
from datetime import date
from typing import Sequence, Union

from ..io_fleet import FleetSnapshot
from .candidates import build_candidates, filter_available
from .config import PlannerConfig
from .fleet import build_booked_date_index, build_eligible_ev_index
from .polylines import decode_path
from .proximity import find_nearby_branches
from .schema import (
    ALL_EVS_BOOKED,
    BRANCH_FOUND,
    DEGENERATE_PATH,
    NO_EV_CANDIDATES,
    NO_NEARBY_BRANCHES,
    Coordinate,
    SelectionOutcome,
)
from .scoring import select_best

logger = logging.getLogger(__name__)

RouteInput = Union[str, Sequence[Coordinate]]


def select_branch(
    route: RouteInput,
    target_date: date,
    fleet: FleetSnapshot,
    config: PlannerConfig,
) -> SelectionOutcome:
    """
    Pick the single best (branch, EV) pair along `route` for `target_date`.

    `route` is either an encoded polyline or an already decoded path. The
    pipeline is proximity filter -> EV join -> availability -> scoring; the
    first stage that comes back empty decides the reason code.
    """
    path = decode_path(route) if isinstance(route, str) else list(route)
    day = target_date.isoformat()

    if len(path) < 2:
        return SelectionOutcome(best=None, reason_code=DEGENERATE_PATH, path_points=len(path), target_date=day)

    nearby = find_nearby_branches(
        config.lateral_threshold_m,
        path,
        fleet.branches,
        forward_progress_ratio=config.forward_progress_ratio,
    )
    counts = {"path_points": len(path), "nearby_count": len(nearby), "target_date": day, "nearby": tuple(nearby)}
    if not nearby:
        return SelectionOutcome(best=None, reason_code=NO_NEARBY_BRANCHES, **counts)

    eligible = build_eligible_ev_index(fleet.vehicles, config.range_threshold_km)
    candidates = build_candidates(nearby, fleet.branches, eligible)
    counts["candidate_count"] = len(candidates)
    if not candidates:
        return SelectionOutcome(best=None, reason_code=NO_EV_CANDIDATES, **counts)

    booked = build_booked_date_index(fleet.trips, config.tz)
    free = filter_available(candidates, booked, target_date)
    counts["available_count"] = len(free)
    if not free:
        return SelectionOutcome(best=None, reason_code=ALL_EVS_BOOKED, **counts)

    best = select_best(free)
    logger.info(
        "Selected branch %s with EV %s (score=%.4f) from %d free candidates",
        best.branch, best.ev_id, best.score, len(free),
    )
    return SelectionOutcome(best=best, reason_code=BRANCH_FOUND, **counts)
