from __future__ import annotations

import logging
from datetime import date
from typing import Dict, FrozenSet, Iterable, List, Mapping

from .fleet import is_booked_on
from .schema import Branch, Candidate, EligibleEv, NearbyBranch

logger = logging.getLogger(__name__)


def build_candidates(
    nearby: Iterable[NearbyBranch],
    branches: Iterable[Branch],
    eligible_index: Mapping[str, EligibleEv],
) -> List[Candidate]:
    """
    Join nearby branches with their EV inventory.

    One candidate per (branch, eligible EV) pair: a branch holding two
    qualifying EVs yields two candidates. Order follows `branches`, then each
    branch's own vehicle order.
    """
    nearby_by_name: Dict[str, NearbyBranch] = {n.name: n for n in nearby}

    candidates: List[Candidate] = []
    for branch in branches:
        info = nearby_by_name.get(branch.name)
        if info is None:
            continue
        ev_ids = branch.electric_vehicle_ids()
        if not ev_ids:
            continue
        for ev_id in ev_ids:
            ev = eligible_index.get(ev_id)
            if ev is None:
                continue
            candidates.append(
                Candidate(
                    branch=branch.name,
                    location=branch.location,
                    distance_to_route_m=info.distance_to_route_m,
                    min_distance_location=info.min_distance_location,
                    ev_id=ev_id,
                    trip_ids=ev.trip_ids,
                )
            )
    return candidates


def filter_available(
    candidates: Iterable[Candidate],
    booked_index: Mapping[str, FrozenSet[date]],
    target_date: date,
) -> List[Candidate]:
    """Drop candidates whose EV already has a trip on `target_date`."""
    free: List[Candidate] = []
    for c in candidates:
        if is_booked_on(booked_index, c.ev_id, target_date):
            logger.debug("EV %s at %s is booked on %s", c.ev_id, c.branch, target_date.isoformat())
            continue
        free.append(c)
    return free
