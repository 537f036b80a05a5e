"""
Ranking of branch/EV candidates.

score = distance_to_route_m / distance_to_min_location_m, lower is better.
Both distances are measured independently; a branch sitting exactly on its
nearest path point has a zero denominator and scores +inf, so it only wins
when it is the sole candidate.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from .geo import haversine_m
from .schema import Candidate, ScoredCandidate


def score_candidate(c: Candidate) -> ScoredCandidate:
    dist_to_min = haversine_m(c.location, c.min_distance_location)
    score = c.distance_to_route_m / dist_to_min if dist_to_min != 0 else float("inf")
    return ScoredCandidate(
        branch=c.branch,
        location=c.location,
        distance_to_route_m=c.distance_to_route_m,
        min_distance_location=c.min_distance_location,
        ev_id=c.ev_id,
        trip_ids=c.trip_ids,
        distance_to_min_location_m=dist_to_min,
        score=score,
    )


def score_candidates(candidates: Iterable[Candidate]) -> List[ScoredCandidate]:
    return [score_candidate(c) for c in candidates]


def select_best(candidates: Iterable[Candidate]) -> Optional[ScoredCandidate]:
    """Lowest score wins; ties keep the first one encountered."""
    best: Optional[ScoredCandidate] = None
    for cur in score_candidates(candidates):
        if best is None or cur.score < best.score:
            best = cur
    return best
