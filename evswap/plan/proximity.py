"""
Route-proximity filter: which branches sit close enough to a decoded route.

A branch qualifies when
  - its straight-line distance from the route start is at most
    `forward_progress_ratio` of the start->end chord (60% by default), and
  - its distance to the nearest sampled path point is within
    `lateral_threshold_m`.

The lateral distance is measured to path points, not to the segments between
them, so it is only as good as the route's sampling density.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from .geo import haversine_m
from .schema import Branch, Coordinate, NearbyBranch

logger = logging.getLogger(__name__)

DEFAULT_FORWARD_PROGRESS_RATIO = 0.6


def nearest_path_point(location: Coordinate, path: Sequence[Coordinate]) -> Tuple[float, Optional[Coordinate]]:
    """Minimum distance from `location` to any path point; earliest point wins ties."""
    min_dist = float("inf")
    min_loc: Optional[Coordinate] = None
    for point in path:
        d = haversine_m(point, location)
        if d < min_dist:
            min_dist = d
            min_loc = point
    return min_dist, min_loc


def find_nearby_branches(
    lateral_threshold_m: float,
    path: Sequence[Coordinate],
    branches: Iterable[Branch],
    *,
    forward_progress_ratio: float = DEFAULT_FORWARD_PROGRESS_RATIO,
) -> List[NearbyBranch]:
    if len(path) < 2:
        return []

    start = path[0]
    end = path[-1]
    max_progress_m = haversine_m(start, end) * forward_progress_ratio

    out: List[NearbyBranch] = []
    skipped_progress = 0
    skipped_lateral = 0
    for branch in branches:
        coords = branch.location

        if haversine_m(start, coords) > max_progress_m:
            skipped_progress += 1
            continue

        min_dist, min_loc = nearest_path_point(coords, path)
        if min_loc is None or min_dist > lateral_threshold_m:
            skipped_lateral += 1
            continue

        out.append(
            NearbyBranch(
                name=branch.name,
                distance_to_route_m=min_dist,
                min_distance_location=min_loc,
            )
        )

    logger.debug(
        "Proximity filter: %d nearby, %d past forward bound, %d beyond %.0fm",
        len(out), skipped_progress, skipped_lateral, lateral_threshold_m,
    )
    return out
