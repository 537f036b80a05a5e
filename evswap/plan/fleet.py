"""
Fleet availability index.

Two lookups built from the raw fleet snapshot:
- eligible EVs: electric vehicles whose range strictly exceeds the threshold
- booked dates: for every vehicle, the local calendar dates it already has a
  trip on (a single trip blocks the whole day)
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, datetime, tzinfo
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Set

from ..timeparse import to_local_date
from .schema import EligibleEv, Trip, Vehicle, VehicleType

logger = logging.getLogger(__name__)


def build_eligible_ev_index(vehicles: Iterable[Vehicle], range_threshold_km: float) -> Dict[str, EligibleEv]:
    index: Dict[str, EligibleEv] = {}
    for vehicle in vehicles:
        if vehicle.type != VehicleType.ELECTRIC:
            continue
        if vehicle.range_km is None or not vehicle.range_km > range_threshold_km:
            continue
        index[vehicle.id.strip()] = EligibleEv(range_km=vehicle.range_km, trip_ids=tuple(vehicle.trip_ids))
    return index


def booking_timestamp(trip: Trip) -> Optional[datetime]:
    """
    Timestamp that decides which day a trip occupies.

    Lookup order: departure_time, then arrival_time. The first field that is
    present wins even when it failed to parse; the result is then None and the
    trip blocks nothing. None as well when neither field is set.
    """
    fields = (
        (trip.departure_time, trip.departure_raw),
        (trip.arrival_time, trip.arrival_raw),
    )
    for value, raw in fields:
        if value is not None or (raw or "").strip():
            return value
    return None


def build_booked_date_index(trips: Iterable[Trip], tz: tzinfo) -> Dict[str, FrozenSet[date]]:
    booked: Dict[str, Set[date]] = defaultdict(set)
    skipped = 0
    for trip in trips:
        vehicle_id = (trip.vehicle_id or "").strip()
        ts = booking_timestamp(trip)
        if not vehicle_id or ts is None:
            skipped += 1
            continue
        day = to_local_date(ts, tz)
        if day is None:
            skipped += 1
            continue
        booked[vehicle_id].add(day)
    if skipped:
        logger.debug("Booked-date index: skipped %d trips without id or timestamp", skipped)
    return {vid: frozenset(days) for vid, days in booked.items()}


def is_booked_on(booked_index: Mapping[str, FrozenSet[date]], vehicle_id: str, day: date) -> bool:
    return day in booked_index.get(vehicle_id.strip(), frozenset())
