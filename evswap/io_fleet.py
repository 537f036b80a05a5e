# evswap/io_fleet.py
from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urljoin
import json
import logging
import re

import numpy as np
import pandas as pd

from .plan.schema import Branch, Coordinate, Trip, Vehicle, VehicleType
from .timeparse import parse_timestamp

logger = logging.getLogger(__name__)

_LEADING_NUMBER_RE = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")


class FleetDataError(RuntimeError):
    """A fleet data source is missing, unreachable or lacks required columns."""


@dataclass
class ColumnMap:
    # Branch directory
    branches_file: str = "branch_vehicle_allocation_with_cars.csv"
    branch_name: str = "Name"
    branch_lat: str = "Lat"
    branch_lng: str = "Lng"
    branch_cars: str = "cars"

    # Vehicle fleet
    vehicles_file: str = "cars.csv"
    vehicle_id: str = "id"
    vehicle_type: str = "type"
    vehicle_range_km: str = "range_km"
    vehicle_trip_ids: str = "trips_ids"

    # Booking log
    trips_file: str = "trips.csv"
    trip_vehicle_id: str = "car_id"
    trip_departure: str = "departure_time"
    trip_arrival: str = "arrival_time"

def _get_colmap(cfg: Optional[Dict[str, Any]]) -> ColumnMap:
    m = ColumnMap()
    overrides = (cfg or {}).get("column_map", {})
    for k, v in overrides.items():
        if hasattr(m, k):
            setattr(m, k, v)
    return m


@dataclass(frozen=True)
class FleetSnapshot:
    """Branches, vehicles and bookings as read for one request."""
    branches: Tuple[Branch, ...]
    vehicles: Tuple[Vehicle, ...]
    trips: Tuple[Trip, ...]
    source: str = ""

    def summary(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "branches": len(self.branches),
            "vehicles": len(self.vehicles),
            "trips": len(self.trips),
        }


# ---------------------------------------------------------------------------
# Cell parsers
# ---------------------------------------------------------------------------

def parse_string_array(cell: Any) -> List[str]:
    """
    Parse a list cell written as "['E1','G2']".
    Single quotes are normalized to double quotes before JSON parsing;
    anything malformed (or not a list) parses to [].
    """
    if cell is None:
        return []
    if isinstance(cell, (list, tuple)):
        return [str(x) for x in cell]
    s = str(cell).strip()
    if not s or s.lower() == "nan":
        return []
    try:
        parsed = json.loads(s.replace("'", '"'))
    except (ValueError, TypeError):
        return []
    if not isinstance(parsed, list):
        return []
    return [str(x) for x in parsed]

def _to_float(value: Any) -> Optional[float]:
    """Leading number of the cell ("150 km" -> 150.0); None when there is none."""
    if value is None:
        return None
    m = _LEADING_NUMBER_RE.match(str(value))
    if not m:
        return None
    f = float(m.group(1))
    return f if np.isfinite(f) else None


# ---------------------------------------------------------------------------
# Readers
# ---------------------------------------------------------------------------

def source_path(source: str, filename: str) -> str:
    if source.startswith(("http://", "https://")):
        return urljoin(source.rstrip("/") + "/", filename)
    return str(Path(source) / filename)

def _read_csv(source: str, filename: str, required: List[str]) -> pd.DataFrame:
    where = source_path(source, filename)
    if not where.startswith(("http://", "https://")) and not Path(where).exists():
        raise FleetDataError(f"Fleet data file not found: {where}")
    try:
        df = pd.read_csv(where, dtype=str, keep_default_na=False)
    except Exception as e:
        raise FleetDataError(f"Failed to read {where}: {e}") from e
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise FleetDataError(f"{filename} is missing columns: {', '.join(missing)}")
    return df

def branches_from_df(df: pd.DataFrame, col: ColumnMap) -> List[Branch]:
    lat = pd.to_numeric(df[col.branch_lat].str.strip(), errors="coerce")
    lng = pd.to_numeric(df[col.branch_lng].str.strip(), errors="coerce")
    cars = df[col.branch_cars] if col.branch_cars in df.columns else pd.Series([""] * len(df), index=df.index)

    out: List[Branch] = []
    for i, name in df[col.branch_name].items():
        if not (np.isfinite(lat[i]) and np.isfinite(lng[i])):
            logger.warning("Skipping branch %r: non-numeric coordinates", name)
            continue
        out.append(
            Branch(
                name=str(name),
                location=Coordinate(lat=float(lat[i]), lng=float(lng[i])),
                vehicle_ids=tuple(parse_string_array(cars[i])),
            )
        )
    return out

def vehicles_from_df(df: pd.DataFrame, col: ColumnMap) -> List[Vehicle]:
    trip_col = df[col.vehicle_trip_ids] if col.vehicle_trip_ids in df.columns else pd.Series([""] * len(df), index=df.index)
    out: List[Vehicle] = []
    for i, row in df.iterrows():
        vid = str(row[col.vehicle_id]).strip()
        if not vid:
            continue
        out.append(
            Vehicle(
                id=vid,
                type=VehicleType.from_raw(row[col.vehicle_type]),
                range_km=_to_float(row[col.vehicle_range_km]),
                trip_ids=tuple(parse_string_array(trip_col[i])),
            )
        )
    return out

def trips_from_df(df: pd.DataFrame, col: ColumnMap) -> List[Trip]:
    dep = df[col.trip_departure] if col.trip_departure in df.columns else pd.Series([""] * len(df), index=df.index)
    arr = df[col.trip_arrival] if col.trip_arrival in df.columns else pd.Series([""] * len(df), index=df.index)
    return [
        Trip(
            vehicle_id=str(vid).strip(),
            departure_time=parse_timestamp(dep[i]),
            arrival_time=parse_timestamp(arr[i]),
            departure_raw=str(dep[i]).strip(),
            arrival_raw=str(arr[i]).strip(),
        )
        for i, vid in df[col.trip_vehicle_id].items()
    ]

def load_branches(source: str, config: Optional[Dict[str, Any]] = None) -> List[Branch]:
    col = _get_colmap(config)
    df = _read_csv(source, col.branches_file, [col.branch_name, col.branch_lat, col.branch_lng])
    return branches_from_df(df, col)

def load_vehicles(source: str, config: Optional[Dict[str, Any]] = None) -> List[Vehicle]:
    col = _get_colmap(config)
    df = _read_csv(source, col.vehicles_file, [col.vehicle_id, col.vehicle_type, col.vehicle_range_km])
    return vehicles_from_df(df, col)

def load_trips(source: str, config: Optional[Dict[str, Any]] = None) -> List[Trip]:
    col = _get_colmap(config)
    df = _read_csv(source, col.trips_file, [col.trip_vehicle_id])
    return trips_from_df(df, col)

def load_fleet_snapshot(source: str, config: Optional[Dict[str, Any]] = None) -> FleetSnapshot:
    """
    Read the three fleet sources in parallel. None of them depends on another,
    so they are fetched concurrently and joined before the snapshot is built.
    """
    with ThreadPoolExecutor(max_workers=3) as executor:
        f_branches = executor.submit(load_branches, source, config)
        f_vehicles = executor.submit(load_vehicles, source, config)
        f_trips = executor.submit(load_trips, source, config)
        branches = f_branches.result()
        vehicles = f_vehicles.result()
        trips = f_trips.result()

    snapshot = FleetSnapshot(
        branches=tuple(branches),
        vehicles=tuple(vehicles),
        trips=tuple(trips),
        source=source,
    )
    logger.info("Loaded fleet snapshot: %s", snapshot.summary())
    return snapshot
