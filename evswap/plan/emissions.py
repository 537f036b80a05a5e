from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable

from .routes_client import VEHICLE_TYPES, RouteLeg

DEFAULT_EMISSION_KG_PER_KM = {"Gas": 0.192, "EV": 0.0, "Mix": 0.125}
DEFAULT_COST_PER_KM = {"Gas": 2.4, "EV": 0.5, "Mix": 1.75}  # CZK


@dataclass(frozen=True)
class Rates:
    emission_kg_per_km: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_EMISSION_KG_PER_KM))
    cost_per_km: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_COST_PER_KM))
    currency: str = "CZK"


def _empty_totals() -> Dict[str, float]:
    return {"total_distance_m": 0.0, "total_duration_s": 0.0, "total_emissions_kg": 0.0, "total_cost": 0.0}


def summarize_legs(legs: Iterable[RouteLeg], rates: Rates) -> Dict[str, Any]:
    """
    Per vehicle type totals over the driven legs, plus savings against
    driving the Gas+EV distance entirely on gasoline.
    """
    per_type = {vt: _empty_totals() for vt in VEHICLE_TYPES}
    for leg in legs:
        totals = per_type[leg.vehicle_type]
        km = leg.distance_m / 1000.0
        totals["total_distance_m"] += leg.distance_m
        totals["total_duration_s"] += leg.duration_s
        totals["total_emissions_kg"] += km * rates.emission_kg_per_km.get(leg.vehicle_type, 0.0)
        totals["total_cost"] += km * rates.cost_per_km.get(leg.vehicle_type, 0.0)

    for totals in per_type.values():
        totals["total_emissions_kg"] = round(totals["total_emissions_kg"], 2)
        totals["total_cost"] = round(totals["total_cost"], 2)

    driven_km = (per_type["Gas"]["total_distance_m"] + per_type["EV"]["total_distance_m"]) / 1000.0
    baseline_cost = round(driven_km * rates.cost_per_km.get("Gas", 0.0), 2)
    baseline_emissions = round(driven_km * rates.emission_kg_per_km.get("Gas", 0.0), 2)
    actual_cost = per_type["Gas"]["total_cost"] + per_type["EV"]["total_cost"]
    actual_emissions = per_type["Gas"]["total_emissions_kg"] + per_type["EV"]["total_emissions_kg"]

    return {
        "by_vehicle_type": per_type,
        "currency": rates.currency,
        "baseline": {"cost": baseline_cost, "emissions_kg": baseline_emissions},
        "actual": {"cost": round(actual_cost, 2), "emissions_kg": round(actual_emissions, 2)},
        "saved": {
            "cost": round(baseline_cost - actual_cost, 2),
            "emissions_kg": round(baseline_emissions - actual_emissions, 2),
        },
    }
