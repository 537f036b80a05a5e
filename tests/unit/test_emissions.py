import pytest

from evswap.plan.emissions import Rates, summarize_legs
from evswap.plan.routes_client import RouteLeg
from evswap.plan.schema import Coordinate

A, B = Coordinate(50.0, 14.0), Coordinate(51.0, 15.0)


def _leg(vehicle_type, km, minutes=10):
    return RouteLeg(vehicle_type, A, B, "??", distance_m=km * 1000.0, duration_s=minutes * 60.0)


def test_swap_trip_saves_against_all_gas_baseline():
    legs = [_leg("Gas", 10), _leg("EV", 10), _leg("EV", 10), _leg("Gas", 10)]
    s = summarize_legs(legs, Rates())

    gas = s["by_vehicle_type"]["Gas"]
    assert gas["total_distance_m"] == 20_000
    assert gas["total_duration_s"] == 1200
    assert gas["total_cost"] == pytest.approx(48.0)
    assert s["by_vehicle_type"]["EV"]["total_emissions_kg"] == 0.0
    assert s["by_vehicle_type"]["Mix"]["total_distance_m"] == 0

    assert s["currency"] == "CZK"
    assert s["baseline"] == {"cost": pytest.approx(96.0), "emissions_kg": pytest.approx(7.68)}
    assert s["actual"]["cost"] == pytest.approx(58.0)
    assert s["saved"]["cost"] == pytest.approx(38.0)
    assert s["saved"]["emissions_kg"] == pytest.approx(3.84)

def test_direct_mix_route_has_no_baseline():
    s = summarize_legs([_leg("Mix", 100)], Rates())
    assert s["by_vehicle_type"]["Mix"]["total_cost"] == pytest.approx(175.0)
    assert s["by_vehicle_type"]["Mix"]["total_emissions_kg"] == pytest.approx(12.5)
    assert s["baseline"]["cost"] == 0.0
    assert s["saved"]["cost"] == 0.0

def test_custom_rates():
    rates = Rates(emission_kg_per_km={"Gas": 0.2, "EV": 0.05, "Mix": 0.1}, cost_per_km={"Gas": 3.0, "EV": 1.0, "Mix": 2.0}, currency="EUR")
    s = summarize_legs([_leg("EV", 10)], rates)
    assert s["currency"] == "EUR"
    assert s["by_vehicle_type"]["EV"]["total_emissions_kg"] == pytest.approx(0.5)
    assert s["saved"]["cost"] == pytest.approx(20.0)
