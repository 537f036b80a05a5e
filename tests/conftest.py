# tests/conftest.py
from importlib import reload
from pathlib import Path

import pandas as pd
import polyline
import pytest
from fastapi.testclient import TestClient

# Route used across the suite: Prague-ish start, one midpoint, end ~133 km away
ROUTE_PATH = [(50.0, 14.0), (50.5, 14.5), (51.0, 15.0)]

TOY_BRANCHES = [
    {"Name": "Mid", "Lat": "50.5", "Lng": "14.50001", "cars": "['E1','G1']"},
    {"Name": "Diesel", "Lat": "50.5", "Lng": "14.5002", "cars": "['G2']"},
    {"Name": "Far", "Lat": "51.0", "Lng": "15.0", "cars": "['E3']"},
    {"Name": "Broken", "Lat": "n/a", "Lng": "14.0", "cars": "['E4']"},
]
TOY_CARS = [
    {"id": "E1", "type": "electric", "range_km": "150", "trips_ids": "['T1']"},
    {"id": "G1", "type": "gas", "range_km": "600", "trips_ids": "[]"},
    {"id": "G2", "type": "gas", "range_km": "500", "trips_ids": ""},
    {"id": "E3", "type": "electric", "range_km": "300", "trips_ids": "[]"},
    {"id": "E4", "type": "electric", "range_km": "300", "trips_ids": "[]"},
]
TOY_TRIPS = [
    {"car_id": "E1", "departure_time": "2024-06-02T08:00:00Z", "arrival_time": ""},
    {"car_id": "E3", "departure_time": "", "arrival_time": "2024-06-01 17:45"},
]


def write_fleet_csvs(data_root: Path, branches, cars, trips) -> Path:
    data_root.mkdir(parents=True, exist_ok=True)
    pd.DataFrame(branches, columns=["Name", "Lat", "Lng", "cars"]).to_csv(
        data_root / "branch_vehicle_allocation_with_cars.csv", index=False
    )
    pd.DataFrame(cars, columns=["id", "type", "range_km", "trips_ids"]).to_csv(
        data_root / "cars.csv", index=False
    )
    pd.DataFrame(trips, columns=["car_id", "departure_time", "arrival_time"]).to_csv(
        data_root / "trips.csv", index=False
    )
    return data_root


@pytest.fixture
def route_polyline() -> str:
    return polyline.encode(ROUTE_PATH, 5)


@pytest.fixture
def fleet_writer(tmp_path: Path):
    """Factory: write a custom fleet under tmp_path/<name> and return the directory."""
    def _write(name="fleet", branches=TOY_BRANCHES, cars=TOY_CARS, trips=TOY_TRIPS) -> Path:
        return write_fleet_csvs(tmp_path / name, branches, cars, trips)
    return _write


@pytest.fixture(autouse=True)
def _env_test_data(monkeypatch, tmp_path: Path):
    """
    Write the toy fleet under a temp dir and point the env at it,
    so nothing depends on a real data bundle or a real API key.
    """
    data_root = write_fleet_csvs(tmp_path / "data", TOY_BRANCHES, TOY_CARS, TOY_TRIPS)

    monkeypatch.setenv("FLEET_DATA_DIR", str(data_root))
    monkeypatch.delenv("FLEET_DATA_URL", raising=False)
    monkeypatch.setenv("PLANNER_TZ", "Europe/Prague")
    monkeypatch.setenv("GOOGLE_MAPS_API_KEY", "test-key")
    monkeypatch.setenv("DEBUG_API", "0")
    for name in ("LATERAL_THRESHOLD_M", "RANGE_THRESHOLD_KM", "FORWARD_PROGRESS_RATIO", "ROUTES_API_URL"):
        monkeypatch.delenv(name, raising=False)

    yield data_root  # tmp_path is auto-cleaned


@pytest.fixture
def app(_env_test_data):
    # Import AFTER env vars/files so module-level readers see the toy setup
    import backend.main as bm
    bm = reload(bm)
    return bm.app


@pytest.fixture
def client(app):
    return TestClient(app)
