import json

import pytest
import responses

from evswap.plan.config import DEFAULT_ROUTES_API_URL, ConfigError, RoutesConfig
from evswap.plan.routes_client import (
    RoutesApiError,
    RoutesClient,
    leg_from_response,
    parse_duration_s,
)
from evswap.plan.schema import Coordinate

A, B = Coordinate(50.0, 14.0), Coordinate(51.0, 15.0)
ROUTE_BODY = {
    "routes": [
        {
            "distanceMeters": 133_500,
            "duration": "5400s",
            "polyline": {"encodedPolyline": "_p~iF~ps|U_ulLnnqC"},
        }
    ]
}


def test_parse_duration():
    assert parse_duration_s("523s") == 523.0
    assert parse_duration_s("12.5s") == 12.5
    assert parse_duration_s(42) == 42.0
    assert parse_duration_s(None) == 0.0
    assert parse_duration_s("soon") == 0.0

def test_leg_falls_back_to_summing_legs():
    body = {
        "routes": [
            {
                "polyline": {"encodedPolyline": "abc"},
                "legs": [
                    {"distanceMeters": 1000, "duration": "60s"},
                    {"distanceMeters": 500, "duration": "30s"},
                ],
            }
        ]
    }
    leg = leg_from_response(body, A, B, "EV")
    assert leg.distance_m == 1500.0
    assert leg.duration_s == 90.0

@pytest.mark.parametrize("body", [{}, {"routes": []}, {"routes": [{"distanceMeters": 1}]}])
def test_leg_without_polyline_raises(body):
    with pytest.raises(RoutesApiError):
        leg_from_response(body, A, B, "Gas")

def test_from_config_requires_key():
    with pytest.raises(ConfigError):
        RoutesClient.from_config(RoutesConfig(api_key=None))

@responses.activate
def test_drive_route_request_and_parse():
    responses.add(responses.POST, DEFAULT_ROUTES_API_URL, json=ROUTE_BODY, status=200)

    leg = RoutesClient("k-123").compute_drive_route(A, B, "Gas")

    assert leg.vehicle_type == "Gas"
    assert leg.encoded_polyline == "_p~iF~ps|U_ulLnnqC"
    assert leg.distance_m == 133_500.0
    assert leg.duration_s == 5400.0

    req = responses.calls[0].request
    assert req.headers["X-Goog-Api-Key"] == "k-123"
    assert req.headers["X-Goog-FieldMask"] == "routes.*"
    sent = json.loads(req.body)
    assert sent["travelMode"] == "DRIVE"
    assert sent["origin"]["location"]["latLng"] == {"latitude": 50.0, "longitude": 14.0}
    assert sent["units"] == "METRIC"

@responses.activate
def test_http_error_carries_status():
    responses.add(responses.POST, DEFAULT_ROUTES_API_URL, json={"error": {"message": "denied"}}, status=403)
    with pytest.raises(RoutesApiError) as exc:
        RoutesClient("bad").compute_drive_route(A, B)
    assert exc.value.status_code == 403

@responses.activate
def test_connection_failure_is_routes_error():
    # nothing registered for this URL, so responses refuses the connection
    client = RoutesClient("k", base_url="https://routes.invalid/compute")
    with pytest.raises(RoutesApiError) as exc:
        client.compute_drive_route(A, B)
    assert exc.value.status_code is None

def test_unknown_vehicle_type():
    with pytest.raises(ValueError):
        RoutesClient("k").compute_drive_route(A, B, "Diesel")

@responses.activate
def test_transit_defaults_departure_to_now_utc():
    responses.add(responses.POST, DEFAULT_ROUTES_API_URL, json={"routes": []}, status=200)
    out = RoutesClient("k").compute_transit_route(A, B)
    assert out == {"routes": []}

    sent = json.loads(responses.calls[0].request.body)
    assert sent["travelMode"] == "TRANSIT"
    assert sent["departureTime"].endswith("Z")
    assert "BUS" in sent["transitPreferences"]["allowedTravelModes"]
