"""Integration tests for POST /directions."""

from collections.abc import AsyncGenerator, Callable, Generator
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

from tripcore.api.deps import get_outbound_client
from tripcore.config import Settings, get_settings
from tripcore.main import app

WAYPOINTS = [
    {"id": "a", "title": "Parque Lleras", "latitude": 6.2088, "longitude": -75.5671},
    {"id": "b", "title": "Plaza Botero", "latitude": 6.2527, "longitude": -75.5686},
]

GOOGLE_ROUTES = {
    "routes": [
        {
            "duration": "720s",
            "distanceMeters": 5400,
            "polyline": {"encodedPolyline": "overview"},
            "legs": [
                {
                    "duration": "720s",
                    "distanceMeters": 5400,
                    "polyline": {"encodedPolyline": "leg"},
                    "startLocation": {"latLng": {"latitude": 6.2088, "longitude": -75.5671}},
                    "endLocation": {"latLng": {"latitude": 6.2527, "longitude": -75.5686}},
                }
            ],
        }
    ]
}


def make_client(
    handler: Callable[[httpx.Request], httpx.Response], api_key: str = "test-key"
) -> TestClient:
    async def outbound() -> AsyncGenerator[httpx.AsyncClient, None]:
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            yield client

    app.dependency_overrides[get_settings] = lambda: Settings(google_maps_api_key=api_key)
    app.dependency_overrides[get_outbound_client] = outbound
    return TestClient(app)


@pytest.fixture(autouse=True)
def clear_overrides() -> Generator[None, None, None]:
    yield
    app.dependency_overrides.clear()


def ok_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json=GOOGLE_ROUTES)


def test_directions_success() -> None:
    client = make_client(ok_handler)

    response = client.post("/directions", json={"waypoints": WAYPOINTS})

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["totalDistanceMeters"] == 5400
    assert data["totalDurationSeconds"] == 720
    assert data["legs"][0]["distanceMeters"] == 5400
    assert data["legs"][0]["startLocation"] == {"latitude": 6.2088, "longitude": -75.5671}
    assert "waypointOrder" not in data


def test_directions_requires_two_waypoints() -> None:
    calls: list[Any] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=GOOGLE_ROUTES)

    client = make_client(handler)

    response = client.post("/directions", json={"waypoints": WAYPOINTS[:1]})

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "At least 2 waypoints are required"}
    assert calls == []


def test_directions_without_api_key() -> None:
    client = make_client(ok_handler, api_key="")

    response = client.post("/directions", json={"waypoints": WAYPOINTS})

    assert response.status_code == 500
    assert response.json()["success"] is False


def test_directions_no_route() -> None:
    client = make_client(lambda request: httpx.Response(200, json={"routes": []}))

    response = client.post("/directions", json={"waypoints": WAYPOINTS})

    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "No route found"}


def test_directions_propagates_upstream_status() -> None:
    client = make_client(lambda request: httpx.Response(403, json={"error": "denied"}))

    response = client.post("/directions", json={"waypoints": WAYPOINTS})

    assert response.status_code == 403
    assert response.json()["success"] is False
