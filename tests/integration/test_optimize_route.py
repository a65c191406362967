"""Integration tests for POST /optimize-route."""

from collections.abc import Generator
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from tripcore.api.deps import get_route_optimizer
from tripcore.errors import (
    OptimizationProviderError,
    OptimizationQuotaExceededError,
    OptimizationRateLimitedError,
)
from tripcore.llm.client import ProposedOrder
from tripcore.main import app
from tripcore.optimization.service import RouteOptimizer

ITEMS = [
    {"id": "far", "title": "Parque Arví", "latitude": 6.2836, "longitude": -75.5023},
    {"id": "home", "title": "Hotel", "latitude": 6.2088, "longitude": -75.5671},
    {"id": "note", "title": "Buy SIM card", "item_type": "note"},
    {"id": "near", "title": "Pergamino", "latitude": 6.2100, "longitude": -75.5660},
]


@pytest.fixture(autouse=True)
def clear_overrides() -> Generator[None, None, None]:
    yield
    app.dependency_overrides.clear()


def client_with(optimizer: RouteOptimizer) -> TestClient:
    app.dependency_overrides[get_route_optimizer] = lambda: optimizer
    return TestClient(app)


def failing_llm(error: Exception) -> AsyncMock:
    llm = AsyncMock()
    llm.propose_order.side_effect = error
    return llm


def test_nearest_neighbor_when_no_llm() -> None:
    client = client_with(RouteOptimizer(None))

    response = client.post("/optimize-route", json={"items": ITEMS, "dayDate": "2024-03-02"})

    assert response.status_code == 200
    data = response.json()
    assert data["optimizedOrder"] == ["far", "near", "home", "note"]
    assert data["explanation"].startswith("Route optimized using nearest-neighbor algorithm.")
    assert set(data["savings"]) == {"distanceKm", "timeMinutes"}


def test_start_location_preference() -> None:
    client = client_with(RouteOptimizer(None))

    response = client.post(
        "/optimize-route",
        json={
            "items": ITEMS,
            "dayDate": "2024-03-02",
            "preferences": {"startLocation": {"lat": 6.2090, "lng": -75.5670}},
        },
    )

    assert response.status_code == 200
    assert response.json()["optimizedOrder"] == ["home", "near", "far", "note"]


def test_llm_order_and_reasoning() -> None:
    llm = AsyncMock()
    llm.propose_order.return_value = ProposedOrder(order=[2, 3, 1], reasoning="Cafe before hike")
    client = client_with(RouteOptimizer(llm))

    response = client.post("/optimize-route", json={"items": ITEMS, "dayDate": "2024-03-02"})

    assert response.status_code == 200
    assert response.json()["optimizedOrder"] == ["home", "near", "far", "note"]
    assert response.json()["explanation"] == "Cafe before hike"


def test_single_item_returns_unchanged() -> None:
    client = client_with(RouteOptimizer(None))

    response = client.post("/optimize-route", json={"items": ITEMS[:1], "dayDate": "2024-03-02"})

    assert response.status_code == 200
    assert response.json()["optimizedOrder"] == ["far"]
    assert response.json()["savings"] == {"distanceKm": 0.0, "timeMinutes": 0}


@pytest.mark.parametrize(
    ("error", "status"),
    [
        (OptimizationRateLimitedError("Rate limit exceeded. Please try again later.", 429), 429),
        (OptimizationQuotaExceededError("AI credits exhausted.", 402), 402),
        (OptimizationProviderError("AI gateway error", 503), 500),
    ],
)
def test_provider_errors(error: Exception, status: int) -> None:
    client = client_with(RouteOptimizer(failing_llm(error)))

    response = client.post("/optimize-route", json={"items": ITEMS, "dayDate": "2024-03-02"})

    assert response.status_code == status
    assert response.json() == {"error": str(error)}
