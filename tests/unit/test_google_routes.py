"""Tests for the Google Routes adapter."""

import json

import httpx
import pytest

from tripcore.adapters.google_routes import (
    FIELD_MASK,
    build_route_request,
    compute_routes,
    parse_duration,
    parse_routes_response,
)
from tripcore.errors import NoRouteFoundError, RouteProviderError
from tripcore.models import OrderedStop

A = OrderedStop(id="a", title="A", latitude=6.20, longitude=-75.56)
B = OrderedStop(id="b", title="B", latitude=6.25, longitude=-75.57)
C = OrderedStop(id="c", title="C", latitude=6.26, longitude=-75.61)
D = OrderedStop(id="d", title="D", latitude=6.24, longitude=-75.58)


def routes_payload() -> dict:
    def lat_lng(stop: OrderedStop) -> dict:
        return {"latLng": {"latitude": stop.latitude, "longitude": stop.longitude}}

    return {
        "routes": [
            {
                "duration": "1500s",
                "distanceMeters": 9100,
                "polyline": {"encodedPolyline": "overview"},
                "legs": [
                    {
                        "duration": "600s",
                        "distanceMeters": 5000,
                        "polyline": {"encodedPolyline": "leg1"},
                        "startLocation": lat_lng(A),
                        "endLocation": lat_lng(C),
                    },
                    {
                        "duration": "900s",
                        "distanceMeters": 4100,
                        "polyline": {"encodedPolyline": "leg2"},
                        "startLocation": lat_lng(C),
                        "endLocation": lat_lng(D),
                    },
                ],
                "optimizedIntermediateWaypointIndex": [1, 0],
            }
        ]
    }


def test_build_request_fixes_origin_and_destination() -> None:
    request = build_route_request([A, B, C, D], optimize_order=True)

    assert request["origin"]["location"]["latLng"]["latitude"] == A.latitude
    assert request["destination"]["location"]["latLng"]["latitude"] == D.latitude
    assert len(request["intermediates"]) == 2
    assert request["optimizeWaypointOrder"] is True
    assert request["travelMode"] == "DRIVE"


def test_build_request_without_intermediates() -> None:
    request = build_route_request([A, B], optimize_order=True)

    assert "intermediates" not in request
    assert "optimizeWaypointOrder" not in request


@pytest.mark.parametrize(
    ("value", "seconds"),
    [("754s", 754), ("12.7s", 12), ("", 0), (None, 0), ("bogus", 0)],
)
def test_parse_duration(value: str | None, seconds: int) -> None:
    assert parse_duration(value) == seconds


def test_parse_routes_response() -> None:
    result = parse_routes_response(routes_payload(), optimize_order=True)

    assert len(result.legs) == 2
    assert result.legs[0].duration_seconds == 600
    assert result.legs[0].polyline == "leg1"
    assert result.legs[1].end_location.latitude == D.latitude
    assert result.total_distance_meters == 9100
    assert result.total_duration_seconds == 1500
    assert result.overview_polyline == "overview"
    assert result.waypoint_order == [1, 0]


def test_parse_routes_response_ignores_order_when_not_requested() -> None:
    assert parse_routes_response(routes_payload(), optimize_order=False).waypoint_order is None


def test_parse_routes_response_sums_legs_when_totals_missing() -> None:
    payload = routes_payload()
    del payload["routes"][0]["duration"]
    del payload["routes"][0]["distanceMeters"]

    result = parse_routes_response(payload, optimize_order=False)

    assert result.total_distance_meters == 9100
    assert result.total_duration_seconds == 1500


def test_parse_routes_response_without_routes() -> None:
    with pytest.raises(NoRouteFoundError):
        parse_routes_response({"routes": []}, optimize_order=False)


@pytest.mark.asyncio
async def test_compute_routes_sends_key_and_field_mask() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["X-Goog-Api-Key"] == "test-key"
        assert request.headers["X-Goog-FieldMask"] == FIELD_MASK
        assert json.loads(request.content)["origin"]["location"]["latLng"]["latitude"] == 6.20
        return httpx.Response(200, json=routes_payload())

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))

    result = await compute_routes([A, C, D], True, api_key="test-key", client=client)

    assert result.total_distance_km == 9.1
    await client.aclose()


@pytest.mark.asyncio
async def test_compute_routes_propagates_upstream_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, json={"error": {"message": "API key invalid"}})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))

    with pytest.raises(RouteProviderError) as exc_info:
        await compute_routes([A, B], False, api_key="bad", client=client)

    assert exc_info.value.status == 403
    await client.aclose()
