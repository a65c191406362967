"""Google Routes API adapter (computeRoutes) behind the /directions endpoint."""

import logging
from collections.abc import Sequence
from typing import Any

import httpx

from tripcore.errors import NoRouteFoundError, RouteProviderError
from tripcore.models.common import LatLng
from tripcore.models.route import OrderedStop, RouteLeg, RouteResult

logger = logging.getLogger(__name__)

FIELD_MASK = ",".join(
    [
        "routes.duration",
        "routes.distanceMeters",
        "routes.polyline.encodedPolyline",
        "routes.legs.duration",
        "routes.legs.distanceMeters",
        "routes.legs.polyline.encodedPolyline",
        "routes.legs.startLocation",
        "routes.legs.endLocation",
        "routes.optimizedIntermediateWaypointIndex",
    ]
)


def _waypoint(stop: OrderedStop) -> dict[str, Any]:
    return {"location": {"latLng": {"latitude": stop.latitude, "longitude": stop.longitude}}}


def build_route_request(stops: Sequence[OrderedStop], optimize_order: bool) -> dict[str, Any]:
    """Build a computeRoutes request body; origin and destination are fixed."""
    request: dict[str, Any] = {
        "origin": _waypoint(stops[0]),
        "destination": _waypoint(stops[-1]),
        "travelMode": "DRIVE",
        "routingPreference": "TRAFFIC_AWARE",
        "computeAlternativeRoutes": False,
        "languageCode": "en-US",
        "units": "METRIC",
    }

    intermediates = stops[1:-1]
    if intermediates:
        request["intermediates"] = [_waypoint(stop) for stop in intermediates]
        if optimize_order:
            request["optimizeWaypointOrder"] = True

    return request


def parse_duration(value: str | None) -> int:
    """Parse a protobuf duration string such as "754s" into whole seconds."""
    if not value:
        return 0
    try:
        return int(float(value.rstrip("s")))
    except ValueError:
        return 0


def _location(raw: dict[str, Any] | None) -> LatLng:
    lat_lng = (raw or {}).get("latLng") or {}
    return LatLng(latitude=lat_lng.get("latitude") or 0, longitude=lat_lng.get("longitude") or 0)


def parse_routes_response(data: dict[str, Any], optimize_order: bool) -> RouteResult:
    """Normalise a computeRoutes response into a RouteResult.

    Raises:
        NoRouteFoundError: If the response has no routes
    """
    routes = data.get("routes") or []
    if not routes:
        raise NoRouteFoundError("No route found")

    route = routes[0]
    legs = [
        RouteLeg(
            distance_meters=leg.get("distanceMeters") or 0,
            duration_seconds=parse_duration(leg.get("duration")),
            start_location=_location(leg.get("startLocation")),
            end_location=_location(leg.get("endLocation")),
            polyline=(leg.get("polyline") or {}).get("encodedPolyline") or "",
        )
        for leg in route.get("legs") or []
    ]

    # Fall back to summing legs when route-level totals are missing
    total_distance = route.get("distanceMeters") or sum(leg.distance_meters for leg in legs)
    total_duration = parse_duration(route.get("duration")) or sum(
        leg.duration_seconds for leg in legs
    )

    waypoint_order = None
    if optimize_order and route.get("optimizedIntermediateWaypointIndex"):
        waypoint_order = list(route["optimizedIntermediateWaypointIndex"])

    return RouteResult(
        legs=legs,
        total_distance_meters=total_distance,
        total_duration_seconds=total_duration,
        overview_polyline=(route.get("polyline") or {}).get("encodedPolyline") or "",
        waypoint_order=waypoint_order,
    )


async def compute_routes(
    stops: Sequence[OrderedStop],
    optimize_order: bool,
    api_key: str,
    base_url: str = "https://routes.googleapis.com/directions/v2:computeRoutes",
    client: httpx.AsyncClient | None = None,
) -> RouteResult:
    """Compute a driving route through the stops with Google Routes.

    Args:
        stops: At least two stops with coordinates
        optimize_order: Let Google reorder intermediates
        api_key: Google Maps API key
        base_url: computeRoutes endpoint
        client: Optional httpx client (for testing with mocks)

    Returns:
        RouteResult

    Raises:
        RouteProviderError: Google answered non-2xx
        NoRouteFoundError: Google returned no routes
        httpx.HTTPError: On network errors
    """
    close_client = False
    if client is None:
        client = httpx.AsyncClient(timeout=10.0)
        close_client = True

    try:
        response = await client.post(
            base_url,
            json=build_route_request(stops, optimize_order),
            headers={
                "Content-Type": "application/json",
                "X-Goog-Api-Key": api_key,
                "X-Goog-FieldMask": FIELD_MASK,
            },
        )

        if not response.is_success:
            logger.error(f"Google Routes API error: {response.text}")
            raise RouteProviderError(
                response.status_code, f"Google Routes API error: {response.status_code}"
            )

        return parse_routes_response(response.json(), optimize_order)
    finally:
        if close_client:
            await client.aclose()
