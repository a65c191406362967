"""Route Client - travel legs for an ordered sequence of stops.

Calls the directions endpoint (POST waypoints) and maps every failure to a
typed error. There is no retry and no cache: identical requests always reach
the provider. Retry policy, if any, belongs to the caller.
"""

import time
from collections.abc import Iterable, Sequence
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from tripcore.adapters.base import (
    ProviderContext,
    ProviderLogger,
    ProviderMetrics,
    bearer_headers,
)
from tripcore.config import Settings
from tripcore.errors import (
    InsufficientStopsError,
    NoRouteFoundError,
    RouteProviderError,
    TransientRouteError,
)
from tripcore.models.route import OrderedStop, RouteResult
from tripcore.models.trip import TripItem
from tripcore.utils.logging import StructuredProviderLogger
from tripcore.utils.metrics import PrometheusProviderMetrics

NO_ROUTE_MESSAGE = "No route found"


def stops_from_items(items: Iterable[TripItem]) -> list[OrderedStop]:
    """Stops for the items that carry coordinates, in the given order."""
    return [
        OrderedStop(
            id=str(item.id),
            title=item.title,
            latitude=item.latitude,
            longitude=item.longitude,
        )
        for item in items
        if item.has_coordinates
    ]


def apply_waypoint_order(stops: Sequence[OrderedStop], order: Sequence[int]) -> list[OrderedStop]:
    """Reorder intermediates by a provider permutation; origin and destination stay put."""
    intermediates = list(stops[1:-1])
    return [stops[0], *(intermediates[i] for i in order), stops[-1]]


def _validate_stops(stops: Sequence[OrderedStop]) -> None:
    if len(stops) < 2:
        raise InsufficientStopsError("Need at least 2 locations with coordinates")

    for stop in stops:
        if stop.latitude is None or stop.longitude is None:
            raise InsufficientStopsError(f"Stop {stop.id} has no coordinates")


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or "Failed to get directions"

    if isinstance(payload, dict) and payload.get("error"):
        return str(payload["error"])
    return "Failed to get directions"


class RouteClient:
    """Client for the directions endpoint."""

    def __init__(
        self,
        url: str,
        *,
        anon_key: str = "",
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
        metrics: ProviderMetrics | None = None,
        logger: ProviderLogger | None = None,
    ) -> None:
        """Initialize route client.

        Args:
            url: Directions endpoint URL
            anon_key: Public key sent when no access token is available
            timeout: Per-request timeout in seconds
            client: Optional httpx client (for testing with mocks)
            metrics: Metrics recorder (optional, defaults to no-op)
            logger: Structured logger (optional, defaults to no-op)
        """
        self._url = url
        self._anon_key = anon_key
        self._timeout = timeout
        self._client = client
        self._metrics = metrics or ProviderMetrics()
        self._logger = logger or ProviderLogger()
        self._ctx = ProviderContext(provider="directions", operation="compute_route")

    async def compute_route(
        self,
        stops: Sequence[OrderedStop],
        optimize_order: bool = False,
        *,
        access_token: str | None = None,
    ) -> RouteResult:
        """Compute travel legs between consecutive stops.

        The first stop is the origin and the last the destination. With
        optimize_order the provider may reorder the intermediates and report
        the permutation in waypoint_order.

        Args:
            stops: Stops in visiting order
            optimize_order: Ask the provider to reorder intermediates
            access_token: Bearer credential of the signed-in user

        Returns:
            RouteResult with legs, totals and optional waypoint_order

        Raises:
            InsufficientStopsError: Fewer than 2 stops or a stop without coordinates
            RouteProviderError: Provider answered non-2xx
            NoRouteFoundError: Provider found no route
            TransientRouteError: Network or parse failure
        """
        _validate_stops(stops)

        body: dict[str, Any] = {
            "waypoints": [
                {
                    "id": stop.id,
                    "latitude": stop.latitude,
                    "longitude": stop.longitude,
                    "title": stop.title,
                }
                for stop in stops
            ],
            "optimizeOrder": optimize_order,
        }

        start_time = time.monotonic()

        close_client = False
        client = self._client
        if client is None:
            client = httpx.AsyncClient(timeout=self._timeout)
            close_client = True

        try:
            try:
                response = await client.post(
                    self._url, json=body, headers=bearer_headers(access_token, self._anon_key)
                )
            except httpx.RequestError as e:
                self._fail("transport", start_time, error_reason=type(e).__name__)
                raise TransientRouteError(f"Directions request failed: {e}") from e

            if not response.is_success:
                message = _error_message(response)
                if response.status_code == 404 and message == NO_ROUTE_MESSAGE:
                    self._fail("no_route", start_time, status=404)
                    raise NoRouteFoundError(message)

                self._fail("http_status", start_time, status=response.status_code)
                raise RouteProviderError(response.status_code, message)

            try:
                result = RouteResult.model_validate(response.json())
            except (ValueError, PydanticValidationError) as e:
                self._fail("parse", start_time, status=response.status_code)
                raise TransientRouteError("Malformed directions response") from e

            if not result.legs:
                self._fail("no_route", start_time, status=response.status_code)
                raise NoRouteFoundError(NO_ROUTE_MESSAGE)

            intermediates = len(stops) - 2
            if result.waypoint_order is not None and sorted(result.waypoint_order) != list(
                range(intermediates)
            ):
                self._fail("parse", start_time, status=response.status_code)
                raise TransientRouteError("Directions response has an invalid waypoint order")

            elapsed_ms = (time.monotonic() - start_time) * 1000
            self._metrics.record_latency(self._ctx.provider, "success", elapsed_ms)
            self._logger.log_call(self._ctx, "success", elapsed_ms, status=response.status_code)
            return result
        finally:
            if close_client:
                await client.aclose()

    def _fail(
        self,
        reason: str,
        start_time: float,
        status: int | None = None,
        error_reason: str | None = None,
    ) -> None:
        elapsed_ms = (time.monotonic() - start_time) * 1000
        self._metrics.record_latency(self._ctx.provider, "error", elapsed_ms)
        self._metrics.inc_error(self._ctx.provider, reason)
        self._logger.log_call(
            self._ctx, "error", elapsed_ms, status=status, error_reason=error_reason or reason
        )


def create_route_client(
    settings: Settings, client: httpx.AsyncClient | None = None
) -> RouteClient:
    """Route client for the configured directions endpoint with Prometheus metrics."""
    return RouteClient(
        settings.directions_url,
        anon_key=settings.public_anon_key,
        timeout=settings.http_timeout_seconds,
        client=client,
        metrics=PrometheusProviderMetrics(),
        logger=StructuredProviderLogger(),
    )
