"""Route Optimization Advisor - proposes a better visiting order for one day.

Distinct from the Route Client's provider-level reordering: this asks the
optimization-suggestion endpoint for an order plus a human-readable rationale
and estimated savings. It never writes trip data; accepting a suggestion is a
separate store write.
"""

import time
from collections.abc import Iterable, Sequence
from datetime import date

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
    OptimizationProviderError,
    OptimizationQuotaExceededError,
    OptimizationRateLimitedError,
    ValidationError,
)
from tripcore.models.optimization import OptimizationItem, OptimizationSuggestion
from tripcore.models.trip import TripItem
from tripcore.utils.logging import StructuredProviderLogger
from tripcore.utils.metrics import PrometheusProviderMetrics

MIN_ITEMS = 2


def optimization_items(items: Iterable[TripItem]) -> list[OptimizationItem]:
    """Convert trip items to the advisor's request shape."""
    return [
        OptimizationItem(
            id=str(item.id),
            title=item.title,
            latitude=item.latitude,
            longitude=item.longitude,
            item_type=item.item_type.value,
            start_at=item.start_at,
        )
        for item in items
    ]


class RouteOptimizationAdvisor:
    """Client for the optimization-suggestion endpoint."""

    def __init__(
        self,
        url: str,
        *,
        anon_key: str = "",
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
        metrics: ProviderMetrics | None = None,
        logger: ProviderLogger | None = None,
    ) -> None:
        self._url = url
        self._anon_key = anon_key
        self._timeout = timeout
        self._client = client
        self._metrics = metrics or ProviderMetrics()
        self._logger = logger or ProviderLogger()
        self._ctx = ProviderContext(provider="route_optimizer", operation="suggest_order")

    async def suggest_order(
        self,
        items: Sequence[OptimizationItem],
        day_date: date,
        *,
        access_token: str | None = None,
    ) -> OptimizationSuggestion | None:
        """Ask the provider for a better order of one day's items.

        Args:
            items: The day's items in current order
            day_date: Calendar day being optimized
            access_token: Bearer credential of the signed-in user

        Returns:
            OptimizationSuggestion, or None when there are fewer than 2 items
            (no call is made)

        Raises:
            ValidationError: 2+ items but none has coordinates
            OptimizationRateLimitedError: Provider answered 429
            OptimizationQuotaExceededError: Provider answered 402
            OptimizationProviderError: Any other provider failure
        """
        if len(items) < MIN_ITEMS:
            self._logger.log_call(self._ctx, "skipped", 0.0, error_reason="too_few_items")
            return None

        if not any(item.has_coordinates for item in items):
            raise ValidationError("None of the items has location data")

        body = {
            "items": [item.model_dump(mode="json", by_alias=True) for item in items],
            "dayDate": day_date.isoformat(),
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
                raise OptimizationProviderError(f"Route optimization request failed: {e}") from e

            if response.status_code == 429:
                self._fail("rate_limited", start_time, status=429)
                raise OptimizationRateLimitedError(
                    "Rate limit exceeded. Please try again later.", status=429
                )
            if response.status_code == 402:
                self._fail("quota_exhausted", start_time, status=402)
                raise OptimizationQuotaExceededError(
                    "AI credits exhausted. Please add credits to continue.", status=402
                )
            if not response.is_success:
                self._fail("http_status", start_time, status=response.status_code)
                raise OptimizationProviderError(
                    "Failed to optimize route", status=response.status_code
                )

            try:
                suggestion = OptimizationSuggestion.model_validate(response.json())
            except (ValueError, PydanticValidationError) as e:
                self._fail("parse", start_time, status=response.status_code)
                raise OptimizationProviderError(
                    "Malformed optimization response", status=response.status_code
                ) from e

            elapsed_ms = (time.monotonic() - start_time) * 1000
            self._metrics.record_latency(self._ctx.provider, "success", elapsed_ms)
            self._logger.log_call(self._ctx, "success", elapsed_ms, status=response.status_code)
            return suggestion
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


def create_route_advisor(
    settings: Settings, client: httpx.AsyncClient | None = None
) -> RouteOptimizationAdvisor:
    """Advisor for the configured optimization endpoint with Prometheus metrics."""
    return RouteOptimizationAdvisor(
        settings.optimize_route_url,
        anon_key=settings.public_anon_key,
        timeout=max(settings.http_timeout_seconds, 30.0),
        client=client,
        metrics=PrometheusProviderMetrics(),
        logger=StructuredProviderLogger(),
    )
