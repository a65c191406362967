"""Day planner - ties the store, timeline, advisor and route client together.

One day of a trip flows through: project the day's items, ask the advisor for
a better order, compute legs for the (possibly reordered) stops, and on
acceptance write the order back. Provider failures propagate untouched and
never mutate trip items.
"""

import logging
import uuid
from datetime import tzinfo

import httpx

from tripcore.adapters.route_advisor import (
    RouteOptimizationAdvisor,
    create_route_advisor,
    optimization_items,
)
from tripcore.adapters.route_client import RouteClient, create_route_client, stops_from_items
from tripcore.config import Settings
from tripcore.db.context import RequestContext
from tripcore.errors import NotFoundError, ValidationError
from tripcore.itinerary.store import ItineraryStore
from tripcore.itinerary.timeline import DayBucket, project_days, sort_by_start
from tripcore.models.optimization import OptimizationSuggestion
from tripcore.models.route import RouteResult
from tripcore.models.trip import TripItem

logger = logging.getLogger(__name__)


class DayPlanner:
    """Per-day planning operations for the signed-in caller."""

    def __init__(
        self,
        store: ItineraryStore,
        advisor: RouteOptimizationAdvisor,
        route_client: RouteClient,
        tz: tzinfo | None = None,
    ) -> None:
        """Initialize planner.

        Args:
            store: Itinerary store
            advisor: Optimization-suggestion client
            route_client: Directions client
            tz: Optional zone in which item timestamps are read
        """
        self._store = store
        self._advisor = advisor
        self._route_client = route_client
        self._tz = tz

    def day(self, ctx: RequestContext, trip_id: uuid.UUID, day_index: int) -> DayBucket:
        """One day of a trip with its items in start order.

        Raises:
            NotFoundError: Trip or day does not exist
        """
        trip = self._store.get_trip(ctx, trip_id)
        days = project_days(trip.start_date, trip.end_date, trip.items, self._tz)

        if not 0 <= day_index < len(days):
            raise NotFoundError(f"Day {day_index} not found in trip {trip_id}")

        bucket = days[day_index]
        return bucket.model_copy(update={"items": sort_by_start(bucket.items)})

    async def suggest(
        self, ctx: RequestContext, trip_id: uuid.UUID, day_index: int
    ) -> OptimizationSuggestion | None:
        """Ask the advisor for a better order of one day's items."""
        bucket = self.day(ctx, trip_id, day_index)
        return await self._advisor.suggest_order(
            optimization_items(bucket.items), bucket.date, access_token=ctx.access_token
        )

    async def route(
        self,
        ctx: RequestContext,
        trip_id: uuid.UUID,
        day_index: int,
        optimize_order: bool = False,
    ) -> RouteResult:
        """Compute travel legs between the day's geocoded items in start order."""
        bucket = self.day(ctx, trip_id, day_index)
        return await self._route_client.compute_route(
            stops_from_items(bucket.items), optimize_order, access_token=ctx.access_token
        )

    def accept(
        self,
        ctx: RequestContext,
        trip_id: uuid.UUID,
        day_index: int,
        suggestion: OptimizationSuggestion,
    ) -> list[TripItem]:
        """Persist a suggested order for one day.

        Raises:
            ValidationError: The suggestion names items that are not on that day
        """
        bucket = self.day(ctx, trip_id, day_index)
        day_ids = {str(item.id) for item in bucket.items}

        outside = [i for i in suggestion.optimized_order if i not in day_ids]
        if outside:
            raise ValidationError(f"Items not scheduled on day {day_index}: {', '.join(outside)}")

        logger.info(
            "Applying suggested order",
            extra={"structured": {"trip_id": str(trip_id), "day_index": day_index}},
        )
        return self._store.apply_order(ctx, trip_id, suggestion.optimized_order)


def create_day_planner(
    store: ItineraryStore, settings: Settings, client: httpx.AsyncClient | None = None
) -> DayPlanner:
    """Day planner using the configured edge endpoints."""
    return DayPlanner(
        store,
        create_route_advisor(settings, client),
        create_route_client(settings, client),
    )
