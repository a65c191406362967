"""Server side of the optimization-suggestion endpoint.

Orders one day's items to reduce travel: an LLM proposes the order when one is
configured, otherwise (or when its reply cannot be parsed) a nearest-neighbour
tour is used. Items without coordinates keep their relative order and go last.
"""

import logging
import math
from collections.abc import Callable, Sequence
from datetime import date

from pydantic import BaseModel

from tripcore.llm.client import LLMResponseParseError, RouteOrderLLM
from tripcore.models.optimization import (
    OptimizationItem,
    OptimizationSavings,
    OptimizationSuggestion,
)
from tripcore.optimization.geo import nearest_neighbor, total_distance_km

logger = logging.getLogger(__name__)


class StartLocation(BaseModel):
    """Optional starting point for the day."""

    lat: float
    lng: float


class RouteOptimizer:
    """Produces OptimizationSuggestions for a day's items."""

    def __init__(self, llm: RouteOrderLLM | None, average_speed_kmh: float = 25.0) -> None:
        """Initialize optimizer.

        Args:
            llm: LLM client, or None to always use nearest-neighbour
            average_speed_kmh: Speed used to turn saved km into saved minutes
        """
        self._llm = llm
        self._speed = average_speed_kmh

    async def optimize(
        self,
        items: Sequence[OptimizationItem],
        day_date: date,
        start_location: StartLocation | None = None,
    ) -> OptimizationSuggestion:
        """Suggest an order for the items.

        Raises:
            OptimizationRateLimitedError: LLM is rate limiting
            OptimizationQuotaExceededError: LLM credits are exhausted
            OptimizationProviderError: Any other LLM failure
        """
        if len(items) < 2:
            return OptimizationSuggestion(
                optimized_order=[item.id for item in items],
                explanation="Need at least 2 items to optimize route.",
            )

        with_coords = [item for item in items if item.has_coordinates]
        without_coords = [item for item in items if not item.has_coordinates]

        if len(with_coords) < 2:
            return OptimizationSuggestion(
                optimized_order=[item.id for item in items],
                explanation=(
                    "Not enough items with location data to optimize. "
                    "Add addresses to your activities for better optimization."
                ),
            )

        original_km = total_distance_km(with_coords)
        start = (start_location.lat, start_location.lng) if start_location else None

        if self._llm is None:
            ordered = nearest_neighbor(with_coords, start)
            return self._suggestion(
                ordered,
                without_coords,
                original_km,
                lambda km: (
                    "Route optimized using nearest-neighbor algorithm. "
                    f"Estimated savings: {km:.1f} km."
                ),
            )

        try:
            proposal = await self._llm.propose_order(
                items=with_coords, day_date=day_date, start_location=start
            )
        except LLMResponseParseError as e:
            logger.warning(f"Unparseable LLM route order, using nearest-neighbor: {e}")
            ordered = nearest_neighbor(with_coords, start)
            return self._suggestion(
                ordered,
                without_coords,
                original_km,
                lambda km: f"Route optimized algorithmically. Estimated savings: {km:.1f} km.",
            )

        ordered = reorder_by_positions(with_coords, proposal.order)
        return self._suggestion(
            ordered, without_coords, original_km, lambda _km: proposal.reasoning
        )

    def _suggestion(
        self,
        ordered: list[OptimizationItem],
        without_coords: list[OptimizationItem],
        original_km: float,
        explain: Callable[[float], str],
    ) -> OptimizationSuggestion:
        new_km = total_distance_km(ordered)
        savings_km = max(0.0, original_km - new_km)

        return OptimizationSuggestion(
            optimized_order=[item.id for item in ordered] + [item.id for item in without_coords],
            explanation=explain(savings_km),
            savings=OptimizationSavings(
                distance_km=savings_km,
                time_minutes=math.floor(savings_km / self._speed * 60 + 0.5),
            ),
            original_distance=original_km,
            new_distance=new_km,
        )


def reorder_by_positions(
    items: Sequence[OptimizationItem], positions: Sequence[int]
) -> list[OptimizationItem]:
    """Apply 1-indexed positions to items.

    Out-of-range and repeated positions are ignored; items the positions leave
    out are appended in their original order so none is dropped.
    """
    seen: set[int] = set()
    ordered: list[OptimizationItem] = []

    for position in positions:
        idx = position - 1
        if 0 <= idx < len(items) and idx not in seen:
            seen.add(idx)
            ordered.append(items[idx])

    ordered.extend(item for idx, item in enumerate(items) if idx not in seen)
    return ordered
