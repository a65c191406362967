"""Models package - re-exports for convenience."""

from tripcore.models.common import LatLng, TripItemType, TripStatus
from tripcore.models.optimization import (
    OptimizationItem,
    OptimizationSavings,
    OptimizationSuggestion,
)
from tripcore.models.route import OrderedStop, RouteLeg, RouteResult
from tripcore.models.trip import (
    AddTripItemInput,
    CreateTripInput,
    DateRange,
    Trip,
    TripFilters,
    TripItem,
    TripItemUpdate,
    TripUpdate,
    TripWithItems,
)

__all__ = [
    # Common
    "LatLng",
    "TripStatus",
    "TripItemType",
    # Trip
    "Trip",
    "TripItem",
    "TripWithItems",
    "TripFilters",
    "DateRange",
    "CreateTripInput",
    "TripUpdate",
    "AddTripItemInput",
    "TripItemUpdate",
    # Route
    "OrderedStop",
    "RouteLeg",
    "RouteResult",
    # Optimization
    "OptimizationItem",
    "OptimizationSavings",
    "OptimizationSuggestion",
]
