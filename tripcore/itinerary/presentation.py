"""Presentation helpers: item type styling and user-facing notices.

Core operations return typed results or raise typed errors. This module maps
them to what the UI shows, so the core stays testable without a UI harness.
"""

from dataclasses import dataclass
from enum import Enum

from tripcore.errors import (
    AuthorizationError,
    InsufficientStopsError,
    NoRouteFoundError,
    NotFoundError,
    OptimizationProviderError,
    OptimizationQuotaExceededError,
    OptimizationRateLimitedError,
    RouteProviderError,
    TransientRouteError,
    TripCoreError,
    ValidationError,
)
from tripcore.models.common import TripItemType
from tripcore.models.optimization import OptimizationSuggestion


@dataclass(frozen=True)
class ItemTypeStyle:
    """Label and color class for one item type."""

    label: str
    color_class: str


ITEM_TYPE_STYLES: dict[TripItemType, ItemTypeStyle] = {
    TripItemType.apartment: ItemTypeStyle("Stay", "bg-blue-500/10 text-blue-600 border-blue-200"),
    TripItemType.car: ItemTypeStyle("Car", "bg-orange-500/10 text-orange-600 border-orange-200"),
    TripItemType.restaurant: ItemTypeStyle(
        "Dining", "bg-green-500/10 text-green-600 border-green-200"
    ),
    TripItemType.event: ItemTypeStyle("Event", "bg-purple-500/10 text-purple-600 border-purple-200"),
    TripItemType.activity: ItemTypeStyle(
        "Activity", "bg-yellow-500/10 text-yellow-600 border-yellow-200"
    ),
    TripItemType.transport: ItemTypeStyle(
        "Transport", "bg-slate-500/10 text-slate-600 border-slate-200"
    ),
    TripItemType.note: ItemTypeStyle("Note", "bg-muted text-muted-foreground border-muted"),
}

_FALLBACK_COLOR = "bg-muted text-muted-foreground border-muted"


def style_for(item_type: TripItemType | str) -> ItemTypeStyle:
    """Style for an item type; unknown tags get their raw value as label."""
    try:
        return ITEM_TYPE_STYLES[TripItemType(item_type)]
    except ValueError:
        return ItemTypeStyle(str(item_type), _FALLBACK_COLOR)


class TravelMode(str, Enum):
    """Suggested way to cover a leg."""

    walk = "walk"
    taxi = "taxi"
    drive = "drive"


def travel_mode_for(distance_km: float) -> TravelMode:
    """Suggest a travel mode from leg distance."""
    if distance_km < 1:
        return TravelMode.walk
    if distance_km < 5:
        return TravelMode.taxi
    return TravelMode.drive


class NoticeLevel(str, Enum):
    """Severity of a user-facing notice."""

    info = "info"
    success = "success"
    error = "error"


@dataclass(frozen=True)
class Notice:
    """User-facing notification."""

    level: NoticeLevel
    message: str


def notice_for_error(error: TripCoreError) -> Notice:
    """Map a core error to the notice shown to the user."""
    # Subclasses first
    if isinstance(error, InsufficientStopsError):
        return Notice(NoticeLevel.error, "Need at least 2 locations with coordinates")
    if isinstance(error, OptimizationRateLimitedError):
        return Notice(NoticeLevel.error, "Rate limit exceeded. Please try again later.")
    if isinstance(error, OptimizationQuotaExceededError):
        return Notice(NoticeLevel.error, "AI credits exhausted. Please add credits to continue.")
    if isinstance(error, OptimizationProviderError):
        return Notice(NoticeLevel.error, "Failed to optimize route")
    if isinstance(error, ValidationError):
        return Notice(NoticeLevel.error, str(error) or "Invalid input")
    if isinstance(error, AuthorizationError):
        return Notice(NoticeLevel.error, "You don't have permission to change this trip")
    if isinstance(error, NotFoundError):
        return Notice(NoticeLevel.error, "Trip not found")
    if isinstance(error, NoRouteFoundError):
        return Notice(NoticeLevel.error, "No route found between these locations")
    if isinstance(error, RouteProviderError):
        return Notice(NoticeLevel.error, error.message or "Failed to get directions")
    if isinstance(error, TransientRouteError):
        return Notice(NoticeLevel.error, "Couldn't reach the directions service. Try again.")
    return Notice(NoticeLevel.error, "Something went wrong")


def notice_for_suggestion(suggestion: OptimizationSuggestion | None) -> Notice:
    """Map an advisor outcome to a notice; None means the call was skipped."""
    if suggestion is None:
        return Notice(NoticeLevel.info, "Need at least 2 activities to optimize the route")

    km = suggestion.savings.distance_km
    if km > 0:
        return Notice(
            NoticeLevel.success,
            f"Route optimized: save {km:.1f} km (~{suggestion.savings.time_minutes} min)",
        )
    return Notice(NoticeLevel.info, "Your route is already efficient")
