"""Route optimization suggestion models."""

from datetime import datetime

from pydantic import Field

from tripcore.models.common import WireModel


class OptimizationItem(WireModel):
    """One stop of a day, as sent to the optimization-suggestion provider."""

    id: str
    title: str
    latitude: float | None = None
    longitude: float | None = None
    item_type: str = Field("activity", alias="item_type")
    start_at: datetime | None = Field(None, alias="start_at")

    @property
    def has_coordinates(self) -> bool:
        # Zero is treated as missing, matching the provider contract
        return bool(self.latitude) and bool(self.longitude)


class OptimizationSavings(WireModel):
    """Estimated savings relative to the current order."""

    distance_km: float = 0.0
    time_minutes: int = 0


class OptimizationSuggestion(WireModel):
    """Proposed ordering of a day's items with a rationale."""

    optimized_order: list[str]
    explanation: str
    savings: OptimizationSavings = Field(default_factory=OptimizationSavings)
    original_distance: float | None = None
    new_distance: float | None = None
