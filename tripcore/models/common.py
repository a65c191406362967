"""Common types and enums shared across all models."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TripStatus(str, Enum):
    """Trip lifecycle status."""

    draft = "draft"
    active = "active"
    completed = "completed"
    cancelled = "cancelled"


class TripItemType(str, Enum):
    """Kind of entry attached to a trip."""

    apartment = "apartment"
    car = "car"
    restaurant = "restaurant"
    event = "event"
    activity = "activity"
    transport = "transport"
    note = "note"


class WireModel(BaseModel):
    """Base for models exchanged with the edge endpoints (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LatLng(WireModel):
    """Geographic coordinates (WGS84)."""

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


def as_utc(value: datetime | None) -> datetime | None:
    """Read a naive timestamp as UTC; aware timestamps keep their offset."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
