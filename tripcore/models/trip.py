"""Trip and trip item models."""

from datetime import date, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from tripcore.models.common import TripItemType, TripStatus, as_utc


class Trip(BaseModel):
    """A user-owned planned travel period."""

    id: UUID
    user_id: UUID
    title: str
    destination: str | None = None
    description: str | None = None
    start_date: date
    end_date: date
    status: TripStatus = TripStatus.draft
    budget: float | None = None
    currency: str | None = "USD"
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


class TripItem(BaseModel):
    """One scheduled or unscheduled entry belonging to exactly one trip."""

    id: UUID
    trip_id: UUID
    item_type: TripItemType
    source_id: str
    title: str
    description: str | None = None
    start_at: datetime | None = None
    end_at: datetime | None = None
    location_name: str | None = None
    address: str | None = None
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    metadata: dict[str, Any] | None = None
    created_at: datetime
    updated_at: datetime
    created_by: UUID | None = None

    @field_validator("start_at", "end_at")
    @classmethod
    def _naive_as_utc(cls, v: datetime | None) -> datetime | None:
        return as_utc(v)

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class TripWithItems(Trip):
    """Trip together with its items, ordered by start_at (unscheduled last)."""

    items: list[TripItem] = Field(default_factory=list)


class DateRange(BaseModel):
    """Optional inclusive bounds for trip listing."""

    start: date | None = None
    end: date | None = None


class TripFilters(BaseModel):
    """Filters for listing an owner's trips."""

    status: list[TripStatus] | None = None
    search: str | None = None
    date_range: DateRange | None = None

    def cache_key(self) -> str:
        """Stable string form used to key cached list reads."""
        return self.model_dump_json(exclude_none=True)


class CreateTripInput(BaseModel):
    """Input for creating a trip; status is always draft."""

    title: str = Field(..., min_length=1)
    destination: str | None = None
    description: str | None = None
    start_date: date
    end_date: date
    budget: float | None = Field(None, ge=0)
    currency: str | None = None

    @model_validator(mode="after")
    def _check_range(self) -> "CreateTripInput":
        if self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self


class TripUpdate(BaseModel):
    """Partial trip update; unset fields are left untouched."""

    title: str | None = Field(None, min_length=1)
    destination: str | None = None
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    status: TripStatus | None = None
    budget: float | None = Field(None, ge=0)
    currency: str | None = None

    @field_validator("title", "start_date", "end_date", "status")
    @classmethod
    def _not_null(cls, v: object) -> object:
        """Explicit nulls would clear required fields; leave them unset instead."""
        if v is None:
            raise ValueError("may not be null")
        return v


class AddTripItemInput(BaseModel):
    """Input for attaching a listing (or a manual note) to a trip."""

    item_type: TripItemType
    source_id: str
    title: str = Field(..., min_length=1)
    description: str | None = None
    start_at: datetime | None = None
    end_at: datetime | None = None
    location_name: str | None = None
    address: str | None = None
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    metadata: dict[str, Any] | None = None

    @field_validator("start_at", "end_at")
    @classmethod
    def _naive_as_utc(cls, v: datetime | None) -> datetime | None:
        return as_utc(v)


class TripItemUpdate(BaseModel):
    """Partial item update; only time, location, text and metadata are editable."""

    title: str | None = Field(None, min_length=1)
    description: str | None = None
    start_at: datetime | None = None
    end_at: datetime | None = None
    location_name: str | None = None
    address: str | None = None
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    metadata: dict[str, Any] | None = None

    @field_validator("title")
    @classmethod
    def _title_not_null(cls, v: str | None) -> str:
        if v is None:
            raise ValueError("may not be null")
        return v

    @field_validator("start_at", "end_at")
    @classmethod
    def _naive_as_utc(cls, v: datetime | None) -> datetime | None:
        return as_utc(v)
