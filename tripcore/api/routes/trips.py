"""Trip and trip item endpoints backed by the itinerary store."""

import uuid
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field

from tripcore.api.auth import get_current_context
from tripcore.api.deps import get_itinerary_store
from tripcore.config import Settings, get_settings
from tripcore.db.context import RequestContext
from tripcore.errors import NotFoundError, ValidationError
from tripcore.itinerary.store import ItineraryStore
from tripcore.itinerary.timeline import DayBucket, project_days, sort_by_start
from tripcore.models import (
    AddTripItemInput,
    CreateTripInput,
    DateRange,
    Trip,
    TripFilters,
    TripItem,
    TripItemUpdate,
    TripStatus,
    TripUpdate,
    TripWithItems,
)

router = APIRouter(tags=["trips"])

Store = Annotated[ItineraryStore, Depends(get_itinerary_store)]
Context = Annotated[RequestContext, Depends(get_current_context)]


class ApplyOrderRequest(BaseModel):
    """Request body for accepting a suggested order for one day."""

    ordered_item_ids: list[uuid.UUID] = Field(..., min_length=1)


@router.get("/trips", response_model=list[Trip])
def list_trips(
    store: Store,
    ctx: Context,
    trip_status: Annotated[list[TripStatus] | None, Query(alias="status")] = None,
    search: str | None = None,
    start: date | None = None,
    end: date | None = None,
) -> list[Trip]:
    """List the caller's trips, newest start date first."""
    date_range = DateRange(start=start, end=end) if start or end else None
    filters = TripFilters(status=trip_status, search=search, date_range=date_range)
    return store.list_trips(ctx, filters)


@router.get("/trips/upcoming", response_model=list[Trip])
def list_upcoming_trips(
    store: Store,
    ctx: Context,
    settings: Annotated[Settings, Depends(get_settings)],
    limit: Annotated[int | None, Query(ge=1, le=50)] = None,
) -> list[Trip]:
    """Draft or active trips that have not ended yet, soonest first."""
    return store.list_upcoming_trips(ctx, limit=limit or settings.upcoming_trips_limit)


@router.post("/trips", response_model=Trip, status_code=status.HTTP_201_CREATED)
def create_trip(request: CreateTripInput, store: Store, ctx: Context) -> Trip:
    """Create a draft trip owned by the caller."""
    return store.create_trip(ctx, request)


@router.get("/trips/{trip_id}", response_model=TripWithItems)
def get_trip(trip_id: uuid.UUID, store: Store, ctx: Context) -> TripWithItems:
    """Fetch a trip with its items in start order."""
    return store.get_trip(ctx, trip_id)


@router.patch("/trips/{trip_id}", response_model=Trip)
def update_trip(trip_id: uuid.UUID, request: TripUpdate, store: Store, ctx: Context) -> Trip:
    """Apply a partial update to a trip."""
    return store.update_trip(ctx, trip_id, request)


@router.delete("/trips/{trip_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_trip(trip_id: uuid.UUID, store: Store, ctx: Context) -> Response:
    """Soft-delete a trip."""
    store.soft_delete_trip(ctx, trip_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/trips/{trip_id}/archive", response_model=Trip)
def archive_trip(trip_id: uuid.UUID, store: Store, ctx: Context) -> Trip:
    """Mark a trip completed."""
    return store.archive_trip(ctx, trip_id)


@router.post("/trips/{trip_id}/unarchive", response_model=Trip)
def unarchive_trip(trip_id: uuid.UUID, store: Store, ctx: Context) -> Trip:
    """Return a trip to draft."""
    return store.unarchive_trip(ctx, trip_id)


@router.get("/trips/{trip_id}/timeline", response_model=list[DayBucket])
def get_timeline(trip_id: uuid.UUID, store: Store, ctx: Context) -> list[DayBucket]:
    """Day-by-day view of a trip, each day in start order."""
    trip = store.get_trip(ctx, trip_id)
    days = project_days(trip.start_date, trip.end_date, trip.items)
    for day in days:
        day.items = sort_by_start(day.items)
    return days


@router.post(
    "/trips/{trip_id}/days/{day_index}/apply-order",
    response_model=list[TripItem],
)
def apply_day_order(
    trip_id: uuid.UUID,
    day_index: int,
    request: ApplyOrderRequest,
    store: Store,
    ctx: Context,
) -> list[TripItem]:
    """Persist an accepted order for the items of one day.

    Raises:
        NotFoundError: day_index is outside the trip
        ValidationError: An id is not scheduled on that day
    """
    trip = store.get_trip(ctx, trip_id)
    days = project_days(trip.start_date, trip.end_date, trip.items)
    if not 0 <= day_index < len(days):
        raise NotFoundError(f"Day {day_index} not found in trip {trip_id}")

    day_ids = {item.id for item in days[day_index].items}
    outside = [str(i) for i in request.ordered_item_ids if i not in day_ids]
    if outside:
        raise ValidationError(f"Items not scheduled on day {day_index}: {', '.join(outside)}")

    return store.apply_order(ctx, trip_id, request.ordered_item_ids)


@router.post(
    "/trips/{trip_id}/items",
    response_model=TripItem,
    status_code=status.HTTP_201_CREATED,
)
def add_item(trip_id: uuid.UUID, request: AddTripItemInput, store: Store, ctx: Context) -> TripItem:
    """Attach an item to a trip."""
    return store.add_item(ctx, trip_id, request)


@router.patch("/items/{item_id}", response_model=TripItem)
def update_item(
    item_id: uuid.UUID, request: TripItemUpdate, store: Store, ctx: Context
) -> TripItem:
    """Apply a partial update to an item."""
    return store.update_item(ctx, item_id, request)


@router.delete("/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_item(item_id: uuid.UUID, store: Store, ctx: Context) -> Response:
    """Delete an item permanently."""
    store.remove_item(ctx, item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
