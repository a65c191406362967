"""In-memory implementations of repository interfaces."""

import uuid
from typing import Any

from tripcore.models.trip import Trip, TripFilters, TripItem


def _matches(trip: Trip, filters: TripFilters) -> bool:
    if filters.status and trip.status not in filters.status:
        return False

    if filters.search:
        needle = filters.search.lower()
        haystacks = [trip.title, trip.destination or "", trip.description or ""]
        if not any(needle in h.lower() for h in haystacks):
            return False

    if filters.date_range is not None:
        if filters.date_range.start is not None and trip.start_date < filters.date_range.start:
            return False
        if filters.date_range.end is not None and trip.end_date > filters.date_range.end:
            return False

    return True


class InMemoryTripRepository:
    """In-memory implementation of TripRepository."""

    def __init__(self) -> None:
        self._trips: dict[uuid.UUID, Trip] = {}

    def list_trips(self, owner_id: uuid.UUID, filters: TripFilters) -> list[Trip]:
        """List an owner's non-deleted trips."""
        results = [
            trip
            for trip in self._trips.values()
            if trip.user_id == owner_id and trip.deleted_at is None and _matches(trip, filters)
        ]

        # Sort by start_date descending
        results.sort(key=lambda t: t.start_date, reverse=True)
        return results

    def get_trip(self, trip_id: uuid.UUID) -> Trip | None:
        """Get trip by ID."""
        return self._trips.get(trip_id)

    def insert_trip(self, trip: Trip) -> Trip:
        """Insert a new trip row."""
        self._trips[trip.id] = trip
        return trip

    def update_trip(self, trip_id: uuid.UUID, fields: dict[str, Any]) -> Trip | None:
        """Update columns of an existing trip."""
        trip = self._trips.get(trip_id)
        if trip is None:
            return None

        updated = trip.model_copy(update=fields)
        self._trips[trip_id] = updated
        return updated


class InMemoryTripItemRepository:
    """In-memory implementation of TripItemRepository."""

    def __init__(self) -> None:
        self._items: dict[uuid.UUID, TripItem] = {}

    def list_items(self, trip_id: uuid.UUID) -> list[TripItem]:
        """List all items of a trip."""
        return [item for item in self._items.values() if item.trip_id == trip_id]

    def get_item(self, item_id: uuid.UUID) -> TripItem | None:
        """Get item by ID."""
        return self._items.get(item_id)

    def insert_item(self, item: TripItem) -> TripItem:
        """Insert a new item row."""
        self._items[item.id] = item
        return item

    def update_item(self, item_id: uuid.UUID, fields: dict[str, Any]) -> TripItem | None:
        """Update columns of an existing item."""
        item = self._items.get(item_id)
        if item is None:
            return None

        updated = item.model_copy(update=fields)
        self._items[item_id] = updated
        return updated

    def delete_item(self, item_id: uuid.UUID) -> bool:
        """Hard delete an item."""
        return self._items.pop(item_id, None) is not None
