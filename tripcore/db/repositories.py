"""Repository protocol interfaces for the itinerary persistence backend.

The backend is row oriented: filtered reads by owner, reads by id, inserts and
updates by id. Ownership is enforced by the caller of these interfaces.
"""

from typing import Any, Protocol
from uuid import UUID

from tripcore.models.trip import Trip, TripFilters, TripItem


class TripRepository(Protocol):
    """Repository for trip rows."""

    def list_trips(self, owner_id: UUID, filters: TripFilters) -> list[Trip]:
        """List an owner's non-deleted trips.

        Args:
            owner_id: Owning user ID
            filters: Status, search and date range filters

        Returns:
            Trips ordered by start_date descending
        """
        ...

    def get_trip(self, trip_id: UUID) -> Trip | None:
        """Get trip by ID, including soft-deleted rows.

        Args:
            trip_id: Trip ID

        Returns:
            Trip or None if not found
        """
        ...

    def insert_trip(self, trip: Trip) -> Trip:
        """Insert a new trip row.

        Args:
            trip: Fully populated trip

        Returns:
            The stored trip
        """
        ...

    def update_trip(self, trip_id: UUID, fields: dict[str, Any]) -> Trip | None:
        """Update columns of an existing trip.

        Args:
            trip_id: Trip ID
            fields: Column name to new value

        Returns:
            Updated trip or None if not found
        """
        ...


class TripItemRepository(Protocol):
    """Repository for trip item rows."""

    def list_items(self, trip_id: UUID) -> list[TripItem]:
        """List all items of a trip in no particular order."""
        ...

    def get_item(self, item_id: UUID) -> TripItem | None:
        """Get item by ID."""
        ...

    def insert_item(self, item: TripItem) -> TripItem:
        """Insert a new item row."""
        ...

    def update_item(self, item_id: UUID, fields: dict[str, Any]) -> TripItem | None:
        """Update columns of an existing item.

        Args:
            item_id: Item ID
            fields: Column name to new value

        Returns:
            Updated item or None if not found
        """
        ...

    def delete_item(self, item_id: UUID) -> bool:
        """Hard delete an item.

        Returns:
            True if a row was removed
        """
        ...
