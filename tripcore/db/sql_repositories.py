"""SQL implementations of repository interfaces."""

import uuid
from typing import Any

from sqlalchemy.orm import Session

from tripcore.db.models import TripItemRow, TripRow
from tripcore.db.queries import apply_trip_filters, query_trips
from tripcore.models.trip import Trip, TripFilters, TripItem


def _trip_from_row(row: TripRow) -> Trip:
    return Trip(
        id=row.id,
        user_id=row.user_id,
        title=row.title,
        destination=row.destination,
        description=row.description,
        start_date=row.start_date,
        end_date=row.end_date,
        status=row.status,
        budget=row.budget,
        currency=row.currency,
        created_at=row.created_at,
        updated_at=row.updated_at,
        deleted_at=row.deleted_at,
    )


def _item_from_row(row: TripItemRow) -> TripItem:
    return TripItem(
        id=row.id,
        trip_id=row.trip_id,
        item_type=row.item_type,
        source_id=row.source_id,
        title=row.title,
        description=row.description,
        start_at=row.start_at,
        end_at=row.end_at,
        location_name=row.location_name,
        address=row.address,
        latitude=row.latitude,
        longitude=row.longitude,
        metadata=row.metadata_,
        created_at=row.created_at,
        updated_at=row.updated_at,
        created_by=row.created_by,
    )


class SqlTripRepository:
    """SQL implementation of TripRepository."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_trips(self, owner_id: uuid.UUID, filters: TripFilters) -> list[Trip]:
        """List an owner's non-deleted trips."""
        rows = apply_trip_filters(query_trips(self._session, owner_id), filters).all()
        return [_trip_from_row(row) for row in rows]

    def get_trip(self, trip_id: uuid.UUID) -> Trip | None:
        """Get trip by ID."""
        row = self._session.get(TripRow, trip_id)
        return _trip_from_row(row) if row is not None else None

    def insert_trip(self, trip: Trip) -> Trip:
        """Insert a new trip row."""
        row = TripRow(
            id=trip.id,
            user_id=trip.user_id,
            title=trip.title,
            destination=trip.destination,
            description=trip.description,
            start_date=trip.start_date,
            end_date=trip.end_date,
            status=trip.status.value,
            budget=trip.budget,
            currency=trip.currency,
            created_at=trip.created_at,
            updated_at=trip.updated_at,
            deleted_at=trip.deleted_at,
        )

        self._session.add(row)
        self._session.commit()

        return _trip_from_row(row)

    def update_trip(self, trip_id: uuid.UUID, fields: dict[str, Any]) -> Trip | None:
        """Update columns of an existing trip."""
        row = self._session.get(TripRow, trip_id)
        if row is None:
            return None

        for name, value in fields.items():
            setattr(row, name, getattr(value, "value", value))

        self._session.commit()
        return _trip_from_row(row)


class SqlTripItemRepository:
    """SQL implementation of TripItemRepository."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_items(self, trip_id: uuid.UUID) -> list[TripItem]:
        """List all items of a trip."""
        rows = self._session.query(TripItemRow).filter(TripItemRow.trip_id == trip_id).all()
        return [_item_from_row(row) for row in rows]

    def get_item(self, item_id: uuid.UUID) -> TripItem | None:
        """Get item by ID."""
        row = self._session.get(TripItemRow, item_id)
        return _item_from_row(row) if row is not None else None

    def insert_item(self, item: TripItem) -> TripItem:
        """Insert a new item row."""
        row = TripItemRow(
            id=item.id,
            trip_id=item.trip_id,
            item_type=item.item_type.value,
            source_id=item.source_id,
            title=item.title,
            description=item.description,
            start_at=item.start_at,
            end_at=item.end_at,
            location_name=item.location_name,
            address=item.address,
            latitude=item.latitude,
            longitude=item.longitude,
            metadata_=item.metadata,
            created_by=item.created_by,
            created_at=item.created_at,
            updated_at=item.updated_at,
        )

        self._session.add(row)
        self._session.commit()

        return _item_from_row(row)

    def update_item(self, item_id: uuid.UUID, fields: dict[str, Any]) -> TripItem | None:
        """Update columns of an existing item."""
        row = self._session.get(TripItemRow, item_id)
        if row is None:
            return None

        for name, value in fields.items():
            # "metadata" is reserved on declarative classes
            attr = "metadata_" if name == "metadata" else name
            setattr(row, attr, value)

        self._session.commit()
        return _item_from_row(row)

    def delete_item(self, item_id: uuid.UUID) -> bool:
        """Hard delete an item."""
        row = self._session.get(TripItemRow, item_id)
        if row is None:
            return False

        self._session.delete(row)
        self._session.commit()
        return True
