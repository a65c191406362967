"""Itinerary Store - canonical trip and trip item CRUD scoped to the owner."""

import logging
import uuid
from collections.abc import Callable, Sequence
from datetime import UTC, datetime

from tripcore.db.context import RequestContext
from tripcore.db.repositories import TripItemRepository, TripRepository
from tripcore.errors import AuthorizationError, NotFoundError, ValidationError
from tripcore.itinerary.cache import ReadCache
from tripcore.itinerary.timeline import sort_by_start
from tripcore.models.common import TripStatus
from tripcore.models.trip import (
    AddTripItemInput,
    CreateTripInput,
    Trip,
    TripFilters,
    TripItem,
    TripItemUpdate,
    TripUpdate,
    TripWithItems,
)

logger = logging.getLogger(__name__)

UPCOMING_STATUSES = (TripStatus.draft, TripStatus.active)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ItineraryStore:
    """Owner-scoped CRUD over trips and their items with a read cache.

    All writes require an authenticated caller who owns the trip. Every
    successful write invalidates the cached read of the affected trip and all
    cached list reads of the owner.
    """

    def __init__(
        self,
        trips: TripRepository,
        items: TripItemRepository,
        cache: ReadCache | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize store.

        Args:
            trips: Trip repository
            items: Trip item repository
            cache: Read cache (optional, a private one is created if omitted)
            clock: Injectable clock returning aware UTC datetimes
        """
        self._trips = trips
        self._items = items
        self._cache = cache if cache is not None else ReadCache()
        self._now = clock or _utcnow

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_trips(self, ctx: RequestContext, filters: TripFilters | None = None) -> list[Trip]:
        """List the caller's non-deleted trips.

        Args:
            ctx: Request context
            filters: Optional status, search and date range filters

        Returns:
            Trips ordered by start_date descending; empty for anonymous callers
        """
        if ctx.user_id is None:
            return []

        filters = filters or TripFilters()
        key = ("trips", ctx.user_id, filters.cache_key())
        cached = self._cache.get(key)
        if cached is not None:
            return [trip.model_copy() for trip in cached]

        trips = self._trips.list_trips(ctx.user_id, filters)
        self._cache.set(key, trips)
        return [trip.model_copy() for trip in trips]

    def list_upcoming_trips(self, ctx: RequestContext, limit: int = 3) -> list[Trip]:
        """List draft or active trips that have not ended yet, soonest first."""
        if ctx.user_id is None:
            return []

        today = self._now().date()
        key = ("upcoming", ctx.user_id, today.isoformat(), limit)
        cached = self._cache.get(key)
        if cached is not None:
            return [trip.model_copy() for trip in cached]

        candidates = self._trips.list_trips(
            ctx.user_id, TripFilters(status=list(UPCOMING_STATUSES))
        )
        upcoming = sorted(
            (t for t in candidates if t.end_date >= today), key=lambda t: t.start_date
        )[:limit]

        self._cache.set(key, upcoming)
        return [trip.model_copy() for trip in upcoming]

    def get_trip(self, ctx: RequestContext, trip_id: uuid.UUID) -> TripWithItems:
        """Get a trip with its items ordered by start_at.

        The result is a copy; changing it never alters what later reads see.

        Raises:
            NotFoundError: If the trip does not exist, is deleted, or is not
                visible to the caller
        """
        key = ("trip", trip_id)
        cached: TripWithItems | None = self._cache.get(key)
        if cached is not None and cached.user_id == ctx.user_id:
            return cached.model_copy(deep=True)

        trip = self._trips.get_trip(trip_id)
        if trip is None or trip.deleted_at is not None or trip.user_id != ctx.user_id:
            raise NotFoundError(f"Trip {trip_id} not found")

        items = sort_by_start(self._items.list_items(trip_id))
        result = TripWithItems(**trip.model_dump(), items=items)

        self._cache.set(key, result)
        return result.model_copy(deep=True)

    # ------------------------------------------------------------------
    # Trip writes
    # ------------------------------------------------------------------

    def create_trip(self, ctx: RequestContext, data: CreateTripInput) -> Trip:
        """Create a trip owned by the caller; status is always draft."""
        owner_id = self._require_user(ctx)
        now = self._now()

        trip = Trip(
            id=uuid.uuid4(),
            user_id=owner_id,
            title=data.title,
            destination=data.destination or None,
            description=data.description or None,
            start_date=data.start_date,
            end_date=data.end_date,
            status=TripStatus.draft,
            budget=data.budget,
            currency=data.currency or "USD",
            created_at=now,
            updated_at=now,
        )

        stored = self._trips.insert_trip(trip)
        self._invalidate(owner_id, stored.id)

        logger.info("Trip created", extra={"structured": {"trip_id": str(stored.id)}})
        return stored

    def update_trip(self, ctx: RequestContext, trip_id: uuid.UUID, update: TripUpdate) -> Trip:
        """Apply a partial update to one of the caller's trips.

        Raises:
            AuthorizationError: If the caller does not own the trip
            NotFoundError: If the trip does not exist or is soft-deleted
            ValidationError: If the resulting date range is inverted
        """
        trip = self._owned_trip(ctx, trip_id)
        fields = update.model_dump(exclude_unset=True)

        start = fields.get("start_date", trip.start_date)
        end = fields.get("end_date", trip.end_date)
        if end < start:
            raise ValidationError("end_date must be on or after start_date")

        return self._write_trip(trip, fields)

    def soft_delete_trip(self, ctx: RequestContext, trip_id: uuid.UUID) -> None:
        """Mark a trip deleted; the row and its items are kept."""
        trip = self._owned_trip(ctx, trip_id)
        now = self._now()
        self._write_trip(trip, {"deleted_at": now})

    def archive_trip(self, ctx: RequestContext, trip_id: uuid.UUID) -> Trip:
        """Move a trip to completed."""
        trip = self._owned_trip(ctx, trip_id)
        return self._write_trip(trip, {"status": TripStatus.completed})

    def unarchive_trip(self, ctx: RequestContext, trip_id: uuid.UUID) -> Trip:
        """Move a trip back to draft."""
        trip = self._owned_trip(ctx, trip_id)
        return self._write_trip(trip, {"status": TripStatus.draft})

    # ------------------------------------------------------------------
    # Item writes
    # ------------------------------------------------------------------

    def add_item(
        self, ctx: RequestContext, trip_id: uuid.UUID, data: AddTripItemInput
    ) -> TripItem:
        """Attach an item to one of the caller's trips.

        start_at is not checked against the trip's date range.
        """
        trip = self._owned_trip(ctx, trip_id)
        now = self._now()

        item = TripItem(
            id=uuid.uuid4(),
            trip_id=trip.id,
            created_by=ctx.user_id,
            created_at=now,
            updated_at=now,
            **data.model_dump(),
        )

        stored = self._items.insert_item(item)
        self._invalidate(trip.user_id, trip.id)
        return stored

    def update_item(
        self, ctx: RequestContext, item_id: uuid.UUID, update: TripItemUpdate
    ) -> TripItem:
        """Apply a partial update to an item of one of the caller's trips."""
        item, trip = self._owned_item(ctx, item_id)
        fields = update.model_dump(exclude_unset=True)
        fields["updated_at"] = self._now()

        updated = self._items.update_item(item.id, fields)
        if updated is None:
            raise NotFoundError(f"Trip item {item_id} not found")

        self._invalidate(trip.user_id, trip.id)
        return updated

    def remove_item(self, ctx: RequestContext, item_id: uuid.UUID) -> None:
        """Hard delete an item."""
        item, trip = self._owned_item(ctx, item_id)

        if not self._items.delete_item(item.id):
            raise NotFoundError(f"Trip item {item_id} not found")

        self._invalidate(trip.user_id, trip.id)

    def apply_order(
        self,
        ctx: RequestContext,
        trip_id: uuid.UUID,
        ordered_item_ids: Sequence[uuid.UUID | str],
    ) -> list[TripItem]:
        """Persist an accepted reorder of scheduled items.

        Effective order comes from start_at, so the existing start_at slots of
        the given items (ascending) are handed out again in the new order.
        Durations (end_at - start_at) travel with each item.

        Args:
            ctx: Request context
            trip_id: Owning trip
            ordered_item_ids: Item ids in the accepted order

        Returns:
            The items in the accepted order, after the update

        Raises:
            ValidationError: On duplicate ids, ids from another trip, or items
                without start_at
        """
        trip = self._owned_trip(ctx, trip_id)

        try:
            ids = [i if isinstance(i, uuid.UUID) else uuid.UUID(str(i)) for i in ordered_item_ids]
        except ValueError as e:
            raise ValidationError("Item ids must be UUIDs") from e

        if len(set(ids)) != len(ids):
            raise ValidationError("Item ids must not repeat")

        items: list[TripItem] = []
        for item_id in ids:
            item = self._items.get_item(item_id)
            if item is None or item.trip_id != trip.id:
                raise ValidationError(f"Item {item_id} does not belong to trip {trip.id}")
            if item.start_at is None:
                raise ValidationError(f"Item {item_id} is not scheduled")
            items.append(item)

        slots = sorted(item.start_at for item in items if item.start_at is not None)
        now = self._now()

        result: list[TripItem] = []
        for item, slot in zip(items, slots, strict=True):
            if item.start_at == slot:
                result.append(item)
                continue

            fields: dict[str, object] = {"start_at": slot, "updated_at": now}
            if item.end_at is not None and item.start_at is not None:
                fields["end_at"] = slot + (item.end_at - item.start_at)

            updated = self._items.update_item(item.id, fields)
            if updated is None:
                raise NotFoundError(f"Trip item {item.id} not found")
            result.append(updated)

        self._invalidate(trip.user_id, trip.id)
        return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require_user(self, ctx: RequestContext) -> uuid.UUID:
        if ctx.user_id is None:
            raise AuthorizationError("Must be logged in")
        return ctx.user_id

    def _owned_trip(self, ctx: RequestContext, trip_id: uuid.UUID) -> Trip:
        user_id = self._require_user(ctx)

        trip = self._trips.get_trip(trip_id)
        if trip is None:
            raise NotFoundError(f"Trip {trip_id} not found")

        # Enforce ownership before revealing deletion state
        if trip.user_id != user_id:
            raise AuthorizationError(f"Trip {trip_id} is not owned by caller")

        if trip.deleted_at is not None:
            raise NotFoundError(f"Trip {trip_id} not found")

        return trip

    def _owned_item(self, ctx: RequestContext, item_id: uuid.UUID) -> tuple[TripItem, Trip]:
        self._require_user(ctx)

        item = self._items.get_item(item_id)
        if item is None:
            raise NotFoundError(f"Trip item {item_id} not found")

        return item, self._owned_trip(ctx, item.trip_id)

    def _write_trip(self, trip: Trip, fields: dict[str, object]) -> Trip:
        fields = {**fields, "updated_at": self._now()}

        updated = self._trips.update_trip(trip.id, fields)
        if updated is None:
            raise NotFoundError(f"Trip {trip.id} not found")

        self._invalidate(trip.user_id, trip.id)
        return updated

    def _invalidate(self, owner_id: uuid.UUID, trip_id: uuid.UUID) -> None:
        self._cache.invalidate(("trip", trip_id))
        self._cache.invalidate_prefix(("trips", owner_id))
        self._cache.invalidate_prefix(("upcoming", owner_id))
