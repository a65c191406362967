"""Active-Trip Session - the trip currently in focus for one install.

The session is an explicit object handed to whatever needs it. Its lifecycle
follows authentication: init() after sign-in or process start, refresh() each
time the trip list is fetched, clear_on_logout() on sign-out.

The selection is keyed per install, not per user. A second user signing in on
the same install can see the previous selection until the next refresh()
drops it.
"""

import json
import logging
import os
import tempfile
import uuid
from collections.abc import Callable, Iterable
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Protocol

import redis

from tripcore.config import Settings
from tripcore.db.context import RequestContext
from tripcore.models.common import TripStatus
from tripcore.models.trip import Trip

logger = logging.getLogger(__name__)

ACTIVE_TRIP_STORAGE_KEY = "active_trip_id"


class ActiveTripStorage(Protocol):
    """Durable storage for the active trip id of an install."""

    def load(self, install_id: str) -> str | None:
        """Load stored trip id, None if nothing is stored."""
        ...

    def save(self, install_id: str, trip_id: str | None) -> None:
        """Store trip id; None removes the entry."""
        ...


class InMemoryActiveTripStorage:
    """In-memory implementation of ActiveTripStorage."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def load(self, install_id: str) -> str | None:
        return self._values.get(install_id)

    def save(self, install_id: str, trip_id: str | None) -> None:
        if trip_id is None:
            self._values.pop(install_id, None)
        else:
            self._values[install_id] = trip_id


class FileActiveTripStorage:
    """JSON file implementation of ActiveTripStorage.

    One file holds a mapping of install id to {"active_trip_id": ...}.
    """

    def __init__(self, state_dir: str | Path) -> None:
        self._path = Path(state_dir) / "session.json"

    def _read(self) -> dict[str, dict[str, str]]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable session file {self._path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def load(self, install_id: str) -> str | None:
        entry = self._read().get(install_id) or {}
        value = entry.get(ACTIVE_TRIP_STORAGE_KEY)
        return value if isinstance(value, str) else None

    def save(self, install_id: str, trip_id: str | None) -> None:
        data = self._read()
        entry = data.setdefault(install_id, {})
        if trip_id is None:
            entry.pop(ACTIVE_TRIP_STORAGE_KEY, None)
        else:
            entry[ACTIVE_TRIP_STORAGE_KEY] = trip_id

        self._path.parent.mkdir(parents=True, exist_ok=True)

        # Replace atomically so a crash mid-write keeps the previous file
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=".session-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
            os.replace(tmp_name, self._path)
        except Exception:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class RedisActiveTripStorage:
    """Redis implementation of ActiveTripStorage."""

    def __init__(self, redis_client: redis.Redis) -> None:
        self._redis = redis_client

    def _key(self, install_id: str) -> str:
        return f"{ACTIVE_TRIP_STORAGE_KEY}:{install_id}"

    def load(self, install_id: str) -> str | None:
        value = self._redis.get(self._key(install_id))
        if value is None:
            return None
        return value.decode() if isinstance(value, bytes) else str(value)

    def save(self, install_id: str, trip_id: str | None) -> None:
        if trip_id is None:
            self._redis.delete(self._key(install_id))
        else:
            self._redis.set(self._key(install_id), trip_id)


def create_active_trip_storage(settings: Settings) -> ActiveTripStorage:
    """Pick Redis when configured, otherwise a file under state_dir."""
    if settings.redis_url:
        client = redis.from_url(settings.redis_url, decode_responses=True)  # type: ignore[no-untyped-call]
        return RedisActiveTripStorage(client)
    return FileActiveTripStorage(settings.state_dir)


class TripLister(Protocol):
    """Anything that can list the caller's trips (normally ItineraryStore)."""

    def list_trips(self, ctx: RequestContext) -> list[Trip]: ...


class ActiveTripSession:
    """Process-wide selection of the current trip."""

    def __init__(
        self,
        storage: ActiveTripStorage,
        install_id: str = "default",
        today: Callable[[], date] | None = None,
    ) -> None:
        """Initialize session.

        Args:
            storage: Durable storage for the selection
            install_id: Key scoping the selection to this install
            today: Injectable clock for upcoming/past categorisation
        """
        self._storage = storage
        self._install_id = install_id
        self._today = today or (lambda: datetime.now(UTC).date())
        self._active_trip_id: str | None = None
        self._trips: list[Trip] = []

    def init(self) -> None:
        """Restore the persisted selection."""
        self._active_trip_id = self._storage.load(self._install_id)
        self._trips = []

    @property
    def active_trip_id(self) -> str | None:
        return self._active_trip_id

    @property
    def has_active_trip(self) -> bool:
        return self.get_active_trip() is not None

    @property
    def trips(self) -> list[Trip]:
        return list(self._trips)

    def get_active_trip_id(self) -> str | None:
        """Selected trip id, whether or not it has been validated yet."""
        return self._active_trip_id

    def get_active_trip(self) -> Trip | None:
        """Selected trip, resolved against the last refreshed trip list."""
        if self._active_trip_id is None:
            return None
        return next((t for t in self._trips if str(t.id) == self._active_trip_id), None)

    def set_active_trip(self, trip_id: uuid.UUID | str | None) -> None:
        """Select a trip (or clear with None) and persist the choice."""
        self._active_trip_id = str(trip_id) if trip_id is not None else None
        self._storage.save(self._install_id, self._active_trip_id)

    def clear_active_trip(self) -> None:
        """Clear the selection."""
        self.set_active_trip(None)

    def refresh(self, trips: Iterable[Trip]) -> None:
        """Replace the known trip list and drop a selection that no longer resolves."""
        self._trips = [t for t in trips if t.deleted_at is None]

        if self._active_trip_id is not None and self.get_active_trip() is None:
            logger.info(
                "Clearing stale active trip selection",
                extra={"structured": {"trip_id": self._active_trip_id}},
            )
            self.clear_active_trip()

    def refresh_from(self, lister: TripLister, ctx: RequestContext) -> None:
        """Fetch the caller's trips and refresh."""
        self.refresh(lister.list_trips(ctx))

    def clear_on_logout(self) -> None:
        """Unconditionally clear the selection and the cached trip list."""
        self._trips = []
        self.clear_active_trip()

    @property
    def upcoming_trips(self) -> list[Trip]:
        """Draft or active trips that have not ended."""
        today = self._today()
        return [
            t
            for t in self._trips
            if t.end_date >= today and t.status in (TripStatus.draft, TripStatus.active)
        ]

    @property
    def past_trips(self) -> list[Trip]:
        """Trips that have ended or are completed."""
        today = self._today()
        return [t for t in self._trips if t.end_date < today or t.status == TripStatus.completed]
