"""Day-Timeline Projector - buckets trip items into inclusive calendar days."""

from collections.abc import Iterable
from datetime import date, datetime, timedelta, tzinfo

from pydantic import BaseModel

from tripcore.errors import ValidationError
from tripcore.models.trip import TripItem


class DayBucket(BaseModel):
    """Items whose start_at falls on one calendar day of the trip."""

    index: int
    date: date
    items: list[TripItem]


def day_count(start_date: date, end_date: date) -> int:
    """Inclusive number of days between two dates.

    Raises:
        ValidationError: If end_date is before start_date
    """
    if end_date < start_date:
        raise ValidationError("end_date must be on or after start_date")
    return (end_date - start_date).days + 1


def item_date(item: TripItem, tz: tzinfo | None = None) -> date | None:
    """Calendar date of an item's start_at, or None when unscheduled.

    The date is read in the timestamp's own offset unless tz is given and the
    timestamp is aware.
    """
    if item.start_at is None:
        return None
    if tz is not None and item.start_at.tzinfo is not None:
        return item.start_at.astimezone(tz).date()
    return item.start_at.date()


def project_days(
    start_date: date,
    end_date: date,
    items: Iterable[TripItem],
    tz: tzinfo | None = None,
) -> list[DayBucket]:
    """Project unordered items onto the trip's days.

    Bucket k holds every item whose start_at falls on start_date + k. Items
    without start_at, and items scheduled outside the range, appear in no
    bucket. Items keep their input order within a bucket.

    Args:
        start_date: First trip day
        end_date: Last trip day (inclusive)
        items: Trip items in any order
        tz: Optional zone in which to read aware timestamps

    Returns:
        One bucket per day, index 0..N-1
    """
    count = day_count(start_date, end_date)
    buckets = [
        DayBucket(index=i, date=start_date + timedelta(days=i), items=[]) for i in range(count)
    ]

    for item in items:
        day = item_date(item, tz)
        if day is None:
            continue

        offset = (day - start_date).days
        if 0 <= offset < count:
            buckets[offset].items.append(item)

    return buckets


def sort_by_start(items: Iterable[TripItem]) -> list[TripItem]:
    """Order items by start_at ascending, unscheduled items last (stable)."""

    def key(item: TripItem) -> tuple[bool, datetime]:
        return (item.start_at is None, item.start_at or datetime.min)

    return sorted(items, key=key)
