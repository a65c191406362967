"""Owner-scoped query helpers."""

from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.orm import Query, Session

from tripcore.db.models import TripRow
from tripcore.models.trip import TripFilters


def query_trips(session: Session, owner_id: UUID) -> Query:
    """Query trips table with owner scoping and soft-delete exclusion enforced.

    Args:
        session: SQLAlchemy session
        owner_id: Owning user ID

    Returns:
        Query filtered by user_id with deleted trips removed
    """
    return session.query(TripRow).filter(
        TripRow.user_id == owner_id, TripRow.deleted_at.is_(None)
    )


def apply_trip_filters(query: Query, filters: TripFilters) -> Query:
    """Apply status, search and date range filters to a trips query.

    Args:
        query: Query over TripRow
        filters: Listing filters

    Returns:
        Filtered query ordered by start_date descending
    """
    if filters.status:
        query = query.filter(TripRow.status.in_([s.value for s in filters.status]))

    if filters.search:
        pattern = f"%{filters.search}%"
        query = query.filter(
            or_(
                TripRow.title.ilike(pattern),
                TripRow.destination.ilike(pattern),
                TripRow.description.ilike(pattern),
            )
        )

    if filters.date_range is not None:
        if filters.date_range.start is not None:
            query = query.filter(TripRow.start_date >= filters.date_range.start)
        if filters.date_range.end is not None:
            query = query.filter(TripRow.end_date <= filters.date_range.end)

    return query.order_by(TripRow.start_date.desc())
