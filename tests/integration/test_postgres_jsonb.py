"""PostgreSQL-specific integration test for the JSONB item metadata column.

This test requires a real PostgreSQL instance and validates that the JSONB
variant works (SQLite stores plain JSON).

Run with: DATABASE_URL='postgresql://...' pytest -m postgres
"""

import uuid
from datetime import UTC, date, datetime

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session

from tripcore.db.models import TripItemRow, TripRow


@pytest.mark.postgres
def test_jsonb_item_metadata_storage(postgres_session: Session) -> None:
    """Test that trip_items.metadata round-trips nested JSON in PostgreSQL."""
    trip = TripRow(
        id=uuid.uuid4(),
        user_id=uuid.uuid4(),
        title="Medellín",
        start_date=date(2024, 3, 1),
        end_date=date(2024, 3, 3),
        status="draft",
    )
    postgres_session.add(trip)

    metadata = {
        "price": {"amount": 120000, "currency": "COP"},
        "host": "Casa Laureles",
        "amenities": ["wifi", "kitchen"],
    }
    item_id = uuid.uuid4()
    postgres_session.add(
        TripItemRow(
            id=item_id,
            trip_id=trip.id,
            item_type="apartment",
            source_id="listing-42",
            title="Laureles loft",
            start_at=datetime(2024, 3, 1, 15, 0, tzinfo=UTC),
            metadata_=metadata,
        )
    )
    postgres_session.commit()

    retrieved = postgres_session.execute(
        select(TripItemRow).where(TripItemRow.id == item_id)
    ).scalar_one()

    assert retrieved.metadata_ is not None
    assert retrieved.metadata_["price"]["currency"] == "COP"
    assert retrieved.metadata_["amenities"] == ["wifi", "kitchen"]
    assert retrieved.trip.title == "Medellín"
