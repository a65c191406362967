"""Shared pytest fixtures for all test suites."""

import os
import uuid
from collections.abc import Generator
from datetime import UTC, datetime

import pytest
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import NullPool, StaticPool

from tripcore.db.context import RequestContext
from tripcore.db.inmemory import InMemoryTripItemRepository, InMemoryTripRepository
from tripcore.db.models import Base
from tripcore.itinerary.cache import ReadCache
from tripcore.itinerary.store import ItineraryStore

FIXED_NOW = datetime(2024, 3, 1, 9, 0, tzinfo=UTC)


@pytest.fixture
def owner_ctx() -> RequestContext:
    """Signed-in caller who owns the trips under test."""
    user_id = uuid.UUID("00000000-0000-0000-0000-000000000001")
    return RequestContext(user_id=user_id, access_token=str(user_id))


@pytest.fixture
def other_ctx() -> RequestContext:
    """Signed-in caller who owns nothing."""
    return RequestContext(user_id=uuid.UUID("00000000-0000-0000-0000-000000000002"))


@pytest.fixture
def anon_ctx() -> RequestContext:
    """Anonymous caller."""
    return RequestContext(user_id=None)


@pytest.fixture
def read_cache() -> ReadCache:
    return ReadCache()


@pytest.fixture
def store(read_cache: ReadCache) -> ItineraryStore:
    """Itinerary store over in-memory repositories with a fixed clock."""
    return ItineraryStore(
        InMemoryTripRepository(),
        InMemoryTripItemRepository(),
        cache=read_cache,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def sqlite_engine() -> Generator[Engine, None, None]:
    """In-memory SQLite engine shared across connections, with tables created.

    Usage:
        def test_something(sqlite_engine):
            with Session(sqlite_engine) as session:
                # ... test code
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    Base.metadata.create_all(engine)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def sql_session(sqlite_engine: Engine) -> Generator[Session, None, None]:
    """Session on the in-memory SQLite engine."""
    with Session(sqlite_engine, expire_on_commit=False) as session:
        yield session
        session.rollback()


@pytest.fixture
def postgres_session() -> Generator[Session, None, None]:
    """Session on a real PostgreSQL database for JSONB tests.

    Requires DATABASE_URL to be set to a real PostgreSQL connection string.
    Tests using this fixture should be marked with @pytest.mark.postgres.
    """
    database_url = os.getenv("DATABASE_URL")
    if not database_url or not database_url.startswith("postgresql"):
        pytest.skip(f"DATABASE_URL is not PostgreSQL: {database_url}")

    engine = create_engine(database_url, poolclass=NullPool, echo=False)
    Base.metadata.create_all(engine)

    with Session(engine, expire_on_commit=False) as session:
        yield session
        session.rollback()

    Base.metadata.drop_all(engine)
    engine.dispose()
