"""FastAPI dependencies wiring the core services."""

from collections.abc import AsyncGenerator
from functools import lru_cache
from typing import Annotated

import httpx
from fastapi import Depends
from sqlalchemy.orm import Session

from tripcore.config import Settings, get_settings
from tripcore.db.engine import get_session
from tripcore.db.sql_repositories import SqlTripItemRepository, SqlTripRepository
from tripcore.itinerary.cache import ReadCache
from tripcore.itinerary.store import ItineraryStore
from tripcore.llm.client import get_llm_client
from tripcore.optimization.service import RouteOptimizer
from tripcore.utils.metrics import PrometheusCacheMetrics


@lru_cache
def get_read_cache() -> ReadCache:
    """Process-wide read cache shared by all request-scoped stores."""
    return ReadCache(PrometheusCacheMetrics())


def get_itinerary_store(session: Annotated[Session, Depends(get_session)]) -> ItineraryStore:
    """Itinerary store over the SQL repositories for this request."""
    return ItineraryStore(
        SqlTripRepository(session),
        SqlTripItemRepository(session),
        cache=get_read_cache(),
    )


async def get_outbound_client(
    settings: Annotated[Settings, Depends(get_settings)],
) -> AsyncGenerator[httpx.AsyncClient, None]:
    """httpx client for calls to third-party providers.

    Yields:
        AsyncClient closed after the request
    """
    async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as client:
        yield client


def get_route_optimizer(settings: Annotated[Settings, Depends(get_settings)]) -> RouteOptimizer:
    """Route optimizer backed by the configured LLM, if any."""
    return RouteOptimizer(get_llm_client(settings), average_speed_kmh=settings.average_speed_kmh)
