"""Optimization-suggestion endpoint - proposes a visiting order for a day."""

import logging
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from tripcore.api.deps import get_route_optimizer
from tripcore.errors import (
    OptimizationProviderError,
    OptimizationQuotaExceededError,
    OptimizationRateLimitedError,
)
from tripcore.models.common import WireModel
from tripcore.models.optimization import OptimizationItem
from tripcore.optimization.service import RouteOptimizer, StartLocation

logger = logging.getLogger(__name__)

router = APIRouter(tags=["optimize"])


class OptimizePreferences(WireModel):
    """Optional hints for the optimizer."""

    start_location: StartLocation | None = None


class OptimizeRouteRequest(WireModel):
    """Request body for POST /optimize-route."""

    items: list[OptimizationItem] = []
    day_date: date
    preferences: OptimizePreferences | None = None


@router.post("/optimize-route", response_model=None)
async def optimize_route(
    request: OptimizeRouteRequest,
    optimizer: Annotated[RouteOptimizer, Depends(get_route_optimizer)],
) -> JSONResponse:
    """Suggest an order for one day's items.

    Returns:
        200 with optimizedOrder, explanation and savings
        429 if the LLM provider is rate limiting
        402 if the LLM provider credits are exhausted
        500 for any other provider failure
    """
    start = request.preferences.start_location if request.preferences else None

    try:
        suggestion = await optimizer.optimize(request.items, request.day_date, start)
    except OptimizationRateLimitedError as e:
        return JSONResponse(status_code=status.HTTP_429_TOO_MANY_REQUESTS, content={"error": str(e)})
    except OptimizationQuotaExceededError as e:
        return JSONResponse(status_code=status.HTTP_402_PAYMENT_REQUIRED, content={"error": str(e)})
    except OptimizationProviderError as e:
        logger.error(f"Route optimization failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": str(e)}
        )

    return JSONResponse(content=suggestion.model_dump(mode="json", by_alias=True))
