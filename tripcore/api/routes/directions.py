"""Directions endpoint - computes a route through ordered waypoints."""

import logging
from typing import Annotated

import httpx
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from tripcore.adapters.google_routes import compute_routes
from tripcore.api.deps import get_outbound_client
from tripcore.config import Settings, get_settings
from tripcore.errors import NoRouteFoundError, RouteProviderError
from tripcore.models.common import WireModel
from tripcore.models.route import OrderedStop

logger = logging.getLogger(__name__)

router = APIRouter(tags=["directions"])


class DirectionsRequest(WireModel):
    """Request body for POST /directions."""

    waypoints: list[OrderedStop] = []
    optimize_order: bool = False


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@router.post("/directions", response_model=None)
async def directions(
    request: DirectionsRequest,
    settings: Annotated[Settings, Depends(get_settings)],
    client: Annotated[httpx.AsyncClient, Depends(get_outbound_client)],
) -> JSONResponse:
    """Compute a route for the waypoints in the given order.

    Returns:
        200 with the RouteResult fields plus success=true
        400 if fewer than 2 waypoints or a waypoint lacks coordinates
        404 if the provider finds no route
        upstream status for provider errors, 500 if no API key is configured
    """
    if not settings.google_maps_api_key:
        logger.error("GOOGLE_MAPS_API_KEY is not configured")
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "Google Maps API key not configured")

    if len(request.waypoints) < 2:
        return _failure(status.HTTP_400_BAD_REQUEST, "At least 2 waypoints are required")

    if any(stop.latitude is None or stop.longitude is None for stop in request.waypoints):
        return _failure(status.HTTP_400_BAD_REQUEST, "Every waypoint needs coordinates")

    try:
        result = await compute_routes(
            request.waypoints,
            request.optimize_order,
            api_key=settings.google_maps_api_key,
            base_url=settings.google_routes_url,
            client=client,
        )
    except NoRouteFoundError as e:
        return _failure(status.HTTP_404_NOT_FOUND, str(e))
    except RouteProviderError as e:
        return _failure(e.status, str(e))
    except httpx.HTTPError as e:
        logger.error(f"Directions request failed: {type(e).__name__}: {e}")
        return _failure(status.HTTP_502_BAD_GATEWAY, "Directions provider unreachable")

    body = result.model_dump(mode="json", by_alias=True, exclude_none=True)
    body["success"] = True
    return JSONResponse(content=body)
