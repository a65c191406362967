"""Map core errors to HTTP responses."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from tripcore.errors import (
    AuthorizationError,
    NoRouteFoundError,
    NotFoundError,
    RouteProviderError,
    TransientRouteError,
    TripCoreError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def status_for_error(error: TripCoreError) -> int:
    """HTTP status code for a core error."""
    if isinstance(error, ValidationError):
        return 422
    if isinstance(error, AuthorizationError):
        return 403
    if isinstance(error, NotFoundError | NoRouteFoundError):
        return 404
    if isinstance(error, RouteProviderError):
        return error.status if 400 <= error.status < 600 else 502
    if isinstance(error, TransientRouteError):
        return 503
    return 500


async def handle_core_error(request: Request, exc: TripCoreError) -> JSONResponse:
    """Exception handler for TripCoreError."""
    code = status_for_error(exc)
    if code >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc}")
    return JSONResponse(status_code=code, content={"detail": str(exc)})


def register_exception_handlers(app: FastAPI) -> None:
    """Install core error handlers on the app."""
    app.add_exception_handler(TripCoreError, handle_core_error)  # type: ignore[arg-type]
