"""Error taxonomy for the itinerary core.

Every failure the core can surface to a caller is one of these types. None of
them is retried by the core itself.
"""


class TripCoreError(Exception):
    """Base class for all itinerary core errors."""

    pass


class ValidationError(TripCoreError):
    """Malformed input rejected locally, never sent upstream."""

    pass


class InsufficientStopsError(ValidationError):
    """Fewer than two routable stops were supplied."""

    pass


class AuthorizationError(TripCoreError):
    """Write attempted on a trip the caller does not own."""

    pass


class NotFoundError(TripCoreError):
    """Trip or item id does not resolve for the caller."""

    pass


class RouteProviderError(TripCoreError):
    """Directions provider answered with a non-2xx status."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = status
        self.message = message


class NoRouteFoundError(TripCoreError):
    """Directions provider returned zero routes."""

    pass


class TransientRouteError(TripCoreError):
    """Network or parse failure talking to the directions provider."""

    pass


class OptimizationProviderError(TripCoreError):
    """Optimization-suggestion provider call failed."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status
        self.message = message


class OptimizationRateLimitedError(OptimizationProviderError):
    """Provider is rate limiting; try again later."""

    pass


class OptimizationQuotaExceededError(OptimizationProviderError):
    """Provider quota or credits are exhausted."""

    pass
