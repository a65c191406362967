"""Shared context and instrumentation interfaces for outbound provider calls."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ProviderContext:
    """Context for one outbound provider call."""

    provider: str
    operation: str


# Metrics interface (to be implemented by actual metrics system)
class ProviderMetrics:
    """Interface for provider call metrics."""

    def record_latency(self, provider: str, outcome: str, latency_ms: float) -> None:
        """Record provider call latency."""
        pass

    def inc_error(self, provider: str, reason: str) -> None:
        """Increment error counter."""
        pass


# Logging interface
class ProviderLogger:
    """Interface for structured logging."""

    def log_call(
        self,
        ctx: ProviderContext,
        outcome: str,
        latency_ms: float,
        status: int | None = None,
        error_reason: str | None = None,
    ) -> None:
        """Log provider call outcome."""
        pass


def bearer_headers(access_token: str | None, anon_key: str) -> dict[str, str]:
    """Build request headers, falling back to the public anon key when signed out."""
    headers = {"Content-Type": "application/json"}
    token = access_token or anon_key
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers
