"""Structured logging for outbound provider calls."""

import logging
from typing import Any

from tripcore.adapters.base import ProviderContext

logger = logging.getLogger(__name__)


class StructuredProviderLogger:
    """Structured logger for provider calls."""

    def log_call(
        self,
        ctx: ProviderContext,
        outcome: str,
        latency_ms: float,
        status: int | None = None,
        error_reason: str | None = None,
    ) -> None:
        """Log provider call outcome with structured data."""
        log_data: dict[str, Any] = {
            "provider": ctx.provider,
            "operation": ctx.operation,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
        }

        if status is not None:
            log_data["status"] = status
        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Provider call: {ctx.provider}.{ctx.operation} - {outcome}"

        if outcome in ("success", "skipped"):
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
