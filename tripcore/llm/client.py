"""LLM client for route order proposals with OpenAI integration.

Security: Reads API key from settings/environment only, never hardcoded.
When no key is configured the optimizer falls back to nearest-neighbour.
"""

import json
import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from typing import Protocol

import openai
from openai import AsyncOpenAI

from tripcore.config import Settings
from tripcore.errors import (
    OptimizationProviderError,
    OptimizationQuotaExceededError,
    OptimizationRateLimitedError,
)
from tripcore.models.optimization import OptimizationItem

logger = logging.getLogger(__name__)

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


class LLMResponseParseError(Exception):
    """LLM reply did not contain a usable order."""

    pass


@dataclass
class ProposedOrder:
    """Order proposed by the LLM: 1-indexed positions plus reasoning."""

    order: list[int]
    reasoning: str


class RouteOrderLLM(Protocol):
    """Protocol for LLM route order implementations."""

    async def propose_order(
        self,
        *,
        items: Sequence[OptimizationItem],
        day_date: date,
        start_location: tuple[float, float] | None = None,
    ) -> ProposedOrder:
        """Propose a visiting order for the items.

        Args:
            items: Items with coordinates, in current order
            day_date: Day being planned
            start_location: Optional (lat, lng) the day starts from

        Returns:
            ProposedOrder with 1-indexed positions into items

        Raises:
            LLMResponseParseError: Reply could not be parsed
            OptimizationRateLimitedError: Provider is rate limiting
            OptimizationQuotaExceededError: Provider credits are exhausted
            OptimizationProviderError: Any other provider failure
        """
        ...


def parse_order_response(content: str) -> ProposedOrder:
    """Extract {"order": [...], "reasoning": "..."} from an LLM reply.

    The JSON object may be wrapped in prose or a markdown code fence.

    Raises:
        LLMResponseParseError: If no valid object is found
    """
    match = _JSON_OBJECT.search(content or "")
    if not match:
        raise LLMResponseParseError("No JSON found")

    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise LLMResponseParseError(f"Invalid JSON: {e}") from e

    order = data.get("order") if isinstance(data, dict) else None
    if not isinstance(order, list) or not all(
        isinstance(i, int) and not isinstance(i, bool) for i in order
    ):
        raise LLMResponseParseError("Missing or invalid 'order'")

    reasoning = data.get("reasoning")
    if not isinstance(reasoning, str) or not reasoning.strip():
        reasoning = "Route reordered to reduce travel between stops."

    return ProposedOrder(order=order, reasoning=reasoning)


class OpenAIClient:
    """OpenAI-backed route order client."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: str | None = None,
        city: str = "Medellín, Colombia",
    ):
        """Initialize OpenAI client.

        Args:
            api_key: OpenAI API key (read from environment)
            model: Model name to use (default: gpt-4o-mini for cost efficiency)
            base_url: Optional OpenAI-compatible gateway URL
            city: City the itineraries are planned in
        """
        self.client = AsyncOpenAI(api_key=api_key, base_url=base_url)
        self.model = model
        self.city = city

    async def propose_order(
        self,
        *,
        items: Sequence[OptimizationItem],
        day_date: date,
        start_location: tuple[float, float] | None = None,
    ) -> ProposedOrder:
        """Propose an order using the OpenAI chat completions API."""
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": self._build_system_prompt()},
                    {
                        "role": "user",
                        "content": self._build_context(items, day_date, start_location),
                    },
                ],
                temperature=0.3,
            )
        except openai.RateLimitError as e:
            if getattr(e, "code", None) == "insufficient_quota":
                raise OptimizationQuotaExceededError(
                    "AI credits exhausted. Please add credits to continue.", status=402
                ) from e
            raise OptimizationRateLimitedError(
                "Rate limit exceeded. Please try again later.", status=429
            ) from e
        except openai.APIStatusError as e:
            if e.status_code == 402:
                raise OptimizationQuotaExceededError(
                    "AI credits exhausted. Please add credits to continue.", status=402
                ) from e
            logger.error(f"OpenAI API call failed: {e}")
            raise OptimizationProviderError("AI gateway error", status=e.status_code) from e
        except openai.APIError as e:
            logger.error(f"OpenAI API call failed: {e}")
            raise OptimizationProviderError("AI gateway error") from e

        content = response.choices[0].message.content or ""
        return parse_order_response(content)

    def _build_system_prompt(self) -> str:
        """Build system prompt for route ordering."""
        return f"""You are an expert route optimizer for {self.city}. Given a list of activities
with their coordinates, suggest the optimal order to visit them to minimize total travel time
and distance.

Consider:
- Geographic clustering (visit nearby places together)
- Typical traffic patterns in {self.city}
- Logical meal timing (restaurants around lunch/dinner hours)
- Activity types (start with outdoor activities in morning when cooler)

Respond ONLY with a JSON object in this exact format:
{{
  "order": [1, 3, 2, 4],
  "reasoning": "Brief explanation of the optimization logic"
}}

Where "order" is an array of the original position numbers (1-indexed) in the optimal
sequence."""

    def _build_context(
        self,
        items: Sequence[OptimizationItem],
        day_date: date,
        start_location: tuple[float, float] | None,
    ) -> str:
        """Build user prompt listing the items."""
        lines = [f"Optimize this itinerary for {day_date.isoformat()}:", ""]

        for idx, item in enumerate(items, start=1):
            lines.append(
                f'{idx}. "{item.title}" ({item.item_type}) '
                f"at coordinates ({item.latitude}, {item.longitude})"
            )
        lines.append("")

        if start_location is not None:
            lines.append(f"Starting from coordinates: ({start_location[0]}, {start_location[1]})")
            lines.append("")

        lines.append("Return the optimal order as a JSON object.")
        return "\n".join(lines)


def get_llm_client(settings: Settings) -> RouteOrderLLM | None:
    """Factory function to get the LLM client based on config.

    Returns:
        OpenAIClient if API key is configured, None otherwise
    """
    api_key = settings.openai_api_key

    if api_key and api_key.get_secret_value():
        logger.info("Using OpenAI client for route optimization")
        return OpenAIClient(
            api_key=api_key.get_secret_value(),
            model=settings.openai_model,
            base_url=settings.openai_base_url,
            city=settings.optimizer_city,
        )

    logger.warning("No OpenAI API key configured, using nearest-neighbor route optimization")
    return None
