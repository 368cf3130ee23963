"""Generation metadata facade."""

from __future__ import annotations

from typing import TYPE_CHECKING

from openrouter_client.models import GenerationDetails
from openrouter_client.validation import require_text

if TYPE_CHECKING:
    from openrouter_client.http import OpenRouterHttpClient


class GenerationService:
    def __init__(self, http_client: OpenRouterHttpClient):
        self._http = http_client

    async def get_generation(self, generation_id: str) -> GenerationDetails:
        """Fetch cost and token accounting for a completed generation.

        Args:
            generation_id: The ``id`` of a chat completion response
        """
        require_text("generation_id", generation_id)
        return await self._http.send(
            "generation",
            method="GET",
            params={"id": generation_id},
            response_model=GenerationDetails,
            unwrap=True,
        )
