"""Credit balance facade."""

from __future__ import annotations

from typing import TYPE_CHECKING

from openrouter_client.models import CreditsResponse

if TYPE_CHECKING:
    from openrouter_client.http import OpenRouterHttpClient


class CreditsService:
    def __init__(self, http_client: OpenRouterHttpClient):
        self._http = http_client

    async def get_credits(self) -> CreditsResponse:
        """Return purchased credits and usage for the account."""
        return await self._http.send(
            "credits", method="GET", response_model=CreditsResponse
        )
