"""API key management facade.

Key management endpoints require a provisioning key.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import quote

from openrouter_client.http import unwrap_data
from openrouter_client.models import (
    ApiKey,
    CreateKeyRequest,
    CreateKeyResponse,
    CurrentKeyResponse,
    KeysResponse,
    UpdateKeyRequest,
)
from openrouter_client.utils.logging import get_logger
from openrouter_client.validation import require_text

if TYPE_CHECKING:
    from openrouter_client.http import OpenRouterHttpClient

logger = get_logger(__name__)


def _key_path(key_id: str) -> str:
    return f"keys/{quote(require_text('key_id', key_id), safe='')}"


class KeysService:
    """Create, inspect, update and delete API keys."""

    def __init__(self, http_client: OpenRouterHttpClient):
        self._http = http_client

    async def list_keys(self) -> KeysResponse:
        return await self._http.send("keys", method="GET", response_model=KeysResponse)

    async def create_key(self, request: CreateKeyRequest) -> CreateKeyResponse:
        """Create a key. The secret is only returned by this call."""
        response = await self._http.send(
            "keys", request, response_model=CreateKeyResponse, unwrap=True
        )
        logger.info("api_key_created", key_id=response.id, name=response.name)
        return response

    async def get_key(self, key_id: str) -> ApiKey:
        return await self._http.send(
            _key_path(key_id), method="GET", response_model=ApiKey, unwrap=True
        )

    async def update_key(self, key_id: str, request: UpdateKeyRequest) -> ApiKey:
        """Change the fields set on ``request``; unset fields are left as is."""
        return await self._http.send(
            _key_path(key_id),
            request,
            method="PATCH",
            response_model=ApiKey,
            unwrap=True,
        )

    async def delete_key(self, key_id: str) -> None:
        body = await self._http.send_json(_key_path(key_id), method="DELETE")
        deleted = unwrap_data(body).get("deleted") if isinstance(body, dict) else None
        logger.info("api_key_deleted", key_id=key_id, confirmed=deleted)

    async def get_current_key(self) -> CurrentKeyResponse:
        """Describe the key used to authenticate this client."""
        return await self._http.send(
            "key", method="GET", response_model=CurrentKeyResponse
        )
