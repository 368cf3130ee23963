"""Model catalogue facade."""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import quote

from openrouter_client.error_codes import ErrorCode
from openrouter_client.exceptions import OpenRouterApiError
from openrouter_client.models import (
    Model,
    ModelEndpoints,
    ModelsRequest,
    ModelsResponse,
)
from openrouter_client.utils.logging import get_logger
from openrouter_client.validation import require_text

if TYPE_CHECKING:
    from openrouter_client.http import OpenRouterHttpClient

logger = get_logger(__name__)


class ModelsService:
    """Lists models and their provider endpoints."""

    def __init__(self, http_client: OpenRouterHttpClient):
        self._http = http_client

    async def list_models(self) -> ModelsResponse:
        return await self._http.send(
            "models", method="GET", response_model=ModelsResponse
        )

    async def get_models(self, request: ModelsRequest | None = None) -> ModelsResponse:
        """List models matching the given filters."""
        params = request.to_query_params() if request else None
        return await self._http.send(
            "models",
            method="GET",
            params=params or None,
            response_model=ModelsResponse,
        )

    async def get_model(self, model_id: str) -> Model:
        """Find one model by id in the catalogue.

        Raises:
            OpenRouterApiError: With status 404 if no model has this id
        """
        require_text("model_id", model_id)
        catalogue = await self.list_models()
        for model in catalogue.data:
            if model.id == model_id:
                return model

        logger.info(
            "model_not_found", model_id=model_id, available=len(catalogue.data)
        )
        raise OpenRouterApiError(
            f"Model with ID '{model_id}' not found.",
            status_code=404,
            error_code=ErrorCode.NOT_FOUND.value,
        )

    async def get_model_endpoints(self, author: str, slug: str) -> ModelEndpoints:
        """List the provider endpoints serving ``author/slug``."""
        require_text("author", author)
        require_text("slug", slug)
        endpoint = f"models/{quote(author, safe='')}/{quote(slug, safe='')}/endpoints"
        return await self._http.send(
            endpoint, method="GET", response_model=ModelEndpoints, unwrap=True
        )
