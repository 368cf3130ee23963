"""Entry point: ``OpenRouterClient`` owns the connection pool and the facades."""

from __future__ import annotations

from functools import cached_property
from types import TracebackType
from typing import Any

import httpx

from .authentication import AuthenticationProvider, BearerTokenProvider
from .config import OpenRouterSettings, load_settings
from .http import OpenRouterHttpClient
from .services import (
    AuthService,
    ChatService,
    CreditsService,
    GenerationService,
    KeysService,
    ModelsService,
)
from .utils.logging import get_logger

logger = get_logger(__name__)


class OpenRouterClient:
    """Asynchronous client for the OpenRouter API.

    Settings come from ``settings`` (or the environment when omitted) with
    keyword overrides applied on top::

        async with OpenRouterClient(api_key="sk-or-v1-...", x_title="My App") as client:
            models = await client.models.list_models()

    Args:
        api_key: API key; overrides ``OPENROUTER_API_KEY``
        settings: Base settings; loaded from the environment when omitted
        auth_provider: Custom credential source; defaults to a bearer token
            built from the configured key
        http_client: Pre-configured ``httpx.AsyncClient``; not closed by
            ``aclose()``
        **overrides: Any ``OpenRouterSettings`` field

    Raises:
        ConfigurationError: If no usable API key or an invalid setting is given
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        settings: OpenRouterSettings | None = None,
        auth_provider: AuthenticationProvider | None = None,
        http_client: httpx.AsyncClient | None = None,
        **overrides: Any,
    ):
        base = settings if settings is not None else load_settings()
        self.settings = base.with_overrides(api_key=api_key, **overrides)

        if auth_provider is None:
            auth_provider = BearerTokenProvider(
                self.settings.require_api_key(),
                validate_format=self.settings.validate_api_key,
            )
        self._http = OpenRouterHttpClient(self.settings, auth_provider, http_client)
        self._closed = False

        logger.debug(
            "openrouter_client_initialized", **self.settings.safe_for_logging()
        )

    @property
    def http(self) -> OpenRouterHttpClient:
        """The underlying dispatch client."""
        return self._http

    @cached_property
    def chat(self) -> ChatService:
        return ChatService(self._http)

    @cached_property
    def models(self) -> ModelsService:
        return ModelsService(self._http)

    @cached_property
    def credits(self) -> CreditsService:
        return CreditsService(self._http)

    @cached_property
    def keys(self) -> KeysService:
        return KeysService(self._http)

    @cached_property
    def generation(self) -> GenerationService:
        return GenerationService(self._http)

    @cached_property
    def auth(self) -> AuthService:
        return AuthService(self._http)

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def aclose(self) -> None:
        """Release the connection pool. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        await self._http.aclose()
        logger.debug("openrouter_client_closed")

    async def __aenter__(self) -> OpenRouterClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()
