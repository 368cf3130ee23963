"""Credential providers used to build the ``Authorization`` header."""

from __future__ import annotations

from abc import ABC, abstractmethod

from .config import API_KEY_PREFIX, looks_like_api_key
from .exceptions import AuthenticationError, ConfigurationError


class AuthenticationProvider(ABC):
    """Supplies the credential for each outgoing request."""

    scheme: str = "Bearer"

    @property
    @abstractmethod
    def is_valid(self) -> bool:
        """Whether the provider currently holds a usable credential."""

    @abstractmethod
    async def get_token(self) -> str:
        """Return the credential to send.

        Raises:
            AuthenticationError: If no usable credential is available
        """

    async def get_auth_header(self) -> str:
        """Return the full ``Authorization`` header value."""
        return f"{self.scheme} {await self.get_token()}"


class BearerTokenProvider(AuthenticationProvider):
    """Static API key sent as a bearer token.

    Args:
        token: The OpenRouter API key
        validate_format: Reject keys that do not start with ``sk-or-v1-``

    Raises:
        ConfigurationError: If the token is blank or malformed
    """

    def __init__(self, token: str, validate_format: bool = True):
        if not token or not token.strip():
            raise ConfigurationError(
                "API key cannot be empty", configuration_key="api_key"
            )
        self._token = token.strip()
        self._validate_format = validate_format
        if validate_format and not looks_like_api_key(self._token):
            raise ConfigurationError(
                f"Invalid API key format. Expected format: {API_KEY_PREFIX}...",
                configuration_key="api_key",
            )

    @property
    def is_valid(self) -> bool:
        return bool(self._token) and (
            not self._validate_format or looks_like_api_key(self._token)
        )

    async def get_token(self) -> str:
        if not self.is_valid:
            raise AuthenticationError("Invalid bearer token", status_code=401)
        return self._token

    def __repr__(self) -> str:
        return f"{type(self).__name__}(token='***')"
