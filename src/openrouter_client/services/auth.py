"""OAuth PKCE helper for obtaining user-scoped API keys."""

from __future__ import annotations

import base64
import hashlib
import secrets
import string
from typing import TYPE_CHECKING
from urllib.parse import urlencode

from openrouter_client.exceptions import ConfigurationError, InvalidArgumentError
from openrouter_client.models import (
    AuthKeyExchangeRequest,
    AuthKeyExchangeResponse,
    AuthorizationUrl,
    OAuthConfig,
    PKCEChallenge,
)
from openrouter_client.utils.logging import get_logger

if TYPE_CHECKING:
    from openrouter_client.http import OpenRouterHttpClient

logger = get_logger(__name__)

AUTH_BASE_URL = "https://openrouter.ai/auth"

# RFC 7636 section 4.1 unreserved characters
VERIFIER_ALPHABET = string.ascii_letters + string.digits + "-._~"
VERIFIER_LENGTH = 128


def generate_code_verifier(length: int = VERIFIER_LENGTH) -> str:
    """Random verifier drawn from the unreserved alphabet (43..128 chars)."""
    if not 43 <= length <= 128:
        raise InvalidArgumentError(
            "code verifier length must be between 43 and 128", argument="length"
        )
    return "".join(secrets.choice(VERIFIER_ALPHABET) for _ in range(length))


def compute_code_challenge(code_verifier: str) -> str:
    """``base64url(SHA-256(verifier))`` without padding (method ``S256``)."""
    digest = hashlib.sha256(code_verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


class AuthService:
    """Builds the PKCE authorization redirect and exchanges the returned code."""

    def __init__(self, http_client: OpenRouterHttpClient | None = None):
        self._http = http_client

    def generate_pkce_challenge(self) -> PKCEChallenge:
        verifier = generate_code_verifier()
        return PKCEChallenge(
            code_verifier=verifier,
            code_challenge=compute_code_challenge(verifier),
            method="S256",
        )

    def generate_authorization_url(self, config: OAuthConfig) -> AuthorizationUrl:
        """Create the URL to send the user to, with a fresh PKCE challenge.

        Keep ``challenge.code_verifier`` to finish the flow with
        ``exchange_code_for_key``. A random ``state`` is generated when the
        config has none.
        """
        challenge = self.generate_pkce_challenge()
        state = config.state or secrets.token_urlsafe(16)

        query: dict[str, str] = {"response_type": "code"}
        if config.client_id:
            query["client_id"] = config.client_id
        query["redirect_uri"] = config.redirect_uri
        query["callback_url"] = config.redirect_uri
        if config.scopes:
            query["scope"] = " ".join(config.scopes)
        query["state"] = state
        query["code_challenge"] = challenge.code_challenge
        query["code_challenge_method"] = challenge.method

        return AuthorizationUrl(
            url=f"{AUTH_BASE_URL}?{urlencode(query)}",
            state=state,
            challenge=challenge,
        )

    async def exchange_code_for_key(
        self, request: AuthKeyExchangeRequest
    ) -> AuthKeyExchangeResponse:
        """Trade an authorization code (and verifier) for an API key."""
        if self._http is None:
            raise ConfigurationError(
                "Exchanging a code requires an HTTP client",
                suggestion="Use client.auth from an OpenRouterClient.",
            )
        response = await self._http.send(
            "auth/keys", request, response_model=AuthKeyExchangeResponse
        )
        logger.info("oauth_code_exchanged", user_id=response.user_id)
        return response
