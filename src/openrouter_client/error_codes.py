"""Structured error codes for machine-readable error handling.

Codes match the ``error.code`` strings OpenRouter uses where one exists,
so an error raised locally and one parsed from a response can be compared
directly.

Usage:
    from openrouter_client.error_codes import ErrorCode

    if exc.error_code == ErrorCode.RATE_LIMIT_EXCEEDED:
        ...
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Error codes attached to every ``OpenRouterError``.

    All error codes inherit from str for JSON serialization compatibility.
    """

    # Remote errors (HTTP status driven)
    AUTHENTICATION = "authentication_error"
    """Credentials rejected (HTTP 401)."""

    AUTHORIZATION = "authorization_error"
    """Operation not permitted for this key (HTTP 403)."""

    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    """Request throttled (HTTP 429)."""

    VALIDATION = "validation_error"
    """Request body rejected by the API (HTTP 400)."""

    MODERATION = "moderation_error"
    """Input flagged by moderation (HTTP 400)."""

    PROVIDER = "provider_error"
    """Upstream model provider failed (HTTP 5xx)."""

    NOT_FOUND = "not_found"
    """Requested resource does not exist (HTTP 404)."""

    # Transport and decoding errors
    NETWORK = "network_error"
    """No HTTP response was obtained."""

    TIMEOUT = "timeout_error"
    """Configured time budget exceeded."""

    SERIALIZATION = "serialization_error"
    """Response body did not match the expected shape."""

    STREAMING = "streaming_error"
    """Malformed or truncated chunk in a stream."""

    # Local errors
    CONFIGURATION = "configuration_error"
    """Client settings are missing or invalid."""

    INVALID_ARGUMENT = "invalid_argument"
    """Caller supplied an out-of-range or missing parameter."""
