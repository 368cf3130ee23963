"""Centralized exception hierarchy for openrouter-client.

All custom exceptions inherit from OpenRouterError, making it easy to catch
every SDK failure with a single except clause.

Exception Hierarchy:
    OpenRouterError (base)
     InvalidArgumentError - Caller supplied a bad argument (also a ValueError)
     ConfigurationError - Settings missing or invalid
     OpenRouterApiError - The API answered with an error status
        AuthenticationError - 401
        AuthorizationError - 403
        RateLimitError - 429, carries retry_after
        RemoteValidationError - 400, carries validation_errors
        ModerationError - 400 with moderation_error code
        ProviderError - 5xx, carries provider_name
     NetworkError - No HTTP response was obtained
     RequestTimeoutError - Time budget exceeded
     SerializationError - Response body did not match the expected shape
     StreamingError - Malformed or truncated stream chunk

Usage Examples:
    try:
        response = await client.chat.create(request)
    except RateLimitError as e:
        await asyncio.sleep(e.retry_after or 1.0)
    except OpenRouterApiError as e:
        logger.error("chat_failed", **e.to_dict())
"""

from typing import Any

from .error_codes import ErrorCode


class OpenRouterError(Exception):
    """Base exception for all SDK errors.

    Attributes:
        message: Human-readable error message
        error_code: Structured error code for machine-readable handling
        status_code: HTTP status code, when the error came from a response
        request_id: Value of the ``x-request-id`` response header, if any
        suggestion: Optional hint for resolving the error
        context: Additional context for debugging
    """

    default_error_code: ErrorCode | None = None

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        status_code: int | None = None,
        request_id: str | None = None,
        suggestion: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        """Initialize the exception.

        Args:
            message: Human-readable error message
            error_code: Structured error code (defaults to the class code)
            status_code: HTTP status code
            request_id: Request identifier returned by the API
            suggestion: Optional suggestion for resolving the error
            context: Additional context for debugging
        """
        self.message = message
        if error_code is None and self.default_error_code is not None:
            error_code = self.default_error_code.value
        self.error_code = error_code
        self.status_code = status_code
        self.request_id = request_id
        self.suggestion = suggestion
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with status, code and suggestion."""
        parts = []
        if self.status_code is not None:
            parts.append(f"HTTP {self.status_code} ")
        if self.error_code:
            parts.append(f"[{self.error_code}] {self.message}")
        else:
            parts.append(self.message)
        if self.suggestion:
            parts.append(f"\nSuggestion: {self.suggestion}")
        return "".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "message": self.message,
            "error_code": self.error_code,
            "status_code": self.status_code,
            "request_id": self.request_id,
            "suggestion": self.suggestion,
            "context": self.context,
            "type": type(self).__name__,
        }


# Local errors


class InvalidArgumentError(OpenRouterError, ValueError):
    """A caller-supplied argument is missing or out of range.

    Raised before any network call is made.
    """

    default_error_code = ErrorCode.INVALID_ARGUMENT

    def __init__(self, message: str, argument: str | None = None, **kwargs: Any):
        self.argument = argument
        super().__init__(message, **kwargs)


class ConfigurationError(OpenRouterError):
    """Client configuration is missing or invalid.

    Raised when:
    - No API key is configured
    - The base URL is not an absolute http(s) URL
    - The API key does not look like an OpenRouter key and validation is on
    """

    default_error_code = ErrorCode.CONFIGURATION

    def __init__(
        self, message: str, configuration_key: str | None = None, **kwargs: Any
    ):
        self.configuration_key = configuration_key
        super().__init__(message, **kwargs)


# Remote errors


class OpenRouterApiError(OpenRouterError):
    """The API answered with a non-success status.

    Attributes:
        remote_code: The ``error.code`` value the API returned, if any
        error_details: Parsed error envelope, or the raw body when unparseable
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        remote_code: str | int | None = None,
        request_id: str | None = None,
        error_details: Any = None,
        **kwargs: Any,
    ):
        self.remote_code = remote_code
        self.error_details = error_details
        if "error_code" not in kwargs and self.default_error_code is None:
            kwargs["error_code"] = str(remote_code) if remote_code is not None else None
        super().__init__(
            message, status_code=status_code, request_id=request_id, **kwargs
        )


class AuthenticationError(OpenRouterApiError):
    """Credentials were rejected (HTTP 401)."""

    default_error_code = ErrorCode.AUTHENTICATION

    def __init__(self, message: str, status_code: int = 401, **kwargs: Any):
        kwargs.setdefault(
            "suggestion", "Check that OPENROUTER_API_KEY holds a valid key."
        )
        super().__init__(message, status_code=status_code, **kwargs)


class AuthorizationError(OpenRouterApiError):
    """The authenticated key may not perform this operation (HTTP 403)."""

    default_error_code = ErrorCode.AUTHORIZATION

    def __init__(self, message: str, status_code: int = 403, **kwargs: Any):
        super().__init__(message, status_code=status_code, **kwargs)


class RateLimitError(OpenRouterApiError):
    """The request was throttled (HTTP 429).

    Attributes:
        retry_after: Seconds the server asked us to wait, if it said
    """

    default_error_code = ErrorCode.RATE_LIMIT_EXCEEDED

    def __init__(
        self,
        message: str,
        retry_after: float | None = None,
        status_code: int = 429,
        **kwargs: Any,
    ):
        self.retry_after = retry_after
        super().__init__(message, status_code=status_code, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["retry_after"] = self.retry_after
        return data


class RemoteValidationError(OpenRouterApiError):
    """The API rejected the request body (HTTP 400).

    Attributes:
        validation_errors: Field name to messages, when the API provides them
    """

    default_error_code = ErrorCode.VALIDATION

    def __init__(
        self,
        message: str,
        validation_errors: dict[str, list[str]] | None = None,
        status_code: int = 400,
        **kwargs: Any,
    ):
        self.validation_errors = validation_errors
        super().__init__(message, status_code=status_code, **kwargs)


class ModerationError(OpenRouterApiError):
    """The input was flagged by moderation (HTTP 400)."""

    default_error_code = ErrorCode.MODERATION

    def __init__(self, message: str, status_code: int = 400, **kwargs: Any):
        super().__init__(message, status_code=status_code, **kwargs)


class ProviderError(OpenRouterApiError):
    """The upstream model provider failed (HTTP 5xx).

    Attributes:
        provider_name: Name of the failing provider, when reported
    """

    default_error_code = ErrorCode.PROVIDER

    def __init__(
        self,
        message: str,
        provider_name: str | None = None,
        status_code: int = 502,
        **kwargs: Any,
    ):
        self.provider_name = provider_name
        super().__init__(message, status_code=status_code, **kwargs)


# Transport and decoding errors


class NetworkError(OpenRouterError):
    """Transport-level failure before any HTTP response was obtained."""

    default_error_code = ErrorCode.NETWORK


class RequestTimeoutError(OpenRouterError):
    """A configured time budget was exceeded.

    Attributes:
        timeout: The budget in seconds that was exceeded
    """

    default_error_code = ErrorCode.TIMEOUT

    def __init__(self, message: str, timeout: float | None = None, **kwargs: Any):
        self.timeout = timeout
        super().__init__(message, **kwargs)


class SerializationError(OpenRouterError):
    """A response body did not match the expected shape.

    Attributes:
        response_content: The body text that failed to deserialize
        target_type: The model the body was validated against
    """

    default_error_code = ErrorCode.SERIALIZATION

    def __init__(
        self,
        message: str,
        response_content: str | None = None,
        target_type: type | None = None,
        **kwargs: Any,
    ):
        self.response_content = response_content
        self.target_type = target_type
        super().__init__(message, **kwargs)


class StreamingError(OpenRouterError):
    """A malformed or truncated chunk was encountered mid-stream."""

    default_error_code = ErrorCode.STREAMING


__all__ = [
    "AuthenticationError",
    "AuthorizationError",
    "ConfigurationError",
    "InvalidArgumentError",
    "ModerationError",
    "NetworkError",
    "OpenRouterApiError",
    "OpenRouterError",
    "ProviderError",
    "RateLimitError",
    "RemoteValidationError",
    "RequestTimeoutError",
    "SerializationError",
    "StreamingError",
]
