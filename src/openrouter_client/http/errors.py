"""Translation of OpenRouter error responses into typed exceptions."""

from __future__ import annotations

import json
from typing import Any

import httpx
from pydantic import ValidationError

from openrouter_client.error_codes import ErrorCode
from openrouter_client.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ModerationError,
    OpenRouterApiError,
    ProviderError,
    RateLimitError,
    RemoteValidationError,
)
from openrouter_client.models.responses import ErrorDetail, ErrorResponse
from openrouter_client.utils.logging import get_logger

from .retry import parse_retry_after_header

logger = get_logger(__name__)

REQUEST_ID_HEADER = "x-request-id"


def parse_error_body(text: str) -> ErrorDetail | None:
    """Parse ``{"error": {...}}`` from a response body.

    Returns:
        The error detail, or None if the body is not an error envelope
    """
    if not text:
        return None
    try:
        return ErrorResponse.model_validate_json(text).error
    except (ValidationError, ValueError):
        return None


def _provider_name(detail: ErrorDetail | None) -> str | None:
    if detail is None:
        return None
    if detail.provider_name:
        return detail.provider_name
    if detail.metadata is not None:
        return detail.metadata.provider_name
    return None


def map_error_response(response: httpx.Response) -> OpenRouterApiError:
    """Build the exception matching an error response.

    The response body must already be read.

    Args:
        response: A response with a 4xx or 5xx status

    Returns:
        The typed exception to raise
    """
    status = response.status_code
    text = response.text
    detail = parse_error_body(text)
    request_id = response.headers.get(REQUEST_ID_HEADER)

    message = (
        detail.message
        if detail is not None and detail.message
        else f"API request failed with status {status}"
    )
    remote_code = detail.code if detail is not None else None
    error_details: Any = detail.model_dump(exclude_none=True) if detail else text

    common: dict[str, Any] = {
        "status_code": status,
        "remote_code": remote_code,
        "request_id": request_id,
        "error_details": error_details,
    }

    error: OpenRouterApiError
    if status == 401:
        error = AuthenticationError(message, **common)
    elif status == 403:
        error = AuthorizationError(message, **common)
    elif status == 429:
        retry_after = parse_retry_after_header(response)
        if retry_after is None and detail is not None:
            retry_after = detail.retry_after
        error = RateLimitError(message, retry_after=retry_after, **common)
    elif status == 400:
        if str(remote_code) == ErrorCode.MODERATION.value:
            error = ModerationError(message, **common)
        else:
            error = RemoteValidationError(
                message,
                validation_errors=detail.validation_errors if detail else None,
                **common,
            )
    elif status >= 500:
        error = ProviderError(message, provider_name=_provider_name(detail), **common)
    elif status == 404:
        error = OpenRouterApiError(
            message, error_code=ErrorCode.NOT_FOUND.value, **common
        )
    else:
        error = OpenRouterApiError(message, **common)

    logger.warning(
        "openrouter_api_error",
        status_code=status,
        error_type=type(error).__name__,
        remote_code=remote_code,
        request_id=request_id,
        error_message=message,
        body_preview=text[:500] if detail is None else None,
    )
    return error


def stream_error_from_payload(payload: dict[str, Any]) -> str:
    """Render an in-band stream ``{"error": ...}`` payload as a message."""
    error = payload.get("error")
    if isinstance(error, dict):
        code = error.get("code")
        message = error.get("message") or json.dumps(error)
        return f"{message} (code: {code})" if code is not None else message
    return str(error)
