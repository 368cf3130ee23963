"""HTTP dispatch: request construction, retries, error mapping and SSE."""

from .client import OpenRouterHttpClient, serialize_payload, unwrap_data
from .errors import map_error_response
from .retry import RETRYABLE_ERRORS, build_retrying, parse_retry_after_header

__all__ = [
    "RETRYABLE_ERRORS",
    "OpenRouterHttpClient",
    "build_retrying",
    "map_error_response",
    "parse_retry_after_header",
    "serialize_payload",
    "unwrap_data",
]
