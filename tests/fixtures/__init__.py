"""Test fixtures package."""

from .payloads import (
    API_KEY,
    BASE_URL,
    build_chat_chunk,
    build_chat_response,
    build_error,
    build_model,
    sse_body,
)

__all__ = [
    "API_KEY",
    "BASE_URL",
    "build_chat_chunk",
    "build_chat_response",
    "build_error",
    "build_model",
    "sse_body",
]
