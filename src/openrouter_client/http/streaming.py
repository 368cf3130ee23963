"""Server-sent events decoding for streaming completions."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from openrouter_client.exceptions import StreamingError
from openrouter_client.utils.logging import get_logger

from .errors import stream_error_from_payload

logger = get_logger(__name__)

ChunkT = TypeVar("ChunkT", bound=BaseModel)

DONE_SENTINEL = "[DONE]"


async def iter_sse_data(lines: AsyncIterator[str]) -> AsyncIterator[str]:
    """Yield the payload of each ``data:`` line until ``[DONE]``.

    Blank lines, SSE comments (``:`` prefix) and other fields are skipped.
    """
    async for raw_line in lines:
        line = raw_line.strip()
        if not line or line.startswith(":"):
            continue
        if not line.startswith("data:"):
            continue

        data = line[5:].strip()
        if not data:
            continue
        if data == DONE_SENTINEL:
            return
        yield data
    logger.warning("openrouter_stream_ended_without_done")


def decode_chunk(data: str, chunk_model: type[ChunkT]) -> ChunkT:
    """Decode one ``data:`` payload into ``chunk_model``.

    Raises:
        StreamingError: If the payload is not JSON, carries an in-band
            error, or does not match the chunk model
    """
    try:
        payload = json.loads(data)
    except json.JSONDecodeError as e:
        logger.error(
            "openrouter_stream_chunk_parse_failed", data_preview=data[:200]
        )
        msg = f"Malformed stream chunk: {e.msg}"
        raise StreamingError(msg, context={"data": data[:200]}) from e

    if isinstance(payload, dict) and "error" in payload:
        msg = f"Stream error: {stream_error_from_payload(payload)}"
        raise StreamingError(msg, context={"data": data[:200]})

    try:
        return chunk_model.model_validate(payload)
    except ValidationError as e:
        msg = f"Stream chunk does not match {chunk_model.__name__}"
        raise StreamingError(msg, context={"data": data[:200]}) from e
