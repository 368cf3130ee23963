"""Low-level dispatch client for the OpenRouter HTTP API."""

from __future__ import annotations

import time
from collections.abc import AsyncIterator
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from openrouter_client.authentication import AuthenticationProvider
from openrouter_client.config import USER_AGENT, OpenRouterSettings
from openrouter_client.exceptions import (
    NetworkError,
    RequestTimeoutError,
    SerializationError,
    StreamingError,
)
from openrouter_client.utils.logging import get_logger

from .errors import map_error_response
from .retry import build_retrying
from .streaming import decode_chunk, iter_sse_data

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

Payload = BaseModel | dict[str, Any] | None


def serialize_payload(payload: Payload) -> dict[str, Any] | None:
    """Dump a request model to a JSON-ready dict, omitting unset fields."""
    if payload is None:
        return None
    if isinstance(payload, BaseModel):
        return payload.model_dump(mode="json", exclude_none=True, by_alias=True)
    return payload


def unwrap_data(body: Any) -> Any:
    """Return the object inside a ``{"data": {...}}`` envelope.

    Sibling top-level fields (e.g. the one-time ``key`` on key creation)
    are merged in without overriding the inner object.
    """
    if isinstance(body, dict) and isinstance(body.get("data"), dict):
        inner = dict(body["data"])
        for name, value in body.items():
            if name != "data":
                inner.setdefault(name, value)
        return inner
    return body


def build_timeout(settings: OpenRouterSettings) -> httpx.Timeout:
    return httpx.Timeout(
        connect=settings.connect_timeout,
        read=settings.timeout,
        write=30.0,
        pool=5.0,
    )


class OpenRouterHttpClient:
    """Sends requests to OpenRouter and turns responses into typed results.

    Attaches authentication and attribution headers, retries transient
    failures, maps error statuses to exceptions and decodes SSE streams.

    Args:
        settings: Client settings
        auth_provider: Source of the ``Authorization`` header
        http_client: Optional pre-configured ``httpx.AsyncClient``; it is not
            closed by ``aclose()``
    """

    def __init__(
        self,
        settings: OpenRouterSettings,
        auth_provider: AuthenticationProvider,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.settings = settings
        self._auth = auth_provider
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=build_timeout(settings),
            limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
        )

    def build_url(self, endpoint: str) -> str:
        return f"{self.settings.base_url.rstrip('/')}/{endpoint.lstrip('/')}"

    async def build_headers(self, *, stream: bool = False) -> dict[str, str]:
        """Assemble headers for one request."""
        headers = {
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
            "Accept": "text/event-stream" if stream else "application/json",
        }
        headers.update(self.settings.default_headers)
        headers["Authorization"] = await self._auth.get_auth_header()
        if self.settings.http_referer:
            headers["HTTP-Referer"] = self.settings.http_referer
        if self.settings.x_title:
            headers["X-Title"] = self.settings.x_title
        return headers

    async def _send_once(
        self,
        method: str,
        endpoint: str,
        body: dict[str, Any] | None,
        params: Any,
    ) -> httpx.Response:
        url = self.build_url(endpoint)
        headers = await self.build_headers()
        start = time.perf_counter()

        logger.debug("openrouter_request_sent", method=method, endpoint=endpoint)
        try:
            response = await self._client.request(
                method, url, json=body, params=params, headers=headers
            )
        except httpx.TimeoutException as e:
            logger.warning(
                "openrouter_request_timeout",
                method=method,
                endpoint=endpoint,
                timeout=self.settings.timeout,
            )
            msg = f"Request to {endpoint} timed out"
            raise RequestTimeoutError(msg, timeout=self.settings.timeout) from e
        except httpx.TransportError as e:
            logger.warning(
                "openrouter_network_error",
                method=method,
                endpoint=endpoint,
                error=str(e),
                error_type=type(e).__name__,
            )
            msg = f"Network error while calling {endpoint}: {e}"
            raise NetworkError(msg) from e

        logger.debug(
            "openrouter_response_received",
            method=method,
            endpoint=endpoint,
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - start) * 1000, 1),
        )
        if response.is_error:
            raise map_error_response(response)
        return response

    async def send_raw(
        self,
        endpoint: str,
        payload: Payload = None,
        *,
        method: str = "POST",
        params: Any = None,
    ) -> httpx.Response:
        """Send a request with retries and return the successful response.

        Raises:
            OpenRouterApiError: On an error status (after retries, if retryable)
            NetworkError: On a transport failure (after retries)
            RequestTimeoutError: When the configured timeout is exceeded
        """
        body = serialize_payload(payload)
        retrying = build_retrying(self.settings)
        return await retrying(self._send_once, method, endpoint, body, params)

    async def send_json(
        self,
        endpoint: str,
        payload: Payload = None,
        *,
        method: str = "POST",
        params: Any = None,
    ) -> Any:
        """Send a request and return the parsed JSON body."""
        response = await self.send_raw(
            endpoint, payload, method=method, params=params
        )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            msg = f"Response from {endpoint} is not valid JSON"
            raise SerializationError(msg, response_content=response.text) from e

    async def send(
        self,
        endpoint: str,
        payload: Payload = None,
        *,
        response_model: type[ModelT],
        method: str = "POST",
        params: Any = None,
        unwrap: bool = False,
    ) -> ModelT:
        """Send a request and validate the body into ``response_model``.

        Args:
            endpoint: Path relative to the base URL
            payload: Request model or dict; None sends no body
            response_model: Pydantic model for the response body
            method: HTTP method
            params: Query parameters
            unwrap: Accept a ``{"data": {...}}`` envelope around the object

        Raises:
            SerializationError: If the body does not match ``response_model``
        """
        response = await self.send_raw(
            endpoint, payload, method=method, params=params
        )
        try:
            data = response.json()
        except ValueError as e:
            msg = f"Response from {endpoint} is not valid JSON"
            raise SerializationError(
                msg, response_content=response.text, target_type=response_model
            ) from e
        if unwrap:
            data = unwrap_data(data)
        try:
            return response_model.model_validate(data)
        except ValidationError as e:
            logger.error(
                "openrouter_response_invalid",
                endpoint=endpoint,
                target_type=response_model.__name__,
                errors=e.error_count(),
            )
            msg = f"Failed to deserialize response into {response_model.__name__}"
            raise SerializationError(
                msg, response_content=response.text, target_type=response_model
            ) from e

    async def stream(
        self,
        endpoint: str,
        payload: Payload,
        *,
        chunk_model: type[ModelT],
    ) -> AsyncIterator[ModelT]:
        """POST ``payload`` and yield decoded SSE chunks in server order.

        Each call issues a new request; streams are never retried. The
        response is released when iteration finishes. Consumers that may stop
        early should wrap the generator in ``contextlib.aclosing`` so the
        connection is returned on ``break``::

            async with aclosing(http.stream(...)) as chunks:
                async for chunk in chunks:
                    ...

        Raises:
            OpenRouterApiError: If the stream could not be opened
            RequestTimeoutError: If opening or reading the stream times out
            StreamingError: On a malformed chunk or a mid-stream failure
        """
        body = serialize_payload(payload)
        request = self._client.build_request(
            "POST",
            self.build_url(endpoint),
            json=body,
            headers=await self.build_headers(stream=True),
        )

        logger.debug("openrouter_stream_opened", endpoint=endpoint)
        try:
            response = await self._client.send(request, stream=True)
        except httpx.TimeoutException as e:
            msg = f"Opening stream to {endpoint} timed out"
            raise RequestTimeoutError(msg, timeout=self.settings.timeout) from e
        except httpx.TransportError as e:
            msg = f"Network error while opening stream to {endpoint}: {e}"
            raise NetworkError(msg) from e

        chunks = 0
        try:
            if response.is_error:
                await response.aread()
                raise map_error_response(response)

            async for data in iter_sse_data(response.aiter_lines()):
                chunk = decode_chunk(data, chunk_model)
                chunks += 1
                yield chunk
        except httpx.TimeoutException as e:
            logger.warning(
                "openrouter_stream_timeout",
                endpoint=endpoint,
                chunks=chunks,
                timeout=self.settings.timeout,
            )
            msg = f"Stream from {endpoint} timed out after {chunks} chunk(s)"
            raise RequestTimeoutError(
                msg, timeout=self.settings.timeout, context={"chunks": chunks}
            ) from e
        except httpx.TransportError as e:
            logger.warning(
                "openrouter_stream_interrupted",
                endpoint=endpoint,
                chunks=chunks,
                error=str(e),
            )
            msg = f"Stream from {endpoint} was interrupted: {e}"
            raise StreamingError(msg, context={"chunks": chunks}) from e
        finally:
            await response.aclose()

        logger.debug("openrouter_stream_completed", endpoint=endpoint, chunks=chunks)

    async def aclose(self) -> None:
        """Close the underlying connection pool if this client created it."""
        if self._owns_client:
            await self._client.aclose()
