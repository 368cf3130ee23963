"""Tests for the dispatch layer: headers, error mapping and retries."""

import json
from datetime import UTC, datetime, timedelta
from email.utils import format_datetime

import httpx
import pytest
import respx

from openrouter_client import (
    AuthenticationError,
    AuthorizationError,
    ErrorCode,
    ModerationError,
    NetworkError,
    OpenRouterApiError,
    OpenRouterClient,
    OpenRouterSettings,
    ProviderError,
    RateLimitError,
    RemoteValidationError,
    RequestTimeoutError,
    SerializationError,
)
from openrouter_client.config import USER_AGENT
from openrouter_client.http import parse_retry_after_header, unwrap_data
from openrouter_client.http.retry import backoff_delay
from tests.fixtures import API_KEY, BASE_URL, build_chat_response, build_error


async def _send_chat(client: OpenRouterClient):
    request = (
        client.chat.create_request()
        .with_model("openai/gpt-4o-mini")
        .with_user_message("Hi")
        .build()
    )
    return await client.chat.create(request)


# =============================================================================
# Headers and request shape
# =============================================================================


class TestRequestHeaders:
    """Tests for headers attached to every request."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_default_headers(self, client: OpenRouterClient) -> None:
        route = respx.post(f"{BASE_URL}/chat/completions").mock(
            return_value=httpx.Response(200, json=build_chat_response())
        )

        await _send_chat(client)

        request = route.calls.last.request
        assert request.headers["Authorization"] == f"Bearer {API_KEY}"
        assert request.headers["Content-Type"] == "application/json"
        assert request.headers["Accept"] == "application/json"
        assert request.headers["User-Agent"] == USER_AGENT
        assert "HTTP-Referer" not in request.headers
        assert "X-Title" not in request.headers

    @pytest.mark.asyncio
    @respx.mock
    async def test_attribution_and_custom_headers(
        self, settings: OpenRouterSettings
    ) -> None:
        route = respx.post(f"{BASE_URL}/chat/completions").mock(
            return_value=httpx.Response(200, json=build_chat_response())
        )

        async with OpenRouterClient(
            settings=settings,
            http_referer="https://myapp.example",
            x_title="My App",
            default_headers={"X-Custom": "1"},
        ) as client:
            await _send_chat(client)

        request = route.calls.last.request
        assert request.headers["HTTP-Referer"] == "https://myapp.example"
        assert request.headers["X-Title"] == "My App"
        assert request.headers["X-Custom"] == "1"

    @pytest.mark.asyncio
    @respx.mock
    async def test_default_headers_cannot_replace_authorization(
        self, settings: OpenRouterSettings
    ) -> None:
        route = respx.post(f"{BASE_URL}/chat/completions").mock(
            return_value=httpx.Response(200, json=build_chat_response())
        )

        async with OpenRouterClient(
            settings=settings, default_headers={"Authorization": "Bearer other"}
        ) as client:
            await _send_chat(client)

        assert route.calls.last.request.headers["Authorization"] == f"Bearer {API_KEY}"

    @pytest.mark.asyncio
    @respx.mock
    async def test_body_omits_unset_fields(self, client: OpenRouterClient) -> None:
        route = respx.post(f"{BASE_URL}/chat/completions").mock(
            return_value=httpx.Response(200, json=build_chat_response())
        )

        await _send_chat(client)

        body = json.loads(route.calls.last.request.content)
        assert body == {
            "model": "openai/gpt-4o-mini",
            "messages": [{"role": "user", "content": "Hi"}],
        }

    @pytest.mark.asyncio
    @respx.mock
    async def test_response_is_parsed(self, client: OpenRouterClient) -> None:
        respx.post(f"{BASE_URL}/chat/completions").mock(
            return_value=httpx.Response(200, json=build_chat_response(content="Yo"))
        )

        response = await _send_chat(client)

        assert response.id == "gen-123"
        assert response.first_choice_content == "Yo"
        assert response.usage.total_tokens == 15
        assert response.provider == "OpenAI"


# =============================================================================
# Error mapping
# =============================================================================


class TestErrorMapping:
    """Tests for status code to exception translation."""

    @pytest.fixture
    def no_retry_settings(self, settings: OpenRouterSettings) -> OpenRouterSettings:
        return settings.with_overrides(enable_retry=False)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status", "body", "expected"),
        [
            (401, build_error("No auth credentials found", 401), AuthenticationError),
            (403, build_error("Key disabled", 403), AuthorizationError),
            (429, build_error("Rate limit exceeded", 429), RateLimitError),
            (400, build_error("Invalid model", 400), RemoteValidationError),
            (
                400,
                build_error("Flagged", "moderation_error"),
                ModerationError,
            ),
            (500, build_error("Internal error", 500), ProviderError),
            (502, build_error("Bad gateway", 502), ProviderError),
            (503, build_error("Unavailable", 503), ProviderError),
            (402, build_error("Insufficient credits", 402), OpenRouterApiError),
        ],
    )
    @respx.mock
    async def test_status_maps_to_exception(
        self, no_retry_settings, status, body, expected
    ) -> None:
        respx.post(f"{BASE_URL}/chat/completions").mock(
            return_value=httpx.Response(status, json=body)
        )

        async with OpenRouterClient(settings=no_retry_settings) as client:
            with pytest.raises(expected) as exc_info:
                await _send_chat(client)

        error = exc_info.value
        assert type(error) is expected
        assert error.status_code == status
        assert error.message == body["error"]["message"]

    @pytest.mark.asyncio
    @respx.mock
    async def test_request_id_and_details_are_kept(self, no_retry_settings) -> None:
        respx.post(f"{BASE_URL}/chat/completions").mock(
            return_value=httpx.Response(
                400,
                json=build_error(
                    "Invalid request",
                    400,
                    validation_errors={"temperature": ["must be <= 2"]},
                ),
                headers={"x-request-id": "req-42"},
            )
        )

        async with OpenRouterClient(settings=no_retry_settings) as client:
            with pytest.raises(RemoteValidationError) as exc_info:
                await _send_chat(client)

        error = exc_info.value
        assert error.request_id == "req-42"
        assert error.remote_code == 400
        assert error.validation_errors == {"temperature": ["must be <= 2"]}
        assert error.error_details["message"] == "Invalid request"

    @pytest.mark.asyncio
    @respx.mock
    async def test_provider_name_from_metadata(self, no_retry_settings) -> None:
        respx.post(f"{BASE_URL}/chat/completions").mock(
            return_value=httpx.Response(
                502,
                json=build_error(
                    "Provider returned error",
                    502,
                    metadata={"provider_name": "Anthropic", "raw": "overloaded"},
                ),
            )
        )

        async with OpenRouterClient(settings=no_retry_settings) as client:
            with pytest.raises(ProviderError) as exc_info:
                await _send_chat(client)

        assert exc_info.value.provider_name == "Anthropic"
        assert exc_info.value.error_code == ErrorCode.PROVIDER

    @pytest.mark.asyncio
    @respx.mock
    async def test_unparseable_error_body(self, no_retry_settings) -> None:
        respx.post(f"{BASE_URL}/chat/completions").mock(
            return_value=httpx.Response(418, text="<html>teapot</html>")
        )

        async with OpenRouterClient(settings=no_retry_settings) as client:
            with pytest.raises(OpenRouterApiError) as exc_info:
                await _send_chat(client)

        error = exc_info.value
        assert error.message == "API request failed with status 418"
        assert error.error_details == "<html>teapot</html>"

    @pytest.mark.asyncio
    @respx.mock
    async def test_not_found_code(self, no_retry_settings) -> None:
        respx.get(f"{BASE_URL}/generation").mock(
            return_value=httpx.Response(404, json=build_error("Generation not found"))
        )

        async with OpenRouterClient(settings=no_retry_settings) as client:
            with pytest.raises(OpenRouterApiError) as exc_info:
                await client.generation.get_generation("gen-missing")

        assert exc_info.value.status_code == 404
        assert exc_info.value.error_code == ErrorCode.NOT_FOUND

    @pytest.mark.asyncio
    @respx.mock
    async def test_retry_after_seconds(self, no_retry_settings) -> None:
        respx.post(f"{BASE_URL}/chat/completions").mock(
            return_value=httpx.Response(
                429, json=build_error("Slow down", 429), headers={"Retry-After": "30"}
            )
        )

        async with OpenRouterClient(settings=no_retry_settings) as client:
            with pytest.raises(RateLimitError) as exc_info:
                await _send_chat(client)

        assert exc_info.value.retry_after == 30.0
        assert exc_info.value.to_dict()["retry_after"] == 30.0

    @pytest.mark.asyncio
    @respx.mock
    async def test_retry_after_missing(self, no_retry_settings) -> None:
        respx.post(f"{BASE_URL}/chat/completions").mock(
            return_value=httpx.Response(429, json=build_error("Slow down", 429))
        )

        async with OpenRouterClient(settings=no_retry_settings) as client:
            with pytest.raises(RateLimitError) as exc_info:
                await _send_chat(client)

        assert exc_info.value.retry_after is None


class TestRetryAfterParsing:
    """Tests for parse_retry_after_header."""

    def test_numeric(self) -> None:
        response = httpx.Response(429, headers={"Retry-After": "2.5"})

        assert parse_retry_after_header(response) == 2.5

    def test_http_date(self) -> None:
        when = datetime.now(UTC) + timedelta(seconds=120)
        response = httpx.Response(
            429, headers={"Retry-After": format_datetime(when, usegmt=True)}
        )

        wait = parse_retry_after_header(response)

        assert wait is not None
        assert 100 <= wait <= 120

    def test_past_date_is_zero(self) -> None:
        when = datetime.now(UTC) - timedelta(hours=1)
        response = httpx.Response(
            429, headers={"Retry-After": format_datetime(when, usegmt=True)}
        )

        assert parse_retry_after_header(response) == 0.0

    @pytest.mark.parametrize("value", ["soon", "-5"])
    def test_invalid(self, value: str) -> None:
        response = httpx.Response(429, headers={"Retry-After": value})

        assert parse_retry_after_header(response) is None


# =============================================================================
# Retries
# =============================================================================


class TestRetries:
    """Tests for the retry policy."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_server_error_is_retried_then_raised(
        self, settings: OpenRouterSettings
    ) -> None:
        route = respx.post(f"{BASE_URL}/chat/completions").mock(
            return_value=httpx.Response(500, json=build_error("boom", 500))
        )

        async with OpenRouterClient(settings=settings, max_retries=3) as client:
            with pytest.raises(ProviderError):
                await _send_chat(client)

        assert route.call_count == 4

    @pytest.mark.asyncio
    @respx.mock
    async def test_recovers_after_transient_failures(
        self, client: OpenRouterClient
    ) -> None:
        route = respx.post(f"{BASE_URL}/chat/completions").mock(
            side_effect=[
                httpx.Response(503, json=build_error("busy", 503)),
                httpx.ConnectError("connection refused"),
                httpx.Response(200, json=build_chat_response()),
            ]
        )

        response = await _send_chat(client)

        assert response.first_choice_content == "Hello!"
        assert route.call_count == 3

    @pytest.mark.asyncio
    @respx.mock
    async def test_rate_limit_is_retried(self, client: OpenRouterClient) -> None:
        route = respx.post(f"{BASE_URL}/chat/completions").mock(
            side_effect=[
                httpx.Response(
                    429, json=build_error("Slow down", 429), headers={"Retry-After": "0"}
                ),
                httpx.Response(200, json=build_chat_response()),
            ]
        )

        await _send_chat(client)

        assert route.call_count == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 401, 403, 404])
    @respx.mock
    async def test_client_errors_are_not_retried(
        self, client: OpenRouterClient, status: int
    ) -> None:
        route = respx.post(f"{BASE_URL}/chat/completions").mock(
            return_value=httpx.Response(status, json=build_error("nope", status))
        )

        with pytest.raises(OpenRouterApiError):
            await _send_chat(client)

        assert route.call_count == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_retry_disabled(self, settings: OpenRouterSettings) -> None:
        route = respx.post(f"{BASE_URL}/chat/completions").mock(
            return_value=httpx.Response(502, json=build_error("down", 502))
        )

        async with OpenRouterClient(settings=settings, enable_retry=False) as client:
            with pytest.raises(ProviderError):
                await _send_chat(client)

        assert route.call_count == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_zero_max_retries(self, settings: OpenRouterSettings) -> None:
        route = respx.post(f"{BASE_URL}/chat/completions").mock(
            return_value=httpx.Response(500, json=build_error("boom", 500))
        )

        async with OpenRouterClient(settings=settings, max_retries=0) as client:
            with pytest.raises(ProviderError):
                await _send_chat(client)

        assert route.call_count == 1

    @pytest.mark.parametrize(
        ("attempt", "expected"), [(1, 1.0), (2, 2.0), (3, 4.0), (4, 8.0), (10, 30.0)]
    )
    def test_backoff_delay(self, attempt: int, expected: float) -> None:
        assert backoff_delay(attempt, 1.0, 30.0) == expected


# =============================================================================
# Transport failures
# =============================================================================


class TestTransportFailures:
    """Tests for failures before any HTTP response."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_timeout(self, settings: OpenRouterSettings) -> None:
        respx.post(f"{BASE_URL}/chat/completions").mock(
            side_effect=httpx.ReadTimeout("timed out")
        )

        async with OpenRouterClient(settings=settings, timeout=5.0) as client:
            with pytest.raises(RequestTimeoutError) as exc_info:
                await _send_chat(client)

        assert exc_info.value.timeout == 5.0
        assert exc_info.value.error_code == ErrorCode.TIMEOUT

    @pytest.mark.asyncio
    @respx.mock
    async def test_timeout_is_not_retried(self, client: OpenRouterClient) -> None:
        route = respx.post(f"{BASE_URL}/chat/completions").mock(
            side_effect=httpx.ConnectTimeout("timed out")
        )

        with pytest.raises(RequestTimeoutError):
            await _send_chat(client)

        assert route.call_count == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_network_error_after_retries(self, client: OpenRouterClient) -> None:
        route = respx.post(f"{BASE_URL}/chat/completions").mock(
            side_effect=httpx.ConnectError("connection refused")
        )

        with pytest.raises(NetworkError) as exc_info:
            await _send_chat(client)

        assert route.call_count == 4
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


# =============================================================================
# Deserialization
# =============================================================================


class TestDeserialization:
    """Tests for response bodies that do not match the model."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_invalid_json(self, client: OpenRouterClient) -> None:
        respx.post(f"{BASE_URL}/chat/completions").mock(
            return_value=httpx.Response(200, text="not json")
        )

        with pytest.raises(SerializationError) as exc_info:
            await _send_chat(client)

        assert exc_info.value.response_content == "not json"

    @pytest.mark.asyncio
    @respx.mock
    async def test_shape_mismatch(self, client: OpenRouterClient) -> None:
        respx.post(f"{BASE_URL}/chat/completions").mock(
            return_value=httpx.Response(200, json={"choices": "nope"})
        )

        with pytest.raises(SerializationError) as exc_info:
            await _send_chat(client)

        assert exc_info.value.target_type.__name__ == "ChatCompletionResponse"

    @pytest.mark.asyncio
    @respx.mock
    async def test_send_json_returns_parsed_body(
        self, client: OpenRouterClient
    ) -> None:
        respx.delete(f"{BASE_URL}/keys/k1").mock(
            return_value=httpx.Response(200, json={"data": {"deleted": True}})
        )

        body = await client.http.send_json("keys/k1", method="DELETE")

        assert body == {"data": {"deleted": True}}

    @pytest.mark.asyncio
    @respx.mock
    async def test_send_json_empty_body(self, client: OpenRouterClient) -> None:
        respx.delete(f"{BASE_URL}/keys/k1").mock(return_value=httpx.Response(204))

        assert await client.http.send_json("keys/k1", method="DELETE") is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_send_json_invalid_body(self, client: OpenRouterClient) -> None:
        respx.get(f"{BASE_URL}/credits").mock(
            return_value=httpx.Response(200, text="<html>")
        )

        with pytest.raises(SerializationError) as exc_info:
            await client.http.send_json("credits", method="GET")

        assert exc_info.value.response_content == "<html>"


class TestUnwrapData:
    """Tests for the data envelope helper."""

    def test_unwraps_and_merges_siblings(self) -> None:
        body = {"data": {"id": "k1", "name": "ci"}, "key": "sk-or-v1-secret"}

        assert unwrap_data(body) == {"id": "k1", "name": "ci", "key": "sk-or-v1-secret"}

    def test_inner_fields_win(self) -> None:
        assert unwrap_data({"data": {"id": "inner"}, "id": "outer"}) == {"id": "inner"}

    def test_plain_body_unchanged(self) -> None:
        body = {"id": "gen-1"}

        assert unwrap_data(body) is body

    def test_list_data_unchanged(self) -> None:
        body = {"data": [1, 2]}

        assert unwrap_data(body) is body
