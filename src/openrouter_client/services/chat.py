"""Chat completions: the fluent request builder and the chat facade."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterable
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from openrouter_client.exceptions import ConfigurationError, InvalidArgumentError
from openrouter_client.models import (
    ChatCompletionChunk,
    ChatCompletionRequest,
    ChatCompletionResponse,
    CompletionChunk,
    CompletionRequest,
    CompletionResponse,
    Message,
    MessageContent,
    ProviderPreferences,
    ReasoningConfig,
    ResponseFormat,
    Tool,
    ToolChoice,
    UsageConfig,
    WebSearchOptions,
)
from openrouter_client.schema import generate_json_schema
from openrouter_client.utils.logging import get_logger
from openrouter_client.validation import (
    check_range,
    require_text,
    validate_chat_request,
    validate_completion_request,
)

if TYPE_CHECKING:
    from openrouter_client.http import OpenRouterHttpClient

logger = get_logger(__name__)

CHAT_COMPLETIONS_ENDPOINT = "chat/completions"
COMPLETIONS_ENDPOINT = "completions"


class ChatRequestBuilder:
    """Fluent construction of a ``ChatCompletionRequest``.

    Every ``with_*`` method validates its argument immediately and returns
    the builder. Single-valued settings are last-write-wins; the
    ``with_*_message`` methods append in call order.

    Not safe for concurrent use; create one builder per request::

        response = await (
            client.chat.create_request()
            .with_model("openai/gpt-4o-mini")
            .with_system_message("Be brief.")
            .with_user_message("Hello")
            .with_temperature(0.2)
            .execute()
        )
    """

    def __init__(self, service: ChatService | None = None):
        self._service = service
        self._messages: list[Message] = []
        self._params: dict[str, Any] = {}

    # Model and messages

    def with_model(self, model_id: str) -> ChatRequestBuilder:
        self._params["model"] = require_text("model", model_id)
        return self

    def with_messages(self, messages: Iterable[Message]) -> ChatRequestBuilder:
        """Replace all messages added so far."""
        messages = list(messages)
        for message in messages:
            if not isinstance(message, Message):
                raise InvalidArgumentError(
                    f"Expected Message, got {type(message).__name__}",
                    argument="messages",
                )
        self._messages = messages
        return self

    def with_system_message(self, content: str) -> ChatRequestBuilder:
        self._messages.append(Message.system(require_text("content", content)))
        return self

    def with_user_message(
        self, content: str | Iterable[MessageContent]
    ) -> ChatRequestBuilder:
        """Append a user message with text or multimodal content parts."""
        if isinstance(content, str) or content is None:
            self._messages.append(Message.user(require_text("content", content)))
            return self
        parts = tuple(content)
        if not parts:
            raise InvalidArgumentError(
                "content must contain at least one part", argument="content"
            )
        for part in parts:
            if not isinstance(part, MessageContent):
                raise InvalidArgumentError(
                    f"Expected MessageContent, got {type(part).__name__}",
                    argument="content",
                )
        self._messages.append(Message.user(parts))
        return self

    def with_assistant_message(self, content: str) -> ChatRequestBuilder:
        self._messages.append(Message.assistant(require_text("content", content)))
        return self

    def with_tool_message(self, content: str, tool_call_id: str) -> ChatRequestBuilder:
        """Append the result of a tool call."""
        require_text("tool_call_id", tool_call_id)
        self._messages.append(
            Message.tool(require_text("content", content), tool_call_id)
        )
        return self

    # Tools and output format

    def with_tools(self, tools: Iterable[Tool]) -> ChatRequestBuilder:
        tools = tuple(tools)
        if not tools:
            raise InvalidArgumentError("tools must not be empty", argument="tools")
        for tool in tools:
            if not isinstance(tool, Tool):
                raise InvalidArgumentError(
                    f"Expected Tool, got {type(tool).__name__}", argument="tools"
                )
        self._params["tools"] = tools
        return self

    def with_tool_choice(
        self, choice: ToolChoice | str | dict[str, Any]
    ) -> ChatRequestBuilder:
        """Set ``tool_choice`` from a ``ToolChoice``, a mode name or a raw dict."""
        if isinstance(choice, ToolChoice):
            self._params["tool_choice"] = choice.to_request_value()
        elif isinstance(choice, str):
            if choice not in ("auto", "none", "required"):
                raise InvalidArgumentError(
                    f"Unknown tool choice '{choice}'", argument="tool_choice"
                )
            self._params["tool_choice"] = choice
        elif isinstance(choice, dict):
            function = choice.get("function")
            name = function.get("name") if isinstance(function, dict) else None
            if choice.get("type") != "function" or not isinstance(name, str) or not name:
                raise InvalidArgumentError(
                    'tool_choice dict must look like {"type": "function", '
                    '"function": {"name": ...}}',
                    argument="tool_choice",
                )
            self._params["tool_choice"] = ToolChoice.function(name).to_request_value()
        else:
            raise InvalidArgumentError(
                f"Unsupported tool choice type {type(choice).__name__}",
                argument="tool_choice",
            )
        return self

    def with_structured_output(
        self,
        schema: type | dict[str, Any],
        *,
        name: str | None = None,
        strict: bool = True,
    ) -> ChatRequestBuilder:
        """Request output matching a JSON Schema.

        Args:
            schema: An explicit JSON Schema dict, or a class whose annotated
                fields describe the expected object
            name: Schema name; defaults to the class name (or ``response``)
            strict: Ask the provider to enforce the schema exactly
        """
        if isinstance(schema, type):
            schema_dict = generate_json_schema(schema)
            schema_name = name or schema.__name__
        elif isinstance(schema, dict):
            if not schema:
                raise InvalidArgumentError("schema must not be empty", argument="schema")
            schema_dict = schema
            schema_name = name or "response"
        else:
            raise InvalidArgumentError(
                f"schema must be a class or dict, got {type(schema).__name__}",
                argument="schema",
            )
        self._params["response_format"] = ResponseFormat.for_json_schema(
            schema_name, schema_dict, strict=strict
        )
        return self

    def with_json_mode(self) -> ChatRequestBuilder:
        """Ask for any syntactically valid JSON object."""
        self._params["response_format"] = ResponseFormat.for_json_object()
        return self

    # Routing and OpenRouter extensions

    def with_provider_routing(
        self, preferences: ProviderPreferences | None = None, **options: Any
    ) -> ChatRequestBuilder:
        """Set provider preferences, either as a model or as keyword options."""
        self._params["provider"] = self._as_model(
            ProviderPreferences, preferences, options, "provider"
        )
        return self

    def with_reasoning(
        self, config: ReasoningConfig | None = None, **options: Any
    ) -> ChatRequestBuilder:
        """Configure reasoning tokens, e.g. ``with_reasoning(effort="high")``."""
        if config is None and not options:
            options = {"enabled": True}
        self._params["reasoning"] = self._as_model(
            ReasoningConfig, config, options, "reasoning"
        )
        return self

    def with_usage_accounting(self, enabled: bool = True) -> ChatRequestBuilder:
        self._params["usage"] = UsageConfig(include=enabled)
        return self

    def with_web_search(
        self,
        enabled: bool = True,
        *,
        max_results: int | None = None,
        search_depth: str | None = None,
    ) -> ChatRequestBuilder:
        self._params["web_search"] = self._as_model(
            WebSearchOptions,
            None,
            {
                "enabled": enabled,
                "max_results": max_results,
                "search_depth": search_depth,
            },
            "web_search",
        )
        return self

    def with_transforms(self, *transforms: str) -> ChatRequestBuilder:
        for transform in transforms:
            require_text("transforms", transform)
        self._params["transforms"] = transforms
        return self

    def with_streaming(self, enabled: bool = True) -> ChatRequestBuilder:
        self._params["stream"] = enabled
        return self

    # Sampling parameters

    def _set_ranged(self, name: str, value: Any) -> ChatRequestBuilder:
        if value is None:
            raise InvalidArgumentError(f"{name} must not be None", argument=name)
        check_range(name, value)
        self._params[name] = value
        return self

    def with_temperature(self, temperature: float) -> ChatRequestBuilder:
        return self._set_ranged("temperature", temperature)

    def with_max_tokens(self, max_tokens: int) -> ChatRequestBuilder:
        return self._set_ranged("max_tokens", max_tokens)

    def with_top_p(self, top_p: float) -> ChatRequestBuilder:
        return self._set_ranged("top_p", top_p)

    def with_top_k(self, top_k: int) -> ChatRequestBuilder:
        return self._set_ranged("top_k", top_k)

    def with_frequency_penalty(self, penalty: float) -> ChatRequestBuilder:
        return self._set_ranged("frequency_penalty", penalty)

    def with_presence_penalty(self, penalty: float) -> ChatRequestBuilder:
        return self._set_ranged("presence_penalty", penalty)

    def with_repetition_penalty(self, penalty: float) -> ChatRequestBuilder:
        return self._set_ranged("repetition_penalty", penalty)

    def with_min_p(self, min_p: float) -> ChatRequestBuilder:
        return self._set_ranged("min_p", min_p)

    def with_top_a(self, top_a: float) -> ChatRequestBuilder:
        return self._set_ranged("top_a", top_a)

    def with_seed(self, seed: int) -> ChatRequestBuilder:
        if isinstance(seed, bool) or not isinstance(seed, int):
            raise InvalidArgumentError("seed must be an integer", argument="seed")
        self._params["seed"] = seed
        return self

    def with_logit_bias(self, logit_bias: dict[str | int, float]) -> ChatRequestBuilder:
        """Bias token ids by a value in [-100, 100]."""
        if not isinstance(logit_bias, dict):
            raise InvalidArgumentError(
                "logit_bias must be a dict of token id to bias",
                argument="logit_bias",
            )
        bias: dict[str, float] = {}
        for token, value in logit_bias.items():
            if isinstance(token, bool) or not isinstance(token, (str, int)):
                raise InvalidArgumentError(
                    f"logit bias token {token!r} must be a token id",
                    argument="logit_bias",
                )
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidArgumentError(
                    f"logit bias for token {token} must be a number",
                    argument="logit_bias",
                )
            if not -100 <= value <= 100:
                raise InvalidArgumentError(
                    f"logit bias for token {token} must be between -100 and 100",
                    argument="logit_bias",
                )
            bias[str(token)] = value
        self._params["logit_bias"] = bias
        return self

    def with_logprobs(
        self, enabled: bool = True, top_logprobs: int | None = None
    ) -> ChatRequestBuilder:
        check_range("top_logprobs", top_logprobs)
        self._params["logprobs"] = enabled
        self._params["top_logprobs"] = top_logprobs
        return self

    def with_stop(self, *sequences: str) -> ChatRequestBuilder:
        """Stop generation at any of the given sequences."""
        if not sequences:
            raise InvalidArgumentError(
                "At least one stop sequence is required", argument="stop"
            )
        for sequence in sequences:
            if not isinstance(sequence, str) or not sequence:
                raise InvalidArgumentError(
                    "stop sequences must be non-empty strings", argument="stop"
                )
        self._params["stop"] = sequences[0] if len(sequences) == 1 else sequences
        return self

    # Terminal operations

    def build(self) -> ChatCompletionRequest:
        """Return an immutable request from the accumulated state.

        Raises:
            InvalidArgumentError: If no model is set or no message was added
        """
        if not self._params.get("model"):
            raise InvalidArgumentError("Model is required", argument="model")
        if not self._messages:
            raise InvalidArgumentError(
                "At least one message is required", argument="messages"
            )
        try:
            return ChatCompletionRequest(messages=tuple(self._messages), **self._params)
        except ValidationError as e:
            error = e.errors()[0]
            argument = str(error["loc"][0]) if error["loc"] else "request"
            raise InvalidArgumentError(
                f"Invalid {argument}: {error['msg']}", argument=argument
            ) from e

    async def execute(self) -> ChatCompletionResponse:
        """Build the request and send it through the bound ``ChatService``."""
        return await self._require_service().create(self.build())

    def execute_stream(self) -> AsyncIterator[ChatCompletionChunk]:
        """Build the request and stream it through the bound ``ChatService``.

        Use with ``contextlib.aclosing`` to release the response on an early
        ``break``.
        """
        return self._require_service().create_stream(self.build())

    def _require_service(self) -> ChatService:
        if self._service is None:
            raise ConfigurationError(
                "This builder is not bound to a ChatService",
                suggestion="Create builders with client.chat.create_request().",
            )
        return self._service

    @staticmethod
    def _as_model(
        model_type: type[Any], value: Any, options: dict[str, Any], argument: str
    ) -> Any:
        if value is not None:
            if not isinstance(value, model_type):
                raise InvalidArgumentError(
                    f"Expected {model_type.__name__}, got {type(value).__name__}",
                    argument=argument,
                )
            if not options:
                return value
            options = {**value.model_dump(exclude_none=True), **options}
        try:
            return model_type(**{k: v for k, v in options.items() if v is not None})
        except ValidationError as e:
            raise InvalidArgumentError(
                f"Invalid {argument} options: {e.errors()[0]['msg']}",
                argument=argument,
            ) from e


class ChatService:
    """Facade for ``/chat/completions`` and the legacy ``/completions``.

    The single validation point for requests before dispatch.
    """

    def __init__(self, http_client: OpenRouterHttpClient):
        self._http = http_client

    def create_request(self) -> ChatRequestBuilder:
        """Return a fresh builder bound to this service."""
        return ChatRequestBuilder(self)

    async def create(self, request: ChatCompletionRequest) -> ChatCompletionResponse:
        """Send a non-streaming chat completion.

        Raises:
            InvalidArgumentError: If the request violates an invariant
        """
        validate_chat_request(request)
        if request.stream:
            request = request.model_copy(update={"stream": False})
        logger.debug(
            "chat_completion_requested",
            model=request.model,
            messages=len(request.messages),
            tools=len(request.tools or []),
        )
        return await self._http.send(
            CHAT_COMPLETIONS_ENDPOINT, request, response_model=ChatCompletionResponse
        )

    def create_stream(
        self, request: ChatCompletionRequest
    ) -> AsyncIterator[ChatCompletionChunk]:
        """Stream a chat completion; ``stream`` is forced on.

        Validation happens immediately; the request is sent when iteration
        starts. Wrap the result in ``contextlib.aclosing`` when the consumer
        may stop early, so the response is released on ``break``.
        """
        validate_chat_request(request)
        if not request.stream:
            request = request.model_copy(update={"stream": True})
        logger.debug(
            "chat_completion_stream_requested",
            model=request.model,
            messages=len(request.messages),
        )
        return self._http.stream(
            CHAT_COMPLETIONS_ENDPOINT, request, chunk_model=ChatCompletionChunk
        )

    async def create_completion(self, request: CompletionRequest) -> CompletionResponse:
        """Send a legacy text completion."""
        validate_completion_request(request)
        if request.stream:
            request = request.model_copy(update={"stream": False})
        return await self._http.send(
            COMPLETIONS_ENDPOINT, request, response_model=CompletionResponse
        )

    def create_completion_stream(
        self, request: CompletionRequest
    ) -> AsyncIterator[CompletionChunk]:
        """Stream a legacy text completion; see ``create_stream`` on early exit."""
        validate_completion_request(request)
        if not request.stream:
            request = request.model_copy(update={"stream": True})
        return self._http.stream(
            COMPLETIONS_ENDPOINT, request, chunk_model=CompletionChunk
        )
