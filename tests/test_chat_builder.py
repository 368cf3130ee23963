"""Tests for ChatRequestBuilder.

Covers eager argument validation, ordering and last-write-wins semantics,
build() immutability and the serialized wire shape.
"""

from dataclasses import dataclass

import pytest
from pydantic import ValidationError

from openrouter_client import (
    ChatRequestBuilder,
    ConfigurationError,
    InvalidArgumentError,
    Message,
    MessageContent,
    Tool,
    ToolChoice,
)
from openrouter_client.http import serialize_payload
from openrouter_client.models import ProviderPreferences


def _builder() -> ChatRequestBuilder:
    return ChatRequestBuilder().with_model("openai/gpt-4o-mini").with_user_message("Hi")


# =============================================================================
# build()
# =============================================================================


class TestBuild:
    """Tests for terminal build()."""

    def test_minimal_request(self) -> None:
        """A model and one message are enough."""
        request = _builder().build()

        assert request.model == "openai/gpt-4o-mini"
        assert [m.role for m in request.messages] == ["user"]
        assert request.temperature is None

    def test_missing_model(self) -> None:
        with pytest.raises(InvalidArgumentError) as exc_info:
            ChatRequestBuilder().with_user_message("Hi").build()

        assert exc_info.value.argument == "model"

    def test_missing_messages(self) -> None:
        with pytest.raises(InvalidArgumentError) as exc_info:
            ChatRequestBuilder().with_model("m").build()

        assert exc_info.value.argument == "messages"

    def test_invalid_argument_is_value_error(self) -> None:
        """Callers catching ValueError also catch builder errors."""
        with pytest.raises(ValueError):
            ChatRequestBuilder().build()

    def test_request_is_immutable(self) -> None:
        request = _builder().build()

        with pytest.raises(ValidationError):
            request.temperature = 1.0  # type: ignore[misc]

    def test_request_containers_are_immutable(self) -> None:
        request = _builder().with_stop("A", "B").with_transforms("middle-out").build()

        with pytest.raises(AttributeError):
            request.messages.append(Message.user("injected"))  # type: ignore[attr-defined]
        with pytest.raises(TypeError):
            request.stop[0] = "C"  # type: ignore[index]
        assert isinstance(request.transforms, tuple)
        assert len(request.messages) == 1

    def test_caller_list_changes_do_not_leak(self) -> None:
        messages = [Message.user("Hi")]
        request = ChatRequestBuilder().with_model("m").with_messages(messages).build()

        messages.append(Message.user("later"))

        assert len(request.messages) == 1

    def test_builder_changes_do_not_affect_built_request(self) -> None:
        builder = _builder()
        first = builder.build()

        builder.with_assistant_message("Hello").with_temperature(0.5)

        assert len(first.messages) == 1
        assert first.temperature is None
        assert len(builder.build().messages) == 2


# =============================================================================
# Messages
# =============================================================================


class TestMessages:
    """Tests for message setters."""

    def test_messages_preserve_call_order(self) -> None:
        request = (
            ChatRequestBuilder()
            .with_model("m")
            .with_system_message("You are terse.")
            .with_user_message("Q1")
            .with_assistant_message("A1")
            .with_user_message("Q2")
            .build()
        )

        assert [(m.role, m.content) for m in request.messages] == [
            ("system", "You are terse."),
            ("user", "Q1"),
            ("assistant", "A1"),
            ("user", "Q2"),
        ]

    def test_with_messages_replaces_previous(self) -> None:
        request = (
            _builder()
            .with_messages([Message.system("S"), Message.user("U")])
            .build()
        )

        assert [m.content for m in request.messages] == ["S", "U"]

    @pytest.mark.parametrize("content", ["", "   ", None])
    def test_blank_content_rejected(self, content) -> None:
        with pytest.raises(InvalidArgumentError):
            ChatRequestBuilder().with_user_message(content)

    def test_multimodal_user_message(self) -> None:
        request = (
            ChatRequestBuilder()
            .with_model("m")
            .with_user_message(
                [
                    MessageContent.from_text("What is in this image?"),
                    MessageContent.from_image_url("https://example.com/cat.png"),
                ]
            )
            .build()
        )

        body = serialize_payload(request)
        parts = body["messages"][0]["content"]
        assert parts[0] == {"type": "text", "text": "What is in this image?"}
        assert parts[1] == {
            "type": "image_url",
            "image_url": {"url": "https://example.com/cat.png"},
        }

    def test_document_part(self) -> None:
        request = (
            ChatRequestBuilder()
            .with_model("m")
            .with_user_message(
                [
                    MessageContent.from_text("Summarize this report."),
                    MessageContent.from_document_url(
                        "https://example.com/report.pdf", "application/pdf"
                    ),
                ]
            )
            .build()
        )

        parts = serialize_payload(request)["messages"][0]["content"]
        assert parts[1] == {
            "type": "document_url",
            "document_url": {
                "url": "https://example.com/report.pdf",
                "type": "application/pdf",
            },
        }

    def test_empty_content_parts_rejected(self) -> None:
        with pytest.raises(InvalidArgumentError):
            ChatRequestBuilder().with_user_message([])

    @pytest.mark.parametrize(
        "parts",
        [[{"type": "image_url"}], ["plain text"], [MessageContent.from_text("ok"), 42]],
    )
    def test_content_parts_must_be_message_content(self, parts) -> None:
        with pytest.raises(InvalidArgumentError) as exc_info:
            ChatRequestBuilder().with_user_message(parts)

        assert exc_info.value.argument == "content"

    def test_tool_message_requires_call_id(self) -> None:
        with pytest.raises(InvalidArgumentError):
            ChatRequestBuilder().with_tool_message("42", "")

    def test_tool_message(self) -> None:
        request = _builder().with_tool_message('{"temp": 21}', "call_1").build()

        assert request.messages[-1].role == "tool"
        assert request.messages[-1].tool_call_id == "call_1"


# =============================================================================
# Sampling parameters
# =============================================================================


class TestSamplingParameters:
    """Tests for range-checked numeric setters."""

    @pytest.mark.parametrize(
        ("method", "value"),
        [
            ("with_temperature", 0.0),
            ("with_temperature", 2.0),
            ("with_top_p", 1.0),
            ("with_max_tokens", 1),
            ("with_top_k", 1),
            ("with_frequency_penalty", -2.0),
            ("with_presence_penalty", 2.0),
            ("with_repetition_penalty", 0.0),
            ("with_min_p", 0.5),
            ("with_top_a", 1.0),
        ],
    )
    def test_boundary_values_accepted(self, method: str, value: float) -> None:
        builder = getattr(_builder(), method)(value)

        assert isinstance(builder, ChatRequestBuilder)

    @pytest.mark.parametrize(
        ("method", "value"),
        [
            ("with_temperature", -0.1),
            ("with_temperature", 2.5),
            ("with_top_p", 1.1),
            ("with_max_tokens", 0),
            ("with_top_k", 0),
            ("with_frequency_penalty", -2.1),
            ("with_presence_penalty", 2.1),
            ("with_repetition_penalty", 2.1),
            ("with_min_p", -0.1),
            ("with_top_a", 1.5),
        ],
    )
    def test_out_of_range_rejected(self, method: str, value: float) -> None:
        with pytest.raises(InvalidArgumentError):
            getattr(_builder(), method)(value)

    def test_max_tokens_must_be_integer(self) -> None:
        with pytest.raises(InvalidArgumentError):
            _builder().with_max_tokens(10.5)  # type: ignore[arg-type]

    def test_last_write_wins(self) -> None:
        request = _builder().with_temperature(0.1).with_temperature(0.9).build()

        assert request.temperature == 0.9

    def test_failed_setter_keeps_previous_value(self) -> None:
        builder = _builder().with_temperature(0.3)

        with pytest.raises(InvalidArgumentError):
            builder.with_temperature(3.0)

        assert builder.build().temperature == 0.3

    def test_stop_single_and_multiple(self) -> None:
        assert _builder().with_stop("END").build().stop == "END"
        assert _builder().with_stop("A", "B").build().stop == ("A", "B")

    def test_stop_requires_a_sequence(self) -> None:
        with pytest.raises(InvalidArgumentError):
            _builder().with_stop()

    def test_logit_bias_range(self) -> None:
        request = _builder().with_logit_bias({50256: -100}).build()

        assert request.logit_bias == {"50256": -100}
        with pytest.raises(InvalidArgumentError):
            _builder().with_logit_bias({1: 101})

    @pytest.mark.parametrize(
        "logit_bias", [{1: "x"}, {1: None}, {1: True}, {None: 5}, [(1, 5)]]
    )
    def test_logit_bias_types(self, logit_bias) -> None:
        with pytest.raises(InvalidArgumentError) as exc_info:
            _builder().with_logit_bias(logit_bias)

        assert exc_info.value.argument == "logit_bias"

    def test_logprobs(self) -> None:
        request = _builder().with_logprobs(True, top_logprobs=5).build()

        assert request.logprobs is True
        assert request.top_logprobs == 5


# =============================================================================
# Tools, formats and OpenRouter extensions
# =============================================================================


@dataclass
class WeatherReport:
    city: str
    temperature: float
    conditions: list[str]
    note: str | None = None


class TestExtensions:
    """Tests for tools, structured output and routing options."""

    def test_tools_and_choice_serialization(self) -> None:
        tool = Tool.from_function(
            "get_weather",
            "Current weather for a city",
            {"type": "object", "properties": {"city": {"type": "string"}}},
        )
        request = (
            _builder()
            .with_tools([tool])
            .with_tool_choice(ToolChoice.function("get_weather"))
            .build()
        )

        body = serialize_payload(request)
        assert body["tools"][0]["function"]["name"] == "get_weather"
        assert body["tool_choice"] == {
            "type": "function",
            "function": {"name": "get_weather"},
        }

    def test_unknown_tool_choice_rejected(self) -> None:
        with pytest.raises(InvalidArgumentError):
            _builder().with_tool_choice("sometimes")

    def test_tools_must_be_tool_instances(self) -> None:
        """Bad elements fail at the setter, not at build()."""
        with pytest.raises(InvalidArgumentError) as exc_info:
            _builder().with_tools(["not a tool"])

        assert exc_info.value.argument == "tools"

    def test_tool_choice_dict(self) -> None:
        tool = Tool.from_function("lookup", "Look something up", {"type": "object"})
        request = (
            _builder()
            .with_tools([tool])
            .with_tool_choice({"type": "function", "function": {"name": "lookup"}})
            .build()
        )

        assert request.tool_choice == {"type": "function", "function": {"name": "lookup"}}

    @pytest.mark.parametrize(
        "choice",
        [
            {},
            {"type": "function"},
            {"type": "function", "function": {"name": ""}},
            {"type": "tool", "function": {"name": "lookup"}},
            {"function": "lookup"},
        ],
    )
    def test_malformed_tool_choice_dict_rejected(self, choice) -> None:
        with pytest.raises(InvalidArgumentError) as exc_info:
            _builder().with_tool_choice(choice)

        assert exc_info.value.argument == "tool_choice"

    def test_structured_output_from_type(self) -> None:
        request = _builder().with_structured_output(WeatherReport).build()

        body = serialize_payload(request)
        response_format = body["response_format"]
        assert response_format["type"] == "json_schema"
        assert response_format["json_schema"]["name"] == "WeatherReport"
        assert response_format["json_schema"]["strict"] is True
        schema = response_format["json_schema"]["schema"]
        assert schema["properties"]["conditions"] == {"type": "array"}
        assert schema["required"] == ["city", "temperature", "conditions"]

    def test_structured_output_from_dict(self) -> None:
        schema = {"type": "object", "properties": {"answer": {"type": "string"}}}
        request = (
            _builder().with_structured_output(schema, name="answer", strict=False).build()
        )

        json_schema = serialize_payload(request)["response_format"]["json_schema"]
        assert json_schema == {"name": "answer", "strict": False, "schema": schema}

    def test_json_mode(self) -> None:
        body = serialize_payload(_builder().with_json_mode().build())

        assert body["response_format"] == {"type": "json_object"}

    def test_provider_routing_kwargs(self) -> None:
        body = serialize_payload(
            _builder()
            .with_provider_routing(order=["OpenAI", "Azure"], allow_fallbacks=False)
            .build()
        )

        assert body["provider"] == {"order": ["OpenAI", "Azure"], "allow_fallbacks": False}

    def test_provider_routing_model(self) -> None:
        preferences = ProviderPreferences(sort="price", data_collection="deny")
        request = _builder().with_provider_routing(preferences).build()

        assert request.provider == preferences

    def test_provider_routing_invalid_option(self) -> None:
        with pytest.raises(InvalidArgumentError):
            _builder().with_provider_routing(sort="cheapest")

    def test_reasoning_usage_and_web_search(self) -> None:
        body = serialize_payload(
            _builder()
            .with_reasoning(effort="high", exclude=True)
            .with_usage_accounting()
            .with_web_search(max_results=3)
            .with_transforms("middle-out")
            .build()
        )

        assert body["reasoning"] == {"effort": "high", "exclude": True}
        assert body["usage"] == {"include": True}
        assert body["web_search"] == {"enabled": True, "max_results": 3}
        assert body["transforms"] == ["middle-out"]

    def test_reasoning_defaults_to_enabled(self) -> None:
        body = serialize_payload(_builder().with_reasoning().build())

        assert body["reasoning"] == {"enabled": True}

    def test_unset_fields_are_omitted(self) -> None:
        body = serialize_payload(_builder().with_temperature(0.7).build())

        assert body == {
            "model": "openai/gpt-4o-mini",
            "messages": [{"role": "user", "content": "Hi"}],
            "temperature": 0.7,
        }


class TestUnboundBuilder:
    """A builder created without a service can build but not execute."""

    @pytest.mark.asyncio
    async def test_execute_requires_service(self) -> None:
        with pytest.raises(ConfigurationError):
            await _builder().execute()
