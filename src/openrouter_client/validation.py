"""Argument checks shared by the request builder and the chat facade."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, NamedTuple

from .exceptions import InvalidArgumentError

if TYPE_CHECKING:
    from .models import ChatCompletionRequest, CompletionRequest


class ParameterRange(NamedTuple):
    """Inclusive bounds for a sampling parameter; ``None`` means unbounded."""

    minimum: float | None
    maximum: float | None


PARAMETER_RANGES: dict[str, ParameterRange] = {
    "temperature": ParameterRange(0.0, 2.0),
    "max_tokens": ParameterRange(1, None),
    "top_p": ParameterRange(0.0, 1.0),
    "top_k": ParameterRange(1, None),
    "frequency_penalty": ParameterRange(-2.0, 2.0),
    "presence_penalty": ParameterRange(-2.0, 2.0),
    "repetition_penalty": ParameterRange(0.0, 2.0),
    "min_p": ParameterRange(0.0, 1.0),
    "top_a": ParameterRange(0.0, 1.0),
    "top_logprobs": ParameterRange(0, 20),
}

INTEGER_PARAMETERS = frozenset({"max_tokens", "top_k", "top_logprobs"})


def _describe(bounds: ParameterRange) -> str:
    if bounds.maximum is None:
        return f"at least {bounds.minimum}"
    return f"between {bounds.minimum} and {bounds.maximum}"


def check_range(name: str, value: Any) -> None:
    """Raise ``InvalidArgumentError`` if ``value`` is outside the range for ``name``.

    ``None`` is accepted (the parameter is simply not sent).
    """
    if value is None:
        return
    bounds = PARAMETER_RANGES[name]
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise InvalidArgumentError(
            f"{name} must be a number, got {type(value).__name__}", argument=name
        )
    if name in INTEGER_PARAMETERS and not isinstance(value, int):
        raise InvalidArgumentError(f"{name} must be an integer", argument=name)
    if (bounds.minimum is not None and value < bounds.minimum) or (
        bounds.maximum is not None and value > bounds.maximum
    ):
        raise InvalidArgumentError(
            f"{name} must be {_describe(bounds)}, got {value}", argument=name
        )


def require_text(name: str, value: str | None) -> str:
    """Return ``value`` if it is a non-blank string, else raise."""
    if value is None or not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError(f"{name} must be a non-empty string", argument=name)
    return value


def validate_chat_request(request: ChatCompletionRequest) -> None:
    """Check every cross-field and range invariant of a chat request.

    Raises:
        InvalidArgumentError: On the first violated invariant
    """
    require_text("model", request.model)
    if not request.messages:
        raise InvalidArgumentError(
            "At least one message is required", argument="messages"
        )
    for name in PARAMETER_RANGES:
        check_range(name, getattr(request, name, None))
    if request.top_logprobs is not None and not request.logprobs:
        raise InvalidArgumentError(
            "top_logprobs requires logprobs to be enabled", argument="top_logprobs"
        )
    if request.tool_choice not in (None, "none") and not request.tools:
        raise InvalidArgumentError(
            "tool_choice requires at least one tool", argument="tool_choice"
        )


def validate_completion_request(request: CompletionRequest) -> None:
    """Check the invariants of a legacy text completion request."""
    require_text("model", request.model)
    require_text("prompt", request.prompt)
    for name in PARAMETER_RANGES:
        if name in type(request).model_fields:
            check_range(name, getattr(request, name))
