"""Response bodies returned by the OpenRouter API.

Response models ignore unknown fields so new server-side additions do not
break deserialization.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from .common import ToolCall, Usage

_LENIENT = ConfigDict(extra="ignore", populate_by_name=True)


# Chat completions


class ResponseMessage(BaseModel):
    """Assistant message inside a completion choice."""

    model_config = _LENIENT

    role: str = "assistant"
    content: str | None = None
    reasoning: str | None = None
    refusal: str | None = None
    tool_calls: list[ToolCall] | None = None


class Choice(BaseModel):
    model_config = _LENIENT

    index: int = 0
    message: ResponseMessage = Field(default_factory=ResponseMessage)
    logprobs: dict[str, Any] | None = None
    finish_reason: str | None = None


class ChatCompletionResponse(BaseModel):
    """Body of a non-streaming ``POST /chat/completions``."""

    model_config = _LENIENT

    id: str
    object: str = "chat.completion"
    created: int = 0
    model: str = ""
    choices: list[Choice] = Field(default_factory=list)
    usage: Usage | None = None
    system_fingerprint: str | None = None
    provider: str | None = None

    @property
    def first_choice_content(self) -> str | None:
        return self.choices[0].message.content if self.choices else None

    @property
    def first_choice_tool_calls(self) -> list[ToolCall]:
        if not self.choices:
            return []
        return self.choices[0].message.tool_calls or []

    @property
    def created_at(self) -> datetime:
        return datetime.fromtimestamp(self.created, tz=UTC)


class ChunkFunction(BaseModel):
    model_config = _LENIENT

    name: str | None = None
    arguments: str | None = None


class ChunkToolCall(BaseModel):
    """Partial tool call; fragments share ``index`` across chunks."""

    model_config = _LENIENT

    index: int = 0
    id: str | None = None
    type: str | None = None
    function: ChunkFunction | None = None


class ChunkDelta(BaseModel):
    model_config = _LENIENT

    role: str | None = None
    content: str | None = None
    reasoning: str | None = None
    tool_calls: list[ChunkToolCall] | None = None


class ChunkChoice(BaseModel):
    model_config = _LENIENT

    index: int = 0
    delta: ChunkDelta = Field(default_factory=ChunkDelta)
    logprobs: dict[str, Any] | None = None
    finish_reason: str | None = None


class ChatCompletionChunk(BaseModel):
    """One SSE frame of a streaming chat completion."""

    model_config = _LENIENT

    id: str = ""
    object: str = "chat.completion.chunk"
    created: int = 0
    model: str = ""
    choices: list[ChunkChoice] = Field(default_factory=list)
    usage: Usage | None = None
    system_fingerprint: str | None = None
    provider: str | None = None

    @property
    def content(self) -> str:
        """Text carried by the first choice's delta, or an empty string."""
        if not self.choices:
            return ""
        return self.choices[0].delta.content or ""

    @property
    def is_done(self) -> bool:
        return any(c.finish_reason is not None for c in self.choices)


# Legacy text completions


class CompletionChoice(BaseModel):
    model_config = _LENIENT

    index: int = 0
    text: str = ""
    logprobs: dict[str, Any] | None = None
    finish_reason: str | None = None


class CompletionResponse(BaseModel):
    """Body of a non-streaming ``POST /completions``."""

    model_config = _LENIENT

    id: str
    object: str = "text_completion"
    created: int = 0
    model: str = ""
    choices: list[CompletionChoice] = Field(default_factory=list)
    usage: Usage | None = None
    provider: str | None = None

    @property
    def text(self) -> str | None:
        return self.choices[0].text if self.choices else None


class CompletionChunk(BaseModel):
    """One SSE frame of a streaming ``/completions`` call."""

    model_config = _LENIENT

    id: str = ""
    object: str = "text_completion"
    created: int = 0
    model: str = ""
    choices: list[CompletionChoice] = Field(default_factory=list)
    usage: Usage | None = None

    @property
    def text(self) -> str:
        return self.choices[0].text if self.choices else ""


# Models


class ModelArchitecture(BaseModel):
    model_config = _LENIENT

    modality: str | None = None
    input_modalities: list[str] | None = None
    output_modalities: list[str] | None = None
    tokenizer: str | None = None
    instruct_type: str | None = None


class ModelPricing(BaseModel):
    """Per-unit prices in USD, as decimal strings."""

    model_config = _LENIENT

    prompt: str | float | None = None
    completion: str | float | None = None
    request: str | float | None = None
    image: str | float | None = None


class ModelProvider(BaseModel):
    model_config = _LENIENT

    context_length: int | None = None
    max_completion_tokens: int | None = None
    is_moderated: bool | None = None


class PerRequestLimits(BaseModel):
    model_config = _LENIENT

    prompt_tokens: int | str | None = None
    completion_tokens: int | str | None = None


class Model(BaseModel):
    """A model listed by ``GET /models``."""

    model_config = _LENIENT

    id: str
    name: str = ""
    created: int | None = None
    description: str | None = None
    context_length: int | None = None
    architecture: ModelArchitecture | None = None
    pricing: ModelPricing | None = None
    top_provider: ModelProvider | None = None
    per_request_limits: PerRequestLimits | None = None
    supported_parameters: list[str] = Field(default_factory=list)


class ModelsResponse(BaseModel):
    model_config = _LENIENT

    data: list[Model] = Field(default_factory=list)


class ModelEndpoint(BaseModel):
    """One provider endpoint serving a model."""

    model_config = _LENIENT

    name: str | None = None
    provider_name: str | None = None
    context_length: int | None = None
    pricing: ModelPricing | None = None
    quantization: str | None = None
    max_completion_tokens: int | None = None
    max_prompt_tokens: int | None = None
    supported_parameters: list[str] = Field(default_factory=list)
    status: int | str | None = None


class ModelEndpoints(BaseModel):
    """Body of ``GET /models/{author}/{slug}/endpoints`` (unwrapped)."""

    model_config = _LENIENT

    id: str
    name: str = ""
    created: int | None = None
    description: str | None = None
    architecture: ModelArchitecture | None = None
    endpoints: list[ModelEndpoint] = Field(default_factory=list)


# Credits and keys


class RateLimit(BaseModel):
    model_config = _LENIENT

    requests: int | None = None
    interval: str | None = None


class Credits(BaseModel):
    """Credit balance and limits of the calling key."""

    model_config = _LENIENT

    label: str | None = None
    usage: float | None = None
    limit: float | None = None
    is_free_tier: bool | None = None
    rate_limit: RateLimit | None = None
    total_credits: float | None = None
    total_usage: float | None = None

    @property
    def remaining(self) -> float | None:
        if self.total_credits is not None and self.total_usage is not None:
            return self.total_credits - self.total_usage
        if self.limit is not None and self.usage is not None:
            return self.limit - self.usage
        return None


class CreditsResponse(BaseModel):
    model_config = _LENIENT

    data: Credits = Field(default_factory=Credits)


class KeyUsage(BaseModel):
    model_config = _LENIENT

    credits: float | None = None
    requests: int | None = None


class ApiKey(BaseModel):
    """An API key as returned by the key management endpoints."""

    model_config = _LENIENT

    id: str | None = Field(
        default=None, validation_alias=AliasChoices("id", "hash")
    )
    name: str | None = None
    description: str | None = None
    key: str | None = None
    credit_limit: float | None = None
    request_limit: int | None = None
    usage: KeyUsage | float | None = None
    expires_at: datetime | None = None
    enabled: bool | None = None
    disabled: bool | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class KeysResponse(BaseModel):
    model_config = _LENIENT

    data: list[ApiKey] = Field(default_factory=list)


class CreateKeyResponse(BaseModel):
    """Result of ``POST /keys``; ``key`` is only shown once."""

    model_config = _LENIENT

    id: str | None = Field(
        default=None, validation_alias=AliasChoices("id", "hash")
    )
    name: str | None = None
    key: str
    description: str | None = None
    credit_limit: float | None = None
    request_limit: int | None = None
    expires_at: datetime | None = None
    enabled: bool | None = None
    created_at: datetime | None = None


class CurrentKey(BaseModel):
    """Details of the key used to authenticate (``GET /key``)."""

    model_config = _LENIENT

    label: str | None = None
    usage: float | None = None
    limit: float | None = None
    limit_remaining: float | None = None
    is_free_tier: bool | None = None
    is_provisioning_key: bool | None = None
    rate_limit: RateLimit | None = None


class CurrentKeyResponse(BaseModel):
    model_config = _LENIENT

    data: CurrentKey = Field(default_factory=CurrentKey)


# Generation metadata


class GenerationDetails(BaseModel):
    """Metadata and accounting for one generation (``GET /generation``)."""

    model_config = _LENIENT

    id: str
    model: str | None = None
    provider_name: str | None = Field(
        default=None, validation_alias=AliasChoices("provider_name", "provider")
    )
    status: str | None = None
    created_at: datetime | None = None
    streamed: bool | None = None
    cancelled: bool | None = None
    finish_reason: str | None = None
    tokens_prompt: int | None = None
    tokens_completion: int | None = None
    native_tokens_prompt: int | None = None
    native_tokens_completion: int | None = None
    native_tokens_reasoning: int | None = None
    total_cost: float | None = None
    cache_discount: float | None = None
    latency: float | None = None
    generation_time: float | None = None
    usage: Usage | None = None


# Auth


class AuthKeyExchangeResponse(BaseModel):
    model_config = _LENIENT

    key: str
    user_id: str | None = None


class PKCEChallenge(BaseModel):
    """A PKCE verifier and its derived challenge."""

    model_config = ConfigDict(frozen=True)

    code_verifier: str
    code_challenge: str
    method: str = "S256"


class AuthorizationUrl(BaseModel):
    """Authorization redirect URL and the values needed to finish the flow."""

    model_config = ConfigDict(frozen=True)

    url: str
    state: str
    challenge: PKCEChallenge


# Errors


class ErrorMetadata(BaseModel):
    model_config = ConfigDict(extra="allow")

    provider_name: str | None = None
    raw: Any = None
    flagged_input: str | None = None
    reasons: list[str] | None = None


class ErrorDetail(BaseModel):
    """The ``error`` object of an API failure body."""

    model_config = _LENIENT

    message: str | None = None
    type: str | None = None
    code: str | int | None = None
    metadata: ErrorMetadata | None = None
    retry_after: float | None = None
    provider_name: str | None = None
    validation_errors: dict[str, list[str]] | None = None


class ErrorResponse(BaseModel):
    model_config = _LENIENT

    error: ErrorDetail


__all__ = [
    "ApiKey",
    "AuthKeyExchangeResponse",
    "AuthorizationUrl",
    "ChatCompletionChunk",
    "ChatCompletionResponse",
    "Choice",
    "ChunkChoice",
    "ChunkDelta",
    "ChunkFunction",
    "ChunkToolCall",
    "CompletionChoice",
    "CompletionChunk",
    "CompletionResponse",
    "CreateKeyResponse",
    "Credits",
    "CreditsResponse",
    "CurrentKey",
    "CurrentKeyResponse",
    "ErrorDetail",
    "ErrorMetadata",
    "ErrorResponse",
    "GenerationDetails",
    "KeyUsage",
    "KeysResponse",
    "Model",
    "ModelArchitecture",
    "ModelEndpoint",
    "ModelEndpoints",
    "ModelPricing",
    "ModelProvider",
    "ModelsResponse",
    "PKCEChallenge",
    "PerRequestLimits",
    "RateLimit",
    "ResponseMessage",
]
