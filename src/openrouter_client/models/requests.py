"""Request bodies sent to the OpenRouter API.

Request models are frozen; serialize them with
``model_dump(mode="json", exclude_none=True, by_alias=True)``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .common import Message, Tool

_FROZEN = ConfigDict(frozen=True, populate_by_name=True)


class JsonSchemaFormat(BaseModel):
    """Named JSON Schema for structured outputs."""

    model_config = _FROZEN

    name: str = Field(min_length=1)
    strict: bool = True
    schema_: dict[str, Any] = Field(alias="schema")


class ResponseFormat(BaseModel):
    """Requested output format: free text, any JSON object, or a schema."""

    model_config = _FROZEN

    type: Literal["text", "json_object", "json_schema"] = "text"
    json_schema: JsonSchemaFormat | None = None

    @classmethod
    def for_text(cls) -> ResponseFormat:
        return cls(type="text")

    @classmethod
    def for_json_object(cls) -> ResponseFormat:
        return cls(type="json_object")

    @classmethod
    def for_json_schema(
        cls, name: str, schema: dict[str, Any], strict: bool = True
    ) -> ResponseFormat:
        return cls(
            type="json_schema",
            json_schema=JsonSchemaFormat(name=name, strict=strict, schema=schema),
        )


class ProviderPreferences(BaseModel):
    """Provider routing preferences."""

    model_config = _FROZEN

    order: tuple[str, ...] | None = Field(
        default=None, description="Providers to try first"
    )
    allow_fallbacks: bool | None = None
    require_parameters: bool | None = Field(
        default=None, description="Only use providers supporting every parameter"
    )
    data_collection: Literal["allow", "deny"] | None = None
    only: tuple[str, ...] | None = None
    ignore: tuple[str, ...] | None = None
    quantizations: tuple[str, ...] | None = None
    sort: Literal["price", "throughput", "latency"] | None = None
    max_price: dict[str, float] | None = Field(
        default=None, description="Price ceilings keyed by prompt/completion/request/image"
    )


class ReasoningConfig(BaseModel):
    """Reasoning-token controls."""

    model_config = _FROZEN

    effort: Literal["low", "medium", "high"] | None = None
    max_tokens: int | None = Field(default=None, ge=1)
    exclude: bool | None = Field(
        default=None, description="Use reasoning internally but omit it from the response"
    )
    enabled: bool | None = None


class UsageConfig(BaseModel):
    """Usage accounting controls."""

    model_config = _FROZEN

    include: bool = True


class WebSearchOptions(BaseModel):
    """Web search augmentation."""

    model_config = _FROZEN

    enabled: bool = True
    max_results: int | None = Field(default=None, ge=1)
    search_depth: Literal["basic", "advanced"] | None = None


class ChatCompletionRequest(BaseModel):
    """Body of ``POST /chat/completions``.

    Produced by ``ChatRequestBuilder.build()``; range invariants are checked
    by ``openrouter_client.validation.validate_chat_request``.
    """

    model_config = _FROZEN

    model: str
    messages: tuple[Message, ...]
    tools: tuple[Tool, ...] | None = None
    tool_choice: str | dict[str, Any] | None = None
    response_format: ResponseFormat | None = None
    stream: bool | None = None
    temperature: float | None = None
    max_tokens: int | None = None
    top_p: float | None = None
    top_k: int | None = None
    frequency_penalty: float | None = None
    presence_penalty: float | None = None
    repetition_penalty: float | None = None
    min_p: float | None = None
    top_a: float | None = None
    seed: int | None = None
    logit_bias: dict[str, float] | None = None
    logprobs: bool | None = None
    top_logprobs: int | None = None
    stop: str | tuple[str, ...] | None = None
    transforms: tuple[str, ...] | None = None
    provider: ProviderPreferences | None = None
    reasoning: ReasoningConfig | None = None
    usage: UsageConfig | None = None
    web_search: WebSearchOptions | None = None


class CompletionRequest(BaseModel):
    """Body of the legacy ``POST /completions`` text API."""

    model_config = _FROZEN

    model: str
    prompt: str
    stream: bool | None = None
    temperature: float | None = None
    max_tokens: int | None = None
    top_p: float | None = None
    top_k: int | None = None
    frequency_penalty: float | None = None
    presence_penalty: float | None = None
    repetition_penalty: float | None = None
    seed: int | None = None
    stop: str | tuple[str, ...] | None = None
    transforms: tuple[str, ...] | None = None
    provider: ProviderPreferences | None = None


class ModelsRequest(BaseModel):
    """Query filters for ``GET /models``."""

    model_config = _FROZEN

    supported_parameters: list[str] = Field(default_factory=list)
    order: str | None = None
    max_price: float | None = Field(default=None, ge=0)
    context_length: int | None = Field(default=None, ge=1)

    def to_query_params(self) -> list[tuple[str, str]]:
        """Render the filters as repeated query parameters."""
        params: list[tuple[str, str]] = [
            ("supported_parameters", p) for p in self.supported_parameters if p
        ]
        if self.order:
            params.append(("order", self.order))
        if self.max_price is not None:
            params.append(("max_price", str(self.max_price)))
        if self.context_length is not None:
            params.append(("context_length", str(self.context_length)))
        return params


class CreateKeyRequest(BaseModel):
    """Body of ``POST /keys``."""

    model_config = _FROZEN

    name: str = Field(min_length=1)
    description: str | None = None
    credit_limit: float | None = Field(default=None, ge=0)
    request_limit: int | None = Field(default=None, ge=0)
    expires_at: datetime | None = None


class UpdateKeyRequest(BaseModel):
    """Body of ``PATCH /keys/{id}``. Only set fields are sent."""

    model_config = _FROZEN

    name: str | None = None
    description: str | None = None
    credit_limit: float | None = Field(default=None, ge=0)
    request_limit: int | None = Field(default=None, ge=0)
    expires_at: datetime | None = None
    enabled: bool | None = None


class AuthKeyExchangeRequest(BaseModel):
    """Body of ``POST /auth/keys``."""

    model_config = _FROZEN

    code: str = Field(min_length=1)
    code_verifier: str | None = None
    code_challenge_method: Literal["S256", "plain"] | None = "S256"


class OAuthConfig(BaseModel):
    """Parameters of the OAuth PKCE authorization redirect."""

    client_id: str | None = None
    redirect_uri: str = Field(min_length=1)
    scopes: list[str] = Field(default_factory=list)
    state: str | None = Field(
        default=None, description="Opaque value echoed back; generated when omitted"
    )
