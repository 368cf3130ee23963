"""Message and tool shapes shared by requests and responses."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

Role = Literal["system", "user", "assistant", "tool"]


class ImageUrl(BaseModel):
    """Image reference inside a multimodal message part."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(min_length=1, description="HTTP(S) or data: URL of the image")
    detail: Literal["auto", "low", "high"] | None = Field(
        default=None, description="Requested image fidelity"
    )


class DocumentUrl(BaseModel):
    """Document reference inside a multimodal message part."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(min_length=1, description="URL of the document")
    type: str | None = Field(default=None, description="MIME type, e.g. application/pdf")


class MessageContent(BaseModel):
    """One part of a multimodal message."""

    model_config = ConfigDict(frozen=True)

    type: Literal["text", "image_url", "document_url"]
    text: str | None = None
    image_url: ImageUrl | None = None
    document_url: DocumentUrl | None = None

    @model_validator(mode="after")
    def _check_payload(self) -> MessageContent:
        if getattr(self, self.type) is None:
            msg = f"content part of type '{self.type}' requires the '{self.type}' field"
            raise ValueError(msg)
        return self

    @classmethod
    def from_text(cls, text: str) -> MessageContent:
        return cls(type="text", text=text)

    @classmethod
    def from_image_url(cls, url: str, detail: str | None = None) -> MessageContent:
        return cls(type="image_url", image_url=ImageUrl(url=url, detail=detail))

    @classmethod
    def from_document_url(
        cls, url: str, media_type: str | None = None
    ) -> MessageContent:
        return cls(
            type="document_url", document_url=DocumentUrl(url=url, type=media_type)
        )


class FunctionCall(BaseModel):
    """Function name and JSON-encoded arguments chosen by the model."""

    model_config = ConfigDict(frozen=True, extra="allow")

    name: str
    arguments: str = ""


class ToolCall(BaseModel):
    """A tool invocation requested by the assistant."""

    model_config = ConfigDict(frozen=True, extra="allow")

    id: str
    type: Literal["function"] = "function"
    function: FunctionCall


class Message(BaseModel):
    """A single chat message.

    Either ``content`` or ``tool_calls`` must be present. Use the
    ``system``/``user``/``assistant``/``tool`` constructors for the common
    cases.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    role: Role
    content: str | tuple[MessageContent, ...] | None = None
    name: str | None = None
    tool_calls: tuple[ToolCall, ...] | None = None
    tool_call_id: str | None = None

    @model_validator(mode="after")
    def _check_body(self) -> Message:
        if self.content is None and not self.tool_calls:
            msg = "message requires content or tool_calls"
            raise ValueError(msg)
        if self.role == "tool" and not self.tool_call_id:
            msg = "tool messages require tool_call_id"
            raise ValueError(msg)
        return self

    @classmethod
    def system(cls, content: str) -> Message:
        return cls(role="system", content=content)

    @classmethod
    def user(cls, content: str | Sequence[MessageContent]) -> Message:
        return cls(role="user", content=content)

    @classmethod
    def assistant(
        cls, content: str | None = None, tool_calls: Sequence[ToolCall] | None = None
    ) -> Message:
        return cls(role="assistant", content=content, tool_calls=tool_calls)

    @classmethod
    def tool(cls, content: str, tool_call_id: str) -> Message:
        return cls(role="tool", content=content, tool_call_id=tool_call_id)


class FunctionDefinition(BaseModel):
    """A callable function exposed to the model.

    ``parameters`` is an opaque JSON Schema object.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    description: str | None = None
    parameters: dict[str, Any] | None = None


class Tool(BaseModel):
    """A tool definition in the OpenAI-compatible function-calling format."""

    model_config = ConfigDict(frozen=True)

    type: Literal["function"] = "function"
    function: FunctionDefinition

    @classmethod
    def from_function(
        cls,
        name: str,
        description: str | None = None,
        parameters: dict[str, Any] | None = None,
    ) -> Tool:
        return cls(
            function=FunctionDefinition(
                name=name, description=description, parameters=parameters
            )
        )


class ToolChoice(BaseModel):
    """How the model may use the supplied tools."""

    model_config = ConfigDict(frozen=True)

    type: Literal["auto", "none", "required", "function"] = "auto"
    function_name: str | None = None

    @model_validator(mode="after")
    def _check_function_name(self) -> ToolChoice:
        if self.type == "function" and not self.function_name:
            msg = "function tool choice requires function_name"
            raise ValueError(msg)
        return self

    @classmethod
    def auto(cls) -> ToolChoice:
        return cls(type="auto")

    @classmethod
    def none(cls) -> ToolChoice:
        return cls(type="none")

    @classmethod
    def required(cls) -> ToolChoice:
        return cls(type="required")

    @classmethod
    def function(cls, name: str) -> ToolChoice:
        return cls(type="function", function_name=name)

    def to_request_value(self) -> str | dict[str, Any]:
        """Render the value sent as ``tool_choice`` on the wire."""
        if self.type == "function":
            return {"type": "function", "function": {"name": self.function_name}}
        return self.type


class Usage(BaseModel):
    """Token accounting for a completion."""

    model_config = ConfigDict(extra="allow")

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    cost: float | None = None
    prompt_tokens_details: dict[str, Any] | None = None
    completion_tokens_details: dict[str, Any] | None = None
