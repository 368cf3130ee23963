"""Typed request and response models for the OpenRouter API."""

from .common import (
    DocumentUrl,
    FunctionCall,
    FunctionDefinition,
    ImageUrl,
    Message,
    MessageContent,
    Role,
    Tool,
    ToolCall,
    ToolChoice,
    Usage,
)
from .requests import (
    AuthKeyExchangeRequest,
    ChatCompletionRequest,
    CompletionRequest,
    CreateKeyRequest,
    JsonSchemaFormat,
    ModelsRequest,
    OAuthConfig,
    ProviderPreferences,
    ReasoningConfig,
    ResponseFormat,
    UpdateKeyRequest,
    UsageConfig,
    WebSearchOptions,
)
from .responses import (
    ApiKey,
    AuthKeyExchangeResponse,
    AuthorizationUrl,
    ChatCompletionChunk,
    ChatCompletionResponse,
    Choice,
    ChunkChoice,
    ChunkDelta,
    ChunkToolCall,
    CompletionChunk,
    CompletionResponse,
    CreateKeyResponse,
    Credits,
    CreditsResponse,
    CurrentKey,
    CurrentKeyResponse,
    ErrorDetail,
    ErrorResponse,
    GenerationDetails,
    KeysResponse,
    Model,
    ModelEndpoint,
    ModelEndpoints,
    ModelsResponse,
    PKCEChallenge,
    ResponseMessage,
)

__all__ = [
    "ApiKey",
    "AuthKeyExchangeRequest",
    "AuthKeyExchangeResponse",
    "AuthorizationUrl",
    "ChatCompletionChunk",
    "ChatCompletionRequest",
    "ChatCompletionResponse",
    "Choice",
    "ChunkChoice",
    "ChunkDelta",
    "ChunkToolCall",
    "CompletionChunk",
    "CompletionRequest",
    "CompletionResponse",
    "CreateKeyRequest",
    "CreateKeyResponse",
    "Credits",
    "CreditsResponse",
    "CurrentKey",
    "CurrentKeyResponse",
    "DocumentUrl",
    "ErrorDetail",
    "ErrorResponse",
    "FunctionCall",
    "FunctionDefinition",
    "GenerationDetails",
    "ImageUrl",
    "JsonSchemaFormat",
    "KeysResponse",
    "Message",
    "MessageContent",
    "Model",
    "ModelEndpoint",
    "ModelEndpoints",
    "ModelsRequest",
    "ModelsResponse",
    "OAuthConfig",
    "PKCEChallenge",
    "ProviderPreferences",
    "ReasoningConfig",
    "ResponseFormat",
    "ResponseMessage",
    "Role",
    "Tool",
    "ToolCall",
    "ToolChoice",
    "UpdateKeyRequest",
    "Usage",
    "UsageConfig",
    "WebSearchOptions",
]
