"""Asynchronous Python client for the OpenRouter API."""

from .authentication import AuthenticationProvider, BearerTokenProvider
from .client import OpenRouterClient
from .config import OpenRouterSettings, load_settings
from .error_codes import ErrorCode
from .exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    InvalidArgumentError,
    ModerationError,
    NetworkError,
    OpenRouterApiError,
    OpenRouterError,
    ProviderError,
    RateLimitError,
    RemoteValidationError,
    RequestTimeoutError,
    SerializationError,
    StreamingError,
)
from .models import (
    ChatCompletionChunk,
    ChatCompletionRequest,
    ChatCompletionResponse,
    Message,
    MessageContent,
    ProviderPreferences,
    ReasoningConfig,
    ResponseFormat,
    Tool,
    ToolChoice,
)
from .schema import generate_json_schema
from .services import ChatRequestBuilder

__version__ = "1.0.0"

__all__ = [
    "AuthenticationError",
    "AuthenticationProvider",
    "AuthorizationError",
    "BearerTokenProvider",
    "ChatCompletionChunk",
    "ChatCompletionRequest",
    "ChatCompletionResponse",
    "ChatRequestBuilder",
    "ConfigurationError",
    "ErrorCode",
    "InvalidArgumentError",
    "Message",
    "MessageContent",
    "ModerationError",
    "NetworkError",
    "OpenRouterApiError",
    "OpenRouterClient",
    "OpenRouterError",
    "OpenRouterSettings",
    "ProviderError",
    "ProviderPreferences",
    "RateLimitError",
    "ReasoningConfig",
    "RemoteValidationError",
    "RequestTimeoutError",
    "ResponseFormat",
    "SerializationError",
    "StreamingError",
    "Tool",
    "ToolChoice",
    "__version__",
    "generate_json_schema",
    "load_settings",
]
