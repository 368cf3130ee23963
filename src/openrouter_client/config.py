"""Client settings loaded from arguments, environment and ``.env``."""

from __future__ import annotations

from typing import Any
from urllib.parse import urlparse

from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError
from .utils.logging import redact_mapping

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_TIMEOUT_SECONDS = 120.0
DEFAULT_MAX_RETRIES = 3
USER_AGENT = "openrouter-client-python/1.0.0"
API_KEY_PREFIX = "sk-or-v1-"


def looks_like_api_key(key: str) -> bool:
    """Whether ``key`` has the shape of an OpenRouter API key."""
    return key.lower().startswith(API_KEY_PREFIX) and len(key) > len(API_KEY_PREFIX)


def _configuration_error(error: ValidationError) -> ConfigurationError:
    first = error.errors()[0] if error.errors() else {}
    loc = first.get("loc") or ("settings",)
    return ConfigurationError(
        f"Invalid configuration: {first.get('msg', str(error))}",
        configuration_key=str(loc[0]),
    )


class OpenRouterSettings(BaseSettings):
    """Configuration for the OpenRouter client.

    Every field can be set through an ``OPENROUTER_``-prefixed environment
    variable (``OPENROUTER_API_KEY``, ``OPENROUTER_BASE_URL``, ...).
    """

    model_config = SettingsConfigDict(
        env_prefix="OPENROUTER_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
        validate_assignment=True,
    )

    api_key: SecretStr | None = Field(default=None, description="OpenRouter API key")
    base_url: str = Field(default=DEFAULT_BASE_URL, description="API base URL")
    timeout: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS, gt=0, description="Read timeout in seconds"
    )
    connect_timeout: float = Field(
        default=10.0, gt=0, description="Connect timeout in seconds"
    )
    enable_retry: bool = Field(default=True, description="Retry transient failures")
    max_retries: int = Field(
        default=DEFAULT_MAX_RETRIES, ge=0, description="Retries after the first attempt"
    )
    retry_delay: float = Field(
        default=1.0, ge=0, description="Base delay for exponential backoff (seconds)"
    )
    max_retry_delay: float = Field(
        default=60.0, ge=0, description="Upper bound for a single retry wait (seconds)"
    )
    http_referer: str | None = Field(
        default=None, description="Your site URL for OpenRouter attribution"
    )
    x_title: str | None = Field(
        default=None, description="Your site name for OpenRouter attribution"
    )
    default_headers: dict[str, str] = Field(
        default_factory=dict, description="Extra headers sent with every request"
    )
    validate_api_key: bool = Field(
        default=True, description="Reject keys that do not look like OpenRouter keys"
    )
    log_level: str = Field(default="INFO", description="Log level for the CLI")

    @field_validator("base_url", mode="before")
    @classmethod
    def normalize_base_url(cls, v: Any) -> str:
        """Strip whitespace and trailing slashes; require an absolute http(s) URL."""
        if not isinstance(v, str) or not v.strip():
            msg = "base_url must be a non-empty string"
            raise ValueError(msg)
        url = v.strip().rstrip("/")
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            msg = f"base_url must be an absolute http(s) URL, got {v!r}"
            raise ValueError(msg)
        return url

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> str:
        return str(v).upper() if v else "INFO"

    def require_api_key(self) -> str:
        """Return the API key or raise ``ConfigurationError``.

        Raises:
            ConfigurationError: If no key is configured, or the key has the
                wrong format while ``validate_api_key`` is enabled
        """
        key = self.api_key.get_secret_value().strip() if self.api_key else ""
        if not key:
            raise ConfigurationError(
                "OpenRouter API key is required",
                configuration_key="api_key",
                suggestion=(
                    "Provide it via the api_key parameter or set the "
                    "OPENROUTER_API_KEY environment variable."
                ),
            )
        if self.validate_api_key and not looks_like_api_key(key):
            raise ConfigurationError(
                f"Invalid API key format. Expected format: {API_KEY_PREFIX}...",
                configuration_key="api_key",
                suggestion="Set validate_api_key=False to use a non-standard key.",
            )
        return key

    def with_overrides(self, **overrides: Any) -> OpenRouterSettings:
        """Return a validated copy with the given fields replaced.

        ``None`` values are ignored so callers can forward optional kwargs.
        """
        updates = {k: v for k, v in overrides.items() if v is not None}
        if not updates:
            return self
        unknown = set(updates) - set(type(self).model_fields)
        if unknown:
            raise ConfigurationError(
                f"Unknown setting(s): {', '.join(sorted(unknown))}",
                configuration_key=sorted(unknown)[0],
            )
        data = self.model_dump()
        data.update(updates)
        try:
            return type(self).model_validate(data)
        except ValidationError as e:
            raise _configuration_error(e) from e

    def safe_for_logging(self) -> dict[str, Any]:
        """Return settings with the API key and sensitive header values redacted."""
        return redact_mapping(self.model_dump())


def load_settings(**overrides: Any) -> OpenRouterSettings:
    """Load settings from the environment and apply keyword overrides.

    Raises:
        ConfigurationError: If the environment or overrides are invalid
    """
    try:
        settings = OpenRouterSettings()
    except ValidationError as e:
        raise _configuration_error(e) from e
    return settings.with_overrides(**overrides)
