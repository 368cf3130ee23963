"""Logging configuration using structlog for structured logging.

The SDK only emits events; it never installs handlers on import. Applications
(and the bundled CLI) call ``configure_logging`` once to route structlog
through the standard library with a console or JSON renderer.
"""

import logging
import sys
from collections.abc import MutableMapping
from pathlib import Path
from typing import Any

import structlog
from structlog.dev import ConsoleRenderer
from structlog.processors import JSONRenderer
from structlog.stdlib import LoggerFactory, add_log_level, add_logger_name

# Standard library logging levels mapping
_LOG_LEVELS = {
    "TRACE": logging.DEBUG - 5,
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# Event keys whose values must never reach a log sink
SENSITIVE_KEYS: frozenset[str] = frozenset(
    {"api_key", "authorization", "token", "key", "code_verifier", "password"}
)

REDACTED = "***REDACTED***"

_handlers: list[logging.Handler] = []


def _get_level_no(level_name: str) -> int:
    """Get numeric log level from name."""
    return _LOG_LEVELS.get(level_name.upper(), logging.INFO)


def redact_sensitive_processor(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Replace values of sensitive keys before rendering."""
    for key in list(event_dict):
        if key.lower() in SENSITIVE_KEYS and event_dict[key]:
            event_dict[key] = REDACTED
    return event_dict


def redact_mapping(data: MutableMapping[str, Any]) -> dict[str, Any]:
    """Return a copy of ``data`` with sensitive values redacted, recursively."""
    safe: dict[str, Any] = {}
    for key, value in data.items():
        if key.lower() in SENSITIVE_KEYS and value:
            safe[key] = REDACTED
        elif isinstance(value, MutableMapping):
            safe[key] = redact_mapping(value)
        else:
            safe[key] = value
    return safe


def _create_console_renderer() -> ConsoleRenderer:
    """Create console renderer with custom formatting."""
    return ConsoleRenderer(
        colors=sys.stderr.isatty(),
        exception_formatter=structlog.dev.plain_traceback,
    )


def _create_json_renderer() -> JSONRenderer:
    """Create JSON renderer for machine-readable logs."""
    return JSONRenderer()


def configure_logging(
    log_level: str = "INFO",
    json_logs: bool = False,
    log_file: Path | None = None,
) -> None:
    """Configure structlog logging.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Render console output as JSON instead of key=value text
        log_file: Optional file that additionally receives JSON logs
    """
    shared_processors: list[structlog.typing.Processor] = [
        structlog.contextvars.merge_contextvars,
        add_log_level,
        add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        redact_sensitive_processor,
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    for handler in _handlers:
        root_logger.removeHandler(handler)
        handler.close()
    _handlers.clear()

    level = _get_level_no(log_level)
    root_logger.setLevel(level)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_renderer: Any = (
        _create_json_renderer() if json_logs else _create_console_renderer()
    )
    console_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=console_renderer,
            foreign_pre_chain=shared_processors,
        )
    )
    root_logger.addHandler(console_handler)
    _handlers.append(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(exist_ok=True, parents=True)
        file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=_create_json_renderer(),
                foreign_pre_chain=shared_processors,
            )
        )
        root_logger.addHandler(file_handler)
        _handlers.append(file_handler)

    # httpx logs every request at INFO; keep it at WARNING unless debugging
    logging.getLogger("httpx").setLevel(
        logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    )


def get_logger(name: str) -> Any:
    """Get a logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Structlog logger bound to the given name
    """
    return structlog.get_logger(name)
