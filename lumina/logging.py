"""
Structured logging for Lumina.

structlog on top of stdlib logging: colored console output while
developing, orjson-encoded JSON lines when ``logging.format = "json"``.
Any event key that looks like a secret is masked before rendering.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

import orjson
import structlog

if TYPE_CHECKING:
    from lumina.config import LoggingConfig

_SECRET_KEYS = frozenset({"password", "confirm_password", "api_key", "secret", "x-secret-key"})
_MASK = "***"


def _redact_secrets(logger: object, name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Mask values stored under secret-looking keys."""
    for key in event_dict:
        if isinstance(key, str) and key.lower() in _SECRET_KEYS:
            event_dict[key] = _MASK
    return event_dict


def _orjson_renderer(logger: object, name: str, event_dict: dict[str, object]) -> str:
    return orjson.dumps(event_dict, option=orjson.OPT_NON_STR_KEYS, default=str).decode("utf-8")


def setup_logging(*, json_output: bool = False, level: str = "INFO") -> None:
    """Configure structlog and route it through the stdlib root logger.

    Args:
        json_output: Emit JSON lines instead of console output.
        level: Minimum log level name (DEBUG, INFO, WARNING, ERROR).
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
    )
    logging.getLogger().setLevel(getattr(logging, level.upper(), logging.INFO))
    # httpx logs every request line at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        _redact_secrets,
    ]

    renderer: Any = (
        _orjson_renderer if json_output else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    )
    for handler in logging.getLogger().handlers:
        handler.setFormatter(formatter)


def configure_from(config: LoggingConfig) -> None:
    """Apply a :class:`~lumina.config.LoggingConfig` section."""
    setup_logging(json_output=config.format == "json", level=config.level)


def get_logger(name: str) -> Any:
    """Get a named structlog logger."""
    return structlog.get_logger(name)
