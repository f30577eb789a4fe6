"""Structured logging for the codec's ``occi.*`` events.

Key Responsibilities:
    - Route Structlog events through the standard library so that codec events
      and third-party records share one handler and one JSON rendering
    - Redact configured fields, nested ones included, before rendering
    - Bind the request correlation identifier carried into every event

Collaborators:
    - Upstream: Server entry-points call :func:`configure_logging` once;
      parsers and presenters log through ``structlog.get_logger(__name__)``
    - Downstream: ``logging`` handlers and ``structlog.stdlib.ProcessorFormatter``

Side Effects:
    - Configures global logging handlers and the Structlog defaults
    - Binds correlation IDs via context variables

Thread Safety:
    - Logging configuration should be invoked once during process startup
    - Correlation ID helpers rely on ``contextvars`` and are safe for async use
"""

# ==============================================================================
# IMPORTS
# ==============================================================================

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable
from contextvars import ContextVar, Token
from typing import Any, Callable

import structlog

from occi_codec.config.settings import LoggingSettings

# ==============================================================================
# CONTEXT VARIABLES
# ==============================================================================

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)

REDACTED = "***"

Processor = Callable[[Any, str, dict[str, Any]], dict[str, Any]]

# ==============================================================================
# PROCESSORS
# ==============================================================================


def _redact(value: Any, fields: frozenset[str]) -> Any:
    if isinstance(value, dict):
        return {
            key: REDACTED if str(key).lower() in fields else _redact(item, fields)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [_redact(item, fields) for item in value]
    return value


def scrub_processor(scrub_fields: Iterable[str] | None) -> Processor:
    """Create a processor redacting ``scrub_fields`` and adding the correlation ID.

    Field names match case-insensitively, at any nesting depth of dict and list
    values.
    """
    fields = frozenset(field.lower() for field in scrub_fields or ())

    def processor(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        correlation_id = _correlation_id.get()
        if correlation_id:
            event_dict.setdefault("correlation_id", correlation_id)
        return _redact(event_dict, fields)

    return processor


# Applied to records that did not originate from Structlog.
_FOREIGN_PRE_CHAIN: list[Any] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.ExtraAdder(),
    structlog.processors.TimeStamper(fmt="iso"),
]

# ==============================================================================
# FORMATTERS
# ==============================================================================


class JsonFormatter(structlog.stdlib.ProcessorFormatter):
    """Render every log record, Structlog event or not, as one JSON line."""

    def __init__(self, *, scrub_fields: Iterable[str] | None = None) -> None:
        super().__init__(
            foreign_pre_chain=_FOREIGN_PRE_CHAIN,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                scrub_processor(scrub_fields),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(sort_keys=True, default=str),
            ],
        )


def _level_value(level: int | str | None) -> int:
    if isinstance(level, str):
        value = logging.getLevelName(level.upper())
        return value if isinstance(value, int) else logging.INFO
    if isinstance(level, int):
        return level
    return logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    settings: LoggingSettings | None = None,
) -> None:
    """Configure global logging for the codec.

    Args:
        level: Optional logging level or level name. When ``settings`` is
            provided this argument is ignored.
        settings: Optional logging settings providing level and scrub fields.
    """
    scrub_fields: Iterable[str] | None = None
    if settings is not None:
        level = settings.level
        scrub_fields = settings.scrub_fields
    level_value = _level_value(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter(scrub_fields=scrub_fields))

    # Keep pytest's capture handlers so caplog sees the rendered events.
    root_logger = logging.getLogger()
    preserved: list[logging.Handler] = []
    for existing in root_logger.handlers:
        if type(existing).__module__.startswith("_pytest."):
            existing.setFormatter(JsonFormatter(scrub_fields=scrub_fields))
            preserved.append(existing)

    logging.basicConfig(level=level_value, handlers=[*preserved, handler], force=True)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


# ==============================================================================
# CORRELATION ID HELPERS
# ==============================================================================


def bind_correlation_id(value: str) -> Token[str | None]:
    """Bind a correlation identifier to the current execution context.

    Returns:
        Context variable token that can be used to restore the previous value.
    """
    token = _correlation_id.set(value)
    structlog.contextvars.bind_contextvars(correlation_id=value)
    return token


def reset_correlation_id(token: Token[str | None] | None) -> None:
    if token is not None:
        _correlation_id.reset(token)
    structlog.contextvars.unbind_contextvars("correlation_id")


def get_correlation_id() -> str | None:
    """Return the currently bound correlation identifier, if any."""
    return _correlation_id.get()


__all__ = [
    "JsonFormatter",
    "bind_correlation_id",
    "configure_logging",
    "get_correlation_id",
    "reset_correlation_id",
    "scrub_processor",
]
