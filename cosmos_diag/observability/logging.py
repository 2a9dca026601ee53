"""
Logging utilities for COSMOS_DIAG.

Every record carries the run's correlation ID and the label of the logical
session it was logged from. ContextualLoggerAdapter attaches them as record
attributes; LoggingContextFilter fills them in for plain loggers so a format
string can always render them.
"""

import contextvars
import logging
import uuid
from typing import Any

# Placeholder rendered when a record has no correlation ID or session
NO_CONTEXT = "-"

_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)

# Label of the logical session in use plus extra fields (collection, ...)
_session_context: contextvars.ContextVar[dict[str, Any] | None] = contextvars.ContextVar(
    "session_context", default=None
)


def get_correlation_id() -> str | None:
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> str:
    """
    Mark the current run with a correlation ID.

    Args:
        correlation_id: ID to use (a new UUID when None)

    Returns:
        The correlation ID that was set
    """
    if correlation_id is None:
        correlation_id = str(uuid.uuid4())
    _correlation_id.set(correlation_id)
    return correlation_id


def clear_correlation_id() -> None:
    _correlation_id.set(None)


def set_session_context(label: str | None = None, **kwargs: Any) -> None:
    """Record the logical session (and e.g. the collection) subsequent logs belong to."""
    _session_context.set({"session": label, **kwargs})


def clear_session_context() -> None:
    _session_context.set(None)


def get_logging_context() -> dict[str, Any]:
    """Correlation ID and session context currently in effect."""
    context: dict[str, Any] = {}

    correlation_id = get_correlation_id()
    if correlation_id:
        context["correlation_id"] = correlation_id

    session_context = _session_context.get()
    if session_context:
        context.update(session_context)

    return context


class ContextualLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that adds the logging context to every record.

    Keys passed in ``extra`` win over the context.
    """

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        context = get_logging_context()
        context.update(kwargs.get("extra") or {})
        kwargs["extra"] = context
        return msg, kwargs


class LoggingContextFilter(logging.Filter):
    """
    Sets ``correlation_id`` and ``session`` on records that lack them.

    Attach it to a handler whose format string references those fields.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        context = get_logging_context()
        for key in ("correlation_id", "session"):
            if getattr(record, key, None) is None:
                setattr(record, key, context.get(key) or NO_CONTEXT)
        return True


def get_logger(name: str) -> ContextualLoggerAdapter:
    return ContextualLoggerAdapter(logging.getLogger(name), {})


def log_operation(
    logger: logging.Logger | logging.LoggerAdapter,
    operation: str,
    level: int = logging.INFO,
    success: bool = True,
    duration_ms: float | None = None,
    **context: Any,
) -> None:
    """
    Log one operation as a single structured record.

    Args:
        logger: Logger or adapter to write to
        operation: Operation name (e.g. "diagnostics.report")
        level: Log level
        success: Whether the operation succeeded
        duration_ms: Measured duration, rounded to 2 decimals in the record
        **context: Extra record attributes
    """
    record_context = get_logging_context()
    record_context["operation"] = operation
    record_context["success"] = success
    if duration_ms is not None:
        record_context["duration_ms"] = round(duration_ms, 2)
    record_context.update(context)

    status = "Operation" if success else "Operation failed"
    message = f"{status}: {operation}"
    if duration_ms is not None:
        message += f" (duration: {duration_ms:.2f}ms)"

    logger.log(level, message, extra=record_context)
