"""
Observability components.

Provides structured logging with correlation and session context, and
client-side operation metrics.
"""

from .logging import (
    NO_CONTEXT,
    ContextualLoggerAdapter,
    LoggingContextFilter,
    clear_correlation_id,
    clear_session_context,
    get_correlation_id,
    get_logger,
    get_logging_context,
    log_operation,
    set_correlation_id,
    set_session_context,
)
from .metrics import (
    MetricsCollector,
    OperationMetrics,
    get_metrics_collector,
    record_operation,
    timed_operation,
)

__all__ = [
    # Metrics
    "MetricsCollector",
    "OperationMetrics",
    "get_metrics_collector",
    "record_operation",
    "timed_operation",
    # Logging
    "get_correlation_id",
    "set_correlation_id",
    "clear_correlation_id",
    "set_session_context",
    "clear_session_context",
    "get_logging_context",
    "ContextualLoggerAdapter",
    "LoggingContextFilter",
    "NO_CONTEXT",
    "get_logger",
    "log_operation",
]
