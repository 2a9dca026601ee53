"""
Utility functions for CLI commands.

This module is part of COSMOS_DIAG.
"""

import json
import logging

import click

from ..observability import LoggingContextFilter, get_metrics_collector

LOG_FORMAT = (
    "%(asctime)s %(levelname)s [%(name)s] "
    "[run=%(correlation_id)s session=%(session)s] %(message)s"
)


def build_log_handler() -> logging.Handler:
    """Stderr handler that renders the run's correlation ID and session label."""
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(LoggingContextFilter())
    return handler


def configure_logging(level: str) -> None:
    """Configure root logging for a command line run."""
    logging.basicConfig(level=getattr(logging, level.upper()), handlers=[build_log_handler()])


def echo_metrics_summary() -> None:
    """Print the aggregated client-side operation metrics as JSON."""
    summary = get_metrics_collector().get_summary()
    click.echo(json.dumps(summary["summary"], indent=2))
