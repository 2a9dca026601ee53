"""
Entry point for the ``cosmos-diag`` command.

This is the only place that turns COSMOS_DIAG exceptions into log lines
and exit codes.

This module is part of COSMOS_DIAG.
"""

import logging
import sys
from collections.abc import Callable
from typing import Any

import click

from ..config import DemoConfig
from ..database import ConnectionManager, LogicalSession
from ..demo import run_concurrent_demo, run_crud_demo
from ..diagnostics import DiagnosticsReporter
from ..exceptions import ConfigurationError, CosmosDiagError, InitializationError
from ..observability import clear_correlation_id, set_correlation_id
from .utils import configure_logging, echo_metrics_summary

logger = logging.getLogger(__name__)

Flow = Callable[[LogicalSession, DiagnosticsReporter, DemoConfig], Any]


def _crud_flow(session: LogicalSession, reporter: DiagnosticsReporter, config: DemoConfig) -> None:
    run_crud_demo(session, reporter, config.collection_name)


def _concurrent_flow(
    session: LogicalSession, reporter: DiagnosticsReporter, config: DemoConfig
) -> None:
    run_concurrent_demo(session, reporter, config.collection_name)


def run_flows(flows: list[Flow], show_metrics: bool = False) -> None:
    """
    Load configuration, connect, run the flows and exit on failure.

    The connection is released on every exit path.
    """
    correlation_id = set_correlation_id()
    logger.debug(f"Starting run {correlation_id}")
    try:
        try:
            config = DemoConfig.from_env()
        except ConfigurationError as e:
            click.echo(f"Invalid configuration: {e}", err=True)
            sys.exit(1)

        reporter = DiagnosticsReporter()
        try:
            with ConnectionManager(config) as session:
                for flow in flows:
                    flow(session, reporter, config)
        except InitializationError as e:
            click.echo(f"Can't connect, error: {e}")
            sys.exit(1)
        except CosmosDiagError as e:
            logger.critical(f"{type(e).__name__}: {e}")
            sys.exit(1)

        if show_metrics:
            echo_metrics_summary()
    finally:
        clear_correlation_id()


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging level",
)
@click.option(
    "--show-metrics",
    is_flag=True,
    help="Print client-side operation metrics after the run",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str, show_metrics: bool) -> None:
    """
    Run CRUD operations against Cosmos DB's MongoDB API and print the
    request charge of each one.

    Reads AZURE_DATABASE and AZURE_DATABASE_PASSWORD from the environment.
    """
    configure_logging(log_level)
    ctx.ensure_object(dict)
    ctx.obj["show_metrics"] = show_metrics


@cli.command()
@click.pass_context
def crud(ctx: click.Context) -> None:
    """Insert, find, update and delete a package, reporting after each step."""
    run_flows([_crud_flow], show_metrics=ctx.obj["show_metrics"])


@cli.command()
@click.pass_context
def concurrent(ctx: click.Context) -> None:
    """Compare statistics of two logical sessions, each on its own connection."""
    run_flows([_concurrent_flow], show_metrics=ctx.obj["show_metrics"])


@cli.command(name="all")
@click.pass_context
def run_all(ctx: click.Context) -> None:
    """Run the concurrent flow, then the CRUD flow."""
    run_flows([_concurrent_flow, _crud_flow], show_metrics=ctx.obj["show_metrics"])


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
