"""
Demonstration flows.

Both flows raise COSMOS_DIAG exceptions and never terminate the process;
the command line entry point decides what a failure means.
"""

import logging
from collections.abc import Callable
from typing import Any

import click

from .database.session import LogicalSession
from .diagnostics import DiagnosticsReporter, StatisticsReport
from .exceptions import CosmosDiagError, OperationError
from .observability import set_session_context, timed_operation
from .repositories import MongoRepository, Package, to_object_id

logger = logging.getLogger(__name__)

RENAMED_FULL_NAME = "react-native"


def sample_package() -> Package:
    """The record inserted by both flows."""
    return Package(
        full_name="react",
        description="A framework for building native apps with React.",
        stars_count=48794,
        forks_count=11392,
        last_updated_by="shergin",
    )


def _discard(packages: MongoRepository, package_id: str) -> None:
    """Remove a record left behind by a failed flow without masking the failure."""
    try:
        packages.delete(package_id)
    except CosmosDiagError as e:
        logger.warning(f"Could not remove package {package_id} after a failed run: {e}")


@timed_operation("demo.crud")
def run_crud_demo(
    session: LogicalSession,
    reporter: DiagnosticsReporter,
    collection_name: str,
    echo: Callable[[str], Any] = click.echo,
) -> dict[str, StatisticsReport]:
    """
    Insert, find, rename, verify and delete a package, reporting after each step.

    Every step after the insert targets the inserted record, even when older
    records with the same full name exist. If a step fails the record is
    removed before the error propagates.

    Returns:
        Reports keyed by label, in execution order
    """
    set_session_context(session.label, collection=collection_name)
    packages = MongoRepository(session, collection_name, Package)
    reports: dict[str, StatisticsReport] = {}

    def report(label: str) -> None:
        reports[label] = reporter.report(session, label)

    package_id = packages.insert(sample_package())
    try:
        report("insert stats")

        found = packages.find_one({"full_name": "react", "_id": to_object_id(package_id)})
        report("find stats")
        echo(f"Description: {found.description}")

        packages.update_fields(found.id, {"full_name": RENAMED_FULL_NAME})
        report("update stats")

        renamed = packages.get(found.id)
        report("verify stats")
        if renamed.full_name != RENAMED_FULL_NAME:
            raise OperationError(
                f"Update not visible: expected full name '{RENAMED_FULL_NAME}', "
                f"got '{renamed.full_name}'",
                operation="update",
                collection_name=collection_name,
            )
    except CosmosDiagError:
        _discard(packages, package_id)
        raise

    packages.delete(found.id)
    report("remove stats")

    logger.info(f"CRUD demo finished on session '{session.label}'")
    return reports


@timed_operation("demo.concurrent")
def run_concurrent_demo(
    session: LogicalSession,
    reporter: DiagnosticsReporter,
    collection_name: str,
    cleanup: bool = True,
) -> dict[str, StatisticsReport]:
    """
    Show that two logical sessions keep separate statistics.

    Inserts on ``session``, finds the record on a clone holding its own
    connection, then reports the statistics of each. The insert completes
    before the find starts. With ``cleanup`` the record is removed whether
    or not the rest of the flow succeeds.

    Returns:
        Reports keyed by label
    """
    set_session_context(session.label, collection=collection_name)
    packages = MongoRepository(session, collection_name, Package)
    reports: dict[str, StatisticsReport] = {}

    package_id = packages.insert(sample_package())
    try:
        with session.clone() as cloned:
            MongoRepository(cloned, collection_name, Package).find_by_full_name("react")

            reports["collection 1, insert"] = reporter.report(session, "collection 1, insert")
            reports["collection 2, find"] = reporter.report(cloned, "collection 2, find")
    except CosmosDiagError:
        if cleanup:
            _discard(packages, package_id)
        raise

    if cleanup:
        packages.delete(package_id)

    return reports
