"""
Request statistics for COSMOS_DIAG.

Reads the ``getLastRequestStatistics`` document for a logical session,
decodes it into a typed model and prints the request charge.

This module is part of COSMOS_DIAG.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import click
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pymongo.errors import PyMongoError

from .constants import LAST_REQUEST_STATISTICS_COMMAND, REPORT_SEPARATOR
from .database.session import LogicalSession
from .exceptions import DiagnosticsError
from .observability import get_logger as get_contextual_logger
from .observability import log_operation

logger = logging.getLogger(__name__)
contextual_logger = get_contextual_logger(__name__)


class RequestStatistics(BaseModel):
    """
    Cost and duration of the most recent request on a connection.

    Missing fields take their defaults and unknown fields are ignored.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    ok: int = Field(0, alias="ok")
    command_name: str = Field("", alias="CommandName")
    request_charge: float = Field(0.0, alias="RequestCharge")
    request_duration_ms: float = Field(0.0, alias="RequestDurationInMilliSeconds")

    @property
    def succeeded(self) -> bool:
        return self.ok == 1

    @classmethod
    def from_document(cls, doc: dict[str, Any] | None) -> "RequestStatistics":
        """
        Decode a command response.

        Raises:
            DiagnosticsError: If a present field has an unusable type
        """
        try:
            return cls.model_validate(doc or {})
        except ValidationError as e:
            raise DiagnosticsError(
                f"Malformed request statistics: {e}",
                context={"fields": sorted((doc or {}).keys())},
            ) from e


@dataclass(frozen=True)
class StatisticsReport:
    """One printed report: the label, the measured wall-clock time and the statistics."""

    label: str
    elapsed_ms: float
    statistics: RequestStatistics


def fetch_last_request_statistics(session: LogicalSession) -> RequestStatistics:
    """
    Run the statistics command on the session's dedicated connection.

    Does not change the session's own last-request context.

    Raises:
        DiagnosticsError: If the command fails
    """
    try:
        doc = session.database.command(LAST_REQUEST_STATISTICS_COMMAND)
    except PyMongoError as e:
        raise DiagnosticsError(
            f"Error getting diagnostics: {e}",
            context={"session": session.label, "error_type": type(e).__name__},
        ) from e
    return RequestStatistics.from_document(doc)


class DiagnosticsReporter:
    """
    Prints the last request statistics of a logical session.

    A single point-in-time read per call: no retries and no aggregation.
    """

    def __init__(self, echo: Callable[[str], Any] = click.echo) -> None:
        self._echo = echo

    def report(self, session: LogicalSession, label: str) -> StatisticsReport:
        """
        Read, print and return the statistics for the session's last request.

        Raises:
            DiagnosticsError: If the command fails
        """
        start_time = time.perf_counter()
        try:
            statistics = fetch_last_request_statistics(session)
        except DiagnosticsError:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            log_operation(
                contextual_logger,
                "diagnostics.report",
                level=logging.ERROR,
                success=False,
                duration_ms=elapsed_ms,
                label=label,
                session=session.label,
            )
            raise
        elapsed_ms = (time.perf_counter() - start_time) * 1000

        self._echo(label)
        self._echo(f"Duration: {elapsed_ms:.3f}ms")
        self._echo(f"Charge: {statistics.request_charge:f}")
        self._echo(REPORT_SEPARATOR)

        log_operation(
            contextual_logger,
            "diagnostics.report",
            level=logging.DEBUG,
            duration_ms=elapsed_ms,
            label=label,
            session=session.label,
            command_name=statistics.command_name,
            request_charge=statistics.request_charge,
        )

        expected = session.last_request
        if expected and statistics.command_name and statistics.command_name != expected:
            logger.warning(
                f"Statistics for '{label}' describe '{statistics.command_name}' but session "
                f"'{session.label}' last issued '{expected}'; the connection served a request "
                "this session did not issue"
            )

        return StatisticsReport(label=label, elapsed_ms=elapsed_ms, statistics=statistics)
