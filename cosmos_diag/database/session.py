"""
Logical sessions, each on its own dedicated connection.

A LogicalSession wraps a MongoClient that is capped at one pooled connection
and remembers the last command it issued. Clones reserve a further connection
from the same DedicatedClientPool, so two sessions never share a socket and
never see each other's request statistics.

This module is part of COSMOS_DIAG.
"""

import itertools
import logging

from pymongo import MongoClient, WriteConcern
from pymongo.collection import Collection
from pymongo.database import Database

from ..exceptions import SessionClosedError
from .pool import DedicatedClientPool

logger = logging.getLogger(__name__)

# Safe write mode: every write blocks until the server acknowledges it
SAFE_WRITE_CONCERN = WriteConcern(w=1)

_clone_counter = itertools.count(1)


class LogicalSession:
    """
    Independent handle on one dedicated connection.

    Example:
        with LogicalSession(pool.acquire(), "my_db", pool=pool) as session:
            session.collection("package").insert_one({...})
            session.note_request("insert")
    """

    def __init__(
        self,
        client: MongoClient,
        database_name: str,
        label: str = "primary",
        pool: DedicatedClientPool | None = None,
        owns_client: bool = False,
    ) -> None:
        """
        Initialize the logical session.

        Args:
            client: MongoClient limited to a single pooled connection
            database_name: Database every handle from this session is bound to
            label: Name used in logs and metrics
            pool: Pool the client came from; close() returns it there and
                  clone() reserves the clone's connection from it
            owns_client: Whether close() closes a client that has no pool
        """
        self._client = client
        self.database_name = database_name
        self.label = label
        self._pool = pool
        self._owns_client = owns_client or pool is not None
        self._last_request: str | None = None
        self._closed = False

    def _ensure_open(self) -> None:
        if self._closed:
            raise SessionClosedError(
                f"Logical session '{self.label}' is closed",
                context={"session": self.label},
            )

    @property
    def client(self) -> MongoClient:
        self._ensure_open()
        return self._client

    @property
    def database(self) -> Database:
        """Database handle with the safe write concern."""
        self._ensure_open()
        return self._client.get_database(self.database_name, write_concern=SAFE_WRITE_CONCERN)

    def collection(self, name: str) -> Collection:
        return self.database.get_collection(name)

    @property
    def last_request(self) -> str | None:
        """Command name of the last request issued on this logical session."""
        return self._last_request

    def note_request(self, command_name: str) -> None:
        self._ensure_open()
        self._last_request = command_name

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def owns_client(self) -> bool:
        return self._owns_client

    def clone(self, label: str | None = None) -> "LogicalSession":
        """
        Create a second logical session on a connection of its own.

        The clone uses the same endpoint, credentials and database, starts
        with an empty last-request context and releases its connection when
        closed.

        Raises:
            SessionClosedError: If this session is closed
            ConnectionLimitError: If every dedicated connection is in use
            RuntimeError: If this session was not opened from a pool
        """
        self._ensure_open()
        if self._pool is None:
            raise RuntimeError(
                f"Logical session '{self.label}' has no connection pool to clone from"
            )
        clone_label = label or f"{self.label}-clone-{next(_clone_counter)}"
        client = self._pool.acquire()
        logger.debug(f"Cloned logical session '{self.label}' as '{clone_label}'")
        return LogicalSession(client, self.database_name, label=clone_label, pool=self._pool)

    def close(self) -> None:
        """
        Release the connection. Idempotent.

        A pooled client goes back to its pool; an unpooled client is closed
        only when this session owns it.
        """
        if self._closed:
            return
        self._closed = True

        if self._pool is not None:
            self._pool.release(self._client)
        elif self._owns_client:
            self._client.close()
        else:
            return
        logger.info(f"Connection released by logical session '{self.label}'")

    def __enter__(self) -> "LogicalSession":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"LogicalSession(label={self.label!r}, database={self.database_name!r}, {state})"
