"""
Dedicated connections for logical sessions.

Cosmos DB keeps request statistics per connection, and a pymongo pool hands
the most recently returned socket to whichever caller asks next. Each logical
session therefore holds its own MongoClient capped at a single pooled
connection, so its requests and its statistics read always share one socket.

This module is part of COSMOS_DIAG.
"""

import logging
import threading
from collections.abc import Callable

from pymongo import MongoClient

from ..exceptions import ConnectionLimitError

logger = logging.getLogger(__name__)


class DedicatedClientPool:
    """
    Hands out single-connection clients, at most ``max_clients`` at a time.

    Example:
        pool = DedicatedClientPool(build_client, max_clients=10)
        client = pool.acquire()
        try:
            client.admin.command("ping")
        finally:
            pool.release(client)
    """

    def __init__(self, build_client: Callable[[], MongoClient], max_clients: int) -> None:
        """
        Initialize the pool.

        Args:
            build_client: Returns a new MongoClient limited to one pooled connection
            max_clients: Upper bound on clients held at once
        """
        self._build_client = build_client
        self.max_clients = max_clients
        self._clients: list[MongoClient] = []
        self._lock = threading.Lock()

    @property
    def open_count(self) -> int:
        with self._lock:
            return len(self._clients)

    def acquire(self) -> MongoClient:
        """
        Build a new dedicated client.

        Raises:
            ConnectionLimitError: If max_clients clients are already held
        """
        with self._lock:
            if len(self._clients) >= self.max_clients:
                raise ConnectionLimitError(
                    f"All {self.max_clients} dedicated connections are in use",
                    max_connections=self.max_clients,
                )
            client = self._build_client()
            self._clients.append(client)
        logger.debug(f"Dedicated client acquired ({len(self._clients)}/{self.max_clients})")
        return client

    def release(self, client: MongoClient) -> None:
        """Close a client handed out by acquire(). Unknown clients are ignored."""
        with self._lock:
            if not any(held is client for held in self._clients):
                return
            self._clients = [held for held in self._clients if held is not client]
        client.close()

    def close(self) -> None:
        """Close every client still held. Idempotent."""
        with self._lock:
            clients, self._clients = self._clients, []
        if clients:
            logger.warning(f"Closing {len(clients)} dedicated client(s) still in use")
        for client in clients:
            client.close()
