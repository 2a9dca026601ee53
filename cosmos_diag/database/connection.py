"""
Connection management for COSMOS_DIAG.

Opens TLS-encrypted, authenticated MongoClients against the Cosmos DB MongoDB
API endpoint, one dedicated connection per logical session, and hands out
the primary LogicalSession.

This module is part of COSMOS_DIAG.
"""

import logging
import time

from pymongo import MongoClient
from pymongo.errors import ConfigurationError as PyMongoConfigurationError
from pymongo.errors import (
    ConnectionFailure,
    OperationFailure,
    ServerSelectionTimeoutError,
)

from ..config import DemoConfig
from ..constants import APP_NAME
from ..exceptions import InitializationError
from ..observability import get_logger as get_contextual_logger
from ..observability import record_operation
from .pool import DedicatedClientPool
from .session import LogicalSession

logger = logging.getLogger(__name__)
contextual_logger = get_contextual_logger(__name__)


class ConnectionManager:
    """
    Manages the MongoDB client lifecycle.

    Example:
        with ConnectionManager(DemoConfig.from_env()) as session:
            collection = session.collection("package")
    """

    def __init__(self, config: DemoConfig) -> None:
        """
        Initialize the connection manager.

        Args:
            config: Validated connection settings
        """
        self.config = config

        # Connection state
        self._pool: DedicatedClientPool | None = None
        self._session: LogicalSession | None = None

    def _build_client(self) -> MongoClient:
        """Client for one logical session: its pool never grows past one connection."""
        config = self.config
        return MongoClient(
            host=config.host,
            port=config.port,
            username=config.account_name,
            password=config.password,
            authSource=config.database_name,
            tls=True,
            connectTimeoutMS=config.connect_timeout_ms,
            serverSelectionTimeoutMS=config.connect_timeout_ms,
            maxPoolSize=1,
            appname=APP_NAME,
            w=1,
            retryWrites=False,
        )

    def connect(self) -> LogicalSession:
        """
        Connect to the endpoint and return the primary logical session.

        The connection is verified with a ping before the session is handed
        out. Calling connect() again returns the same session.

        Raises:
            InitializationError: If the connection cannot be established
        """
        if self._session is not None and not self._session.closed:
            logger.warning("ConnectionManager already connected. Reusing existing session.")
            return self._session

        start_time = time.time()
        contextual_logger.info(
            "Connecting to Cosmos DB",
            extra={
                "address": self.config.address,
                "db_name": self.config.database_name,
                "connect_timeout_ms": self.config.connect_timeout_ms,
            },
        )

        pool = DedicatedClientPool(self._build_client, max_clients=self.config.max_pool_size)
        client = None
        try:
            client = pool.acquire()
            client.admin.command("ping")
        except (
            ConnectionFailure,
            ServerSelectionTimeoutError,
            OperationFailure,
            PyMongoConfigurationError,
        ) as e:
            if client is not None:
                pool.release(client)
            duration_ms = (time.time() - start_time) * 1000
            record_operation("connection.connect", duration_ms, success=False)
            contextual_logger.critical(
                "Cosmos DB connection failed",
                extra={
                    "error_type": type(e).__name__,
                    "error": str(e),
                    "duration_ms": round(duration_ms, 2),
                },
            )
            raise InitializationError(
                f"Failed to connect to Cosmos DB: {e}",
                address=self.config.address,
                db_name=self.config.database_name,
                context={"error_type": type(e).__name__},
            ) from e

        self._pool = pool
        self._session = LogicalSession(
            client, self.config.database_name, label="primary", pool=pool
        )

        duration_ms = (time.time() - start_time) * 1000
        record_operation("connection.connect", duration_ms, success=True)
        contextual_logger.info(
            "Cosmos DB connection established",
            extra={
                "db_name": self.config.database_name,
                "max_connections": self.config.max_pool_size,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return self._session

    def close(self) -> None:
        """
        Close the primary session and every dedicated client still open.

        This method is idempotent - it's safe to call multiple times.
        """
        if self._session is None:
            return

        self._session.close()
        self._pool.close()
        self._session = None
        self._pool = None
        contextual_logger.info("Cosmos DB connection closed")

    @property
    def session(self) -> LogicalSession:
        """
        The primary logical session.

        Raises:
            RuntimeError: If connect() has not been called
        """
        if self._session is None:
            raise RuntimeError("ConnectionManager not connected. Call connect() first.")
        return self._session

    @property
    def connected(self) -> bool:
        return self._session is not None and not self._session.closed

    def __enter__(self) -> LogicalSession:
        return self.connect()

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
