"""
Configuration management for COSMOS_DIAG.

DemoConfig is built once (usually from the environment) and handed to the
ConnectionManager. Constructor arguments take precedence over environment
variables so tests can build configurations without touching os.environ.
"""

import os

from .constants import (
    DEFAULT_COLLECTION_NAME,
    DEFAULT_CONNECT_TIMEOUT_MS,
    DEFAULT_HOST_SUFFIX,
    DEFAULT_MAX_POOL_SIZE,
    DEFAULT_PORT,
    ENV_ACCOUNT_NAME,
    ENV_COLLECTION_NAME,
    ENV_CONNECT_TIMEOUT_MS,
    ENV_DATABASE_NAME,
    ENV_HOST_SUFFIX,
    ENV_MAX_POOL_SIZE,
    ENV_PASSWORD,
    ENV_PORT,
)
from .exceptions import ConfigurationError


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(
            f"{name} must be an integer", config_key=name, config_value=raw
        ) from e


class DemoConfig:
    """
    Connection settings for a Cosmos DB account's MongoDB API.

    Example:
        # Using environment variables
        config = DemoConfig.from_env()

        # Or using direct parameters
        config = DemoConfig(account_name="my-account", password="secret")
        config.validate()
    """

    def __init__(
        self,
        account_name: str | None = None,
        password: str | None = None,
        database_name: str | None = None,
        collection_name: str | None = None,
        host_suffix: str | None = None,
        port: int | None = None,
        connect_timeout_ms: int | None = None,
        max_pool_size: int | None = None,
    ):
        """
        Initialize configuration.

        Args:
            account_name: Cosmos DB account name (defaults to AZURE_DATABASE)
            password: Account key (defaults to AZURE_DATABASE_PASSWORD)
            database_name: Database name (defaults to AZURE_DATABASE_NAME, then account_name)
            collection_name: Collection name (defaults to AZURE_COLLECTION_NAME or "package")
            host_suffix: Endpoint domain (defaults to AZURE_COSMOS_HOST_SUFFIX)
            port: Endpoint port (defaults to AZURE_COSMOS_PORT or 10255)
            connect_timeout_ms: Connection timeout (defaults to AZURE_CONNECT_TIMEOUT_MS or 60000)
            max_pool_size: Maximum dedicated connections, one per open logical session
                (defaults to MONGO_MAX_POOL_SIZE or 10)
        """
        self.account_name = account_name or os.getenv(ENV_ACCOUNT_NAME, "")
        self.password = password or os.getenv(ENV_PASSWORD, "")
        self.database_name = (
            database_name or os.getenv(ENV_DATABASE_NAME, "") or self.account_name
        )
        self.collection_name = collection_name or os.getenv(
            ENV_COLLECTION_NAME, DEFAULT_COLLECTION_NAME
        )
        self.host_suffix = host_suffix or os.getenv(ENV_HOST_SUFFIX, DEFAULT_HOST_SUFFIX)
        self.port = port if port is not None else _int_from_env(ENV_PORT, DEFAULT_PORT)
        self.connect_timeout_ms = (
            connect_timeout_ms
            if connect_timeout_ms is not None
            else _int_from_env(ENV_CONNECT_TIMEOUT_MS, DEFAULT_CONNECT_TIMEOUT_MS)
        )
        self.max_pool_size = (
            max_pool_size
            if max_pool_size is not None
            else _int_from_env(ENV_MAX_POOL_SIZE, DEFAULT_MAX_POOL_SIZE)
        )

    @classmethod
    def from_env(cls) -> "DemoConfig":
        """
        Build a configuration from the process environment and validate it.

        Raises:
            ConfigurationError: If a required variable is missing or a value is invalid
        """
        config = cls()
        config.validate()
        return config

    @property
    def host(self) -> str:
        """Endpoint host derived from the account name."""
        return f"{self.account_name}.{self.host_suffix}"

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ConfigurationError: If required configuration is missing or invalid
        """
        if not self.account_name:
            raise ConfigurationError(
                f"account_name is required (set {ENV_ACCOUNT_NAME} environment variable "
                "or pass directly)",
                config_key=ENV_ACCOUNT_NAME,
            )

        if not self.password:
            raise ConfigurationError(
                f"password is required (set {ENV_PASSWORD} environment variable "
                "or pass directly)",
                config_key=ENV_PASSWORD,
            )

        if not self.collection_name:
            raise ConfigurationError("collection_name must not be empty")

        if not 0 < self.port < 65536:
            raise ConfigurationError(
                f"port must be between 1 and 65535, got {self.port}",
                config_key="port",
                config_value=self.port,
            )

        if self.connect_timeout_ms < 1000:
            raise ConfigurationError(
                f"connect_timeout_ms must be >= 1000, got {self.connect_timeout_ms}",
                config_key="connect_timeout_ms",
                config_value=self.connect_timeout_ms,
            )

        if self.max_pool_size < 1:
            raise ConfigurationError(
                f"max_pool_size must be >= 1, got {self.max_pool_size}",
                config_key="max_pool_size",
                config_value=self.max_pool_size,
            )

    def __repr__(self) -> str:
        return (
            f"DemoConfig(account_name={self.account_name!r}, "
            f"database_name={self.database_name!r}, "
            f"collection_name={self.collection_name!r}, address={self.address!r}, "
            f"password='***')"
        )
