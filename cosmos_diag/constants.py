"""
Constants for COSMOS_DIAG.

This module contains the shared constants used across the codebase to avoid
magic numbers and keep the Cosmos DB endpoint details in one place.
"""

from typing import Final

# ============================================================================
# ENDPOINT CONSTANTS
# ============================================================================

DEFAULT_HOST_SUFFIX: Final[str] = "documents.azure.com"
"""Domain appended to the account name to form the Cosmos DB host."""

DEFAULT_PORT: Final[int] = 10255
"""Port of the Cosmos DB MongoDB API endpoint."""

DEFAULT_CONNECT_TIMEOUT_MS: Final[int] = 60000  # 60 seconds
"""Upper bound on connection establishment time (milliseconds)."""

DEFAULT_MAX_POOL_SIZE: Final[int] = 10
"""Default upper bound on logical sessions open at once (one connection each)."""

APP_NAME: Final[str] = "COSMOS_DIAG"
"""Application name reported to the server."""

# ============================================================================
# DATA CONSTANTS
# ============================================================================

DEFAULT_COLLECTION_NAME: Final[str] = "package"
"""Collection used by the demonstration flows."""

LAST_REQUEST_STATISTICS_COMMAND: Final[str] = "getLastRequestStatistics"
"""Cosmos DB command returning cost and duration of the last request."""

# ============================================================================
# ENVIRONMENT VARIABLES
# ============================================================================

ENV_ACCOUNT_NAME: Final[str] = "AZURE_DATABASE"
ENV_PASSWORD: Final[str] = "AZURE_DATABASE_PASSWORD"
ENV_DATABASE_NAME: Final[str] = "AZURE_DATABASE_NAME"
ENV_COLLECTION_NAME: Final[str] = "AZURE_COLLECTION_NAME"
ENV_HOST_SUFFIX: Final[str] = "AZURE_COSMOS_HOST_SUFFIX"
ENV_PORT: Final[str] = "AZURE_COSMOS_PORT"
ENV_CONNECT_TIMEOUT_MS: Final[str] = "AZURE_CONNECT_TIMEOUT_MS"
ENV_MAX_POOL_SIZE: Final[str] = "MONGO_MAX_POOL_SIZE"

# ============================================================================
# OUTPUT
# ============================================================================

REPORT_SEPARATOR: Final[str] = "-------------------------"
"""Line printed after each statistics report."""
