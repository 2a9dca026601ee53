"""
COSMOS_DIAG - Cosmos DB request diagnostics

Connects to an Azure Cosmos DB account through its MongoDB API, runs CRUD
operations and reports the request charge of each one.
"""

from .config import DemoConfig
from .database import ConnectionManager, LogicalSession
from .diagnostics import (DiagnosticsReporter, RequestStatistics,
                          StatisticsReport, fetch_last_request_statistics)
from .repositories import MongoRepository, Package

__version__ = "0.1.0"

__all__ = [
    # Configuration
    "DemoConfig",
    # Database
    "ConnectionManager",
    "LogicalSession",
    # Repositories
    "MongoRepository",
    "Package",
    # Diagnostics
    "DiagnosticsReporter",
    "RequestStatistics",
    "StatisticsReport",
    "fetch_last_request_statistics",
]
