"""
Database layer.

Provides the connection manager, the pool of dedicated connections and the
logical sessions that hold them.
"""

from .connection import ConnectionManager
from .pool import DedicatedClientPool
from .session import SAFE_WRITE_CONCERN, LogicalSession

__all__ = [
    "ConnectionManager",
    "DedicatedClientPool",
    "LogicalSession",
    "SAFE_WRITE_CONCERN",
]
