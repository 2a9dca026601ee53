"""
Custom exceptions for COSMOS_DIAG.

Library code raises these; only the command line entry point decides
whether a failure is logged and turned into a process exit code.
"""

from typing import Any, Dict, Optional


class CosmosDiagError(RuntimeError):
    """
    Base exception for COSMOS_DIAG errors.

    Attributes:
        message: Error message
        context: Optional dictionary with additional context (operation,
                 collection_name, etc.)
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            context: Optional dictionary with additional context information
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """Return formatted error message with context if available."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (context: {context_str})"
        return self.message


class ConfigurationError(CosmosDiagError):
    """
    Raised when configuration is invalid or missing.

    Attributes:
        message: Error message
        config_key: Configuration key that caused the error (if available)
        config_value: Configuration value that caused the error (if available)
        context: Additional context information
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if config_key:
            context["config_key"] = config_key
        if config_value is not None:
            context["config_value"] = config_value
        super().__init__(message, context=context)
        self.config_key = config_key
        self.config_value = config_value


class InitializationError(CosmosDiagError):
    """
    Raised when the connection to the store cannot be established.

    The credential is never part of the message or the context.

    Attributes:
        message: Error message
        address: host:port that was dialed (if available)
        db_name: Database name (if available)
        context: Additional context information
    """

    def __init__(
        self,
        message: str,
        address: Optional[str] = None,
        db_name: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if address:
            context["address"] = address
        if db_name:
            context["db_name"] = db_name
        super().__init__(message, context=context)
        self.address = address
        self.db_name = db_name


class SessionClosedError(CosmosDiagError):
    """Raised when a closed logical session is used."""


class OperationError(CosmosDiagError):
    """
    Raised when a CRUD operation fails.

    Attributes:
        message: Error message
        operation: Operation name (insert, find, update, delete)
        collection_name: Collection the operation ran against
        context: Additional context information
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        collection_name: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if operation:
            context["operation"] = operation
        if collection_name:
            context["collection"] = collection_name
        super().__init__(message, context=context)
        self.operation = operation
        self.collection_name = collection_name


class DocumentNotFoundError(OperationError):
    """
    Raised when no document matches a filter.

    Attributes:
        filter: The filter that matched nothing
    """

    def __init__(
        self,
        message: str,
        filter: Optional[Dict[str, Any]] = None,
        operation: Optional[str] = None,
        collection_name: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if filter is not None:
            context["filter"] = filter
        super().__init__(
            message, operation=operation, collection_name=collection_name, context=context
        )
        self.filter = filter


class DiagnosticsError(CosmosDiagError):
    """Raised when the last request statistics cannot be read."""


class ConnectionLimitError(CosmosDiagError):
    """
    Raised when every dedicated connection is already held by a logical session.

    Attributes:
        max_connections: Configured upper bound (MONGO_MAX_POOL_SIZE)
    """

    def __init__(
        self,
        message: str,
        max_connections: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if max_connections is not None:
            context["max_connections"] = max_connections
        super().__init__(message, context=context)
        self.max_connections = max_connections
