"""
Exception classes for cschema.
"""

from typing import Any, Dict, Optional


class CSchemaError(Exception):
    """Base exception for all cschema errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        result = self.message
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            result += f" [{details_str}]"
        if self.cause:
            result += f" (caused by: {self.cause})"
        return result


class ConfigurationError(CSchemaError):
    """Raised when there's an error in configuration."""

    pass


class ValidationError(CSchemaError):
    """Raised when a definition or value fails local validation."""

    pass


class TransportError(CSchemaError):
    """Raised when there's an error talking to the cluster."""

    pass


class RemoteRejectionError(TransportError):
    """Raised when the cluster refuses a remote call."""

    pass


class InvalidRequestError(RemoteRejectionError):
    """Raised when the cluster rejects a request as malformed or conflicting."""

    pass


class UnavailableError(RemoteRejectionError):
    """Raised when not enough nodes are reachable to serve a request."""

    def __init__(
        self,
        message: str,
        unavailable_nodes: Optional[list] = None,
    ) -> None:
        details = {}
        if unavailable_nodes:
            details["unavailable_nodes"] = ",".join(unavailable_nodes)
        super().__init__(message, details)
        self.unavailable_nodes = list(unavailable_nodes or [])


class SchemaError(CSchemaError):
    """Raised when there's an error with schema operations."""

    pass


class NotFoundError(SchemaError):
    """Raised when a named keyspace or column family does not exist."""

    def __init__(self, kind: str, name: str) -> None:
        super().__init__(f"{kind.capitalize()} '{name}' not found")
        self.kind = kind
        self.name = name


class SchemaAgreementTimeoutError(SchemaError):
    """Raised when the cluster does not settle on one schema version in time."""

    def __init__(self, timeout: float, view: Optional[Any] = None) -> None:
        details = {}
        if view is not None:
            details["versions"] = view.version_count
        super().__init__(
            f"Schema agreement not reached within {timeout}s", details
        )
        self.timeout = timeout
        self.view = view
