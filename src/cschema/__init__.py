"""
cschema: schema definition manager for column-family storage clusters.

cschema builds, merges and submits keyspace, column family and column index
changes to a running cluster, and waits for the cluster-wide schema to
converge after each change.
"""

__version__ = "0.1.0"
__author__ = "cschema Contributors"

from .config import CSchemaConfig
from .exceptions import CSchemaError, ConfigurationError, NotFoundError, SchemaError, TransportError
from .manager import SystemManager

__all__ = [
    "__version__",
    "CSchemaConfig",
    "CSchemaError",
    "ConfigurationError",
    "NotFoundError",
    "SchemaError",
    "TransportError",
    "SystemManager",
]
