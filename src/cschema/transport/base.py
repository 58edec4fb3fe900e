"""
Abstract base class for schema transports.

A transport owns the connection to one cluster node and exposes the remote
schema calls the system manager is built on.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List

from ..config import TransportConfig
from ..exceptions import ValidationError
from ..schema.definitions import ColumnFamilyDefinition, KeyspaceDefinition


logger = logging.getLogger(__name__)


class SchemaTransport(ABC):
    """
    Abstract base class for all schema transports.

    Calls are made one at a time and in order on a single connection;
    implementations do not need to support concurrent callers. Mutating
    calls return the schema version id the change produced.
    """

    def __init__(self, config: TransportConfig):
        """
        Initialize the transport with configuration.

        Args:
            config: Transport configuration

        Raises:
            ValidationError: If configuration is invalid
        """
        self.config = config
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

        self._validate_config()

    def _validate_config(self) -> None:
        if self.config.credentials is not None and not self.config.credentials.username:
            raise ValidationError("Credentials require a username")

    @property
    def server(self) -> str:
        return self.config.server

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """Whether the connection is open."""

    @abstractmethod
    async def connect(self) -> None:
        """Open the connection and authenticate if credentials are set."""

    @abstractmethod
    async def close(self) -> None:
        """Close the connection."""

    # Schema changes

    @abstractmethod
    async def add_keyspace(self, ksdef: KeyspaceDefinition) -> str:
        pass

    @abstractmethod
    async def update_keyspace(self, ksdef: KeyspaceDefinition) -> str:
        pass

    @abstractmethod
    async def drop_keyspace(self, keyspace: str) -> str:
        pass

    @abstractmethod
    async def add_column_family(self, cfdef: ColumnFamilyDefinition) -> str:
        pass

    @abstractmethod
    async def update_column_family(self, cfdef: ColumnFamilyDefinition) -> str:
        pass

    @abstractmethod
    async def drop_column_family(self, column_family: str) -> str:
        """Drop a column family from the selected keyspace."""

    @abstractmethod
    async def truncate(self, column_family: str) -> None:
        """
        Remove all data from a column family in the selected keyspace.

        Raises:
            UnavailableError: If any node in the cluster is down
        """

    @abstractmethod
    async def select_keyspace(self, keyspace: str) -> None:
        """Set the keyspace later column family calls apply to."""

    # Introspection

    @abstractmethod
    async def describe_keyspace(self, keyspace: str) -> KeyspaceDefinition:
        """
        Raises:
            NotFoundError: If the keyspace does not exist
        """

    @abstractmethod
    async def describe_keyspaces(self) -> List[KeyspaceDefinition]:
        pass

    @abstractmethod
    async def describe_schema_versions(self) -> Dict[str, List[str]]:
        pass

    @abstractmethod
    async def describe_ring(self, keyspace: str) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    async def describe_cluster_name(self) -> str:
        pass

    @abstractmethod
    async def describe_version(self) -> str:
        pass

    @abstractmethod
    async def describe_partitioner(self) -> str:
        pass

    @abstractmethod
    async def describe_snitch(self) -> str:
        pass

    async def __aenter__(self):
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(server={self.config.server})"
