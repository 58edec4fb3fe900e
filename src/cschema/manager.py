"""
System manager for cschema.

Makes schema changes to a running cluster and answers questions about the
cluster's state and configuration. Every schema change waits until all nodes
report the same schema version before returning.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from .config import CSchemaConfig
from .exceptions import NotFoundError, ValidationError
from .schema.agreement import SchemaAgreementPoller, SchemaVersionView
from .schema.columns import ColumnMetadataEditor
from .schema.definitions import (
    KEEP,
    ColumnFamilyDefinition,
    IndexType,
    KeyspaceDefinition,
)
from .schema.merger import DefinitionMerger
from .transport.base import SchemaTransport
from .transport.factory import TransportFactory


logger = logging.getLogger(__name__)


class SystemManager:
    """
    Creates, alters and drops keyspaces, column families and column indexes.

    The manager owns one transport for its lifetime and is not safe for use
    by concurrent callers. Use it as an async context manager to connect and
    close the transport:

        async with SystemManager.from_config(config) as sys:
            await sys.create_keyspace("Keyspace1", {"replication_factor": 1})
            await sys.create_column_family("Keyspace1", "Users")
            await sys.create_index("Keyspace1", "Users", "name", "UTF8Type")

    Remote failures propagate unmodified and are never retried.
    """

    def __init__(
        self,
        transport: SchemaTransport,
        agreement_interval: float = 0.1,
        agreement_timeout: Optional[float] = None,
    ):
        self.transport = transport
        self.merger = DefinitionMerger()
        self.editor = ColumnMetadataEditor()
        self.poller = SchemaAgreementPoller(
            transport, interval=agreement_interval, timeout=agreement_timeout
        )

    @classmethod
    def from_config(cls, config: CSchemaConfig) -> "SystemManager":
        """Build a manager and its transport from configuration."""
        transport = TransportFactory.create_transport(config.transport)
        return cls(
            transport,
            agreement_interval=config.agreement.interval,
            agreement_timeout=config.agreement.timeout,
        )

    async def connect(self) -> None:
        await self.transport.connect()

    async def close(self) -> None:
        """Closes the underlying connection."""
        await self.transport.close()

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def wait_for_agreement(self, timeout=KEEP) -> SchemaVersionView:
        """Block until every node reports the same schema version."""
        return await self.poller.wait_for_agreement(timeout=timeout)

    # Keyspaces

    async def create_keyspace(
        self,
        keyspace: str,
        attrs: Optional[Mapping[str, Any]] = None,
        timeout=KEEP,
    ) -> KeyspaceDefinition:
        """
        Creates a new keyspace.

        Args:
            keyspace: The keyspace name
            attrs: Attribute name to value mapping. Common attributes are
                "strategy_class", "strategy_options" and "durable_writes".
                By default SimpleStrategy is used with a replication factor
                of 1.
            timeout: Seconds to wait for schema agreement

        Returns:
            The submitted definition
        """
        ksdef = self.merger.merge_keyspace(keyspace, attrs)
        logger.info(f"Creating keyspace '{keyspace}' with {ksdef.strategy_class}")
        await self.transport.add_keyspace(ksdef)
        await self.wait_for_agreement(timeout)
        return ksdef

    async def alter_keyspace(
        self,
        keyspace: str,
        attrs: Mapping[str, Any],
        timeout=KEEP,
    ) -> KeyspaceDefinition:
        """
        Modifies a keyspace's properties.

        Attributes not named in ``attrs`` keep their current values. Column
        family definitions are not re-sent.
        """
        current = await self.transport.describe_keyspace(keyspace)
        ksdef = self.merger.merge_keyspace(keyspace, attrs, existing=current)
        logger.info(f"Altering keyspace '{keyspace}': {sorted(attrs)}")
        await self.transport.update_keyspace(ksdef)
        await self.wait_for_agreement(timeout)
        return ksdef

    async def drop_keyspace(self, keyspace: str, timeout=KEEP) -> None:
        """Drops a keyspace."""
        logger.info(f"Dropping keyspace '{keyspace}'")
        await self.transport.drop_keyspace(keyspace)
        await self.wait_for_agreement(timeout)

    # Column families

    async def create_column_family(
        self,
        keyspace: str,
        column_family: str,
        attrs: Optional[Mapping[str, Any]] = None,
        timeout=KEEP,
    ) -> ColumnFamilyDefinition:
        """
        Creates a column family.

        Args:
            keyspace: The keyspace containing the column family
            column_family: The name of the column family
            attrs: Attribute name to value mapping, e.g.
                {"comparator_type": "AsciiType", "gc_grace_seconds": 3600}
            timeout: Seconds to wait for schema agreement

        Returns:
            The submitted definition
        """
        await self.transport.select_keyspace(keyspace)
        cfdef = self.merger.merge_column_family(keyspace, column_family, attrs)
        logger.info(f"Creating column family {cfdef.full_name}")
        await self.transport.add_column_family(cfdef)
        await self.wait_for_agreement(timeout)
        return cfdef

    async def get_column_family(
        self, keyspace: str, column_family: str
    ) -> ColumnFamilyDefinition:
        """
        Fetch a column family definition from its keyspace.

        Raises:
            NotFoundError: If the keyspace or column family does not exist
        """
        ksdef = await self.transport.describe_keyspace(keyspace)
        cfdef = ksdef.get_column_family(column_family)
        if cfdef is None:
            raise NotFoundError("column family", f"{keyspace}.{column_family}")
        return cfdef

    async def alter_column_family(
        self,
        keyspace: str,
        column_family: str,
        attrs: Mapping[str, Any],
        timeout=KEEP,
    ) -> ColumnFamilyDefinition:
        """Modifies a column family's attributes."""
        current = await self.get_column_family(keyspace, column_family)
        cfdef = self.merger.merge_column_family(
            keyspace, column_family, attrs, existing=current
        )
        logger.info(f"Altering column family {cfdef.full_name}: {sorted(attrs)}")
        await self.transport.select_keyspace(cfdef.keyspace)
        await self.transport.update_column_family(cfdef)
        await self.wait_for_agreement(timeout)
        return cfdef

    async def drop_column_family(
        self, keyspace: str, column_family: str, timeout=KEEP
    ) -> None:
        """Drops a column family from a keyspace."""
        logger.info(f"Dropping column family {keyspace}.{column_family}")
        await self.transport.select_keyspace(keyspace)
        await self.transport.drop_column_family(column_family)
        await self.wait_for_agreement(timeout)

    async def truncate_column_family(self, keyspace: str, column_family: str) -> None:
        """
        Marks all data in a column family as deleted.

        Succeeds only if every node in the cluster is available; otherwise
        the transport raises UnavailableError. Truncation is a data
        operation, so there is no schema agreement wait.
        """
        logger.info(f"Truncating column family {keyspace}.{column_family}")
        await self.transport.select_keyspace(keyspace)
        await self.transport.truncate(column_family)

    # Columns

    async def create_index(
        self,
        keyspace: str,
        column_family: str,
        column: Any,
        data_type=KEEP,
        index_name: Optional[str] = None,
        index_type: IndexType = IndexType.KEYS,
        timeout=KEEP,
    ) -> ColumnFamilyDefinition:
        """
        Adds an index to a column family.

        Args:
            keyspace: The keyspace containing the column family
            column_family: The column family name
            column: The name of the column to index
            data_type: The data type of the indexed values; left unchanged
                when omitted
            index_name: Optional name for the index
            index_type: The kind of index, KEYS by default
            timeout: Seconds to wait for schema agreement

        Raises:
            ValidationError: If index_type is not a known index kind
        """
        try:
            index_type = IndexType(index_type)
        except (ValueError, TypeError):
            raise ValidationError(f"Invalid index type: {index_type!r}")

        logger.info(
            f"Creating {index_type.value} index on "
            f"{keyspace}.{column_family}[{column!r}]"
        )
        return await self._alter_column(
            keyspace, column_family, column,
            data_type=data_type, index_type=index_type, index_name=index_name,
            timeout=timeout,
        )

    async def drop_index(
        self, keyspace: str, column_family: str, column: Any, timeout=KEEP
    ) -> ColumnFamilyDefinition:
        """Drops the index on a column, keeping its validation class."""
        logger.info(f"Dropping index on {keyspace}.{column_family}[{column!r}]")
        return await self._alter_column(
            keyspace, column_family, column,
            data_type=KEEP, index_type=None, index_name=None,
            timeout=timeout,
        )

    async def alter_column(
        self,
        keyspace: str,
        column_family: str,
        column: Any,
        data_type: str,
        timeout=KEEP,
    ) -> ColumnFamilyDefinition:
        """Changes or sets the validation class of a single column."""
        logger.info(f"Setting {keyspace}.{column_family}[{column!r}] to {data_type}")
        return await self._alter_column(
            keyspace, column_family, column, data_type=data_type, timeout=timeout
        )

    async def _alter_column(
        self,
        keyspace: str,
        column_family: str,
        column: Any,
        data_type=KEEP,
        index_type=KEEP,
        index_name=KEEP,
        timeout=KEEP,
    ) -> ColumnFamilyDefinition:
        await self.transport.select_keyspace(keyspace)
        current = await self.get_column_family(keyspace, column_family)
        cfdef = self.editor.edit(
            current, column,
            data_type=data_type, index_type=index_type, index_name=index_name,
        )
        await self.transport.update_column_family(cfdef)
        await self.wait_for_agreement(timeout)
        return cfdef

    # Cluster introspection

    async def describe_ring(self, keyspace: str) -> List[Dict[str, Any]]:
        """Describes the token ranges and the nodes owning them."""
        return await self.transport.describe_ring(keyspace)

    async def describe_cluster_name(self) -> str:
        return await self.transport.describe_cluster_name()

    async def describe_version(self) -> str:
        """
        Gives the RPC API version of the cluster.

        Note that this is different than the storage engine's release version.
        """
        return await self.transport.describe_version()

    async def describe_schema_versions(self) -> Dict[str, List[str]]:
        """
        Describes what schema version each node currently has.

        More than one version indicates the cluster has not converged.
        """
        return await self.transport.describe_schema_versions()

    async def describe_partitioner(self) -> str:
        return await self.transport.describe_partitioner()

    async def describe_snitch(self) -> str:
        return await self.transport.describe_snitch()

    async def describe_keyspace(self, keyspace: str) -> KeyspaceDefinition:
        """Returns the keyspace's settings and its column families."""
        return await self.transport.describe_keyspace(keyspace)

    async def describe_keyspaces(self) -> List[KeyspaceDefinition]:
        """Like describe_keyspace(), but for all keyspaces."""
        return await self.transport.describe_keyspaces()
