"""
In-process cluster transport.

Simulates a small cluster holding schema definitions in memory. Schema
changes are applied on the coordinator immediately and reach the remaining
nodes only after a configurable number of version polls, so callers see the
same temporary disagreement a real cluster shows.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

from .base import SchemaTransport
from ..config import TransportConfig
from ..exceptions import (
    InvalidRequestError,
    NotFoundError,
    TransportError,
    UnavailableError,
    ValidationError,
)
from ..schema.agreement import UNREACHABLE
from ..schema.definitions import ColumnFamilyDefinition, Definition, KeyspaceDefinition
from ..schema.types import get_type_for


logger = logging.getLogger(__name__)

SYSTEM_KEYSPACE = "system"
TOKEN_SPACE = 2 ** 64


def node_addresses(node_count: int) -> List[str]:
    """Addresses of the simulated nodes, coordinator first."""
    return [f"127.0.0.{i + 1}" for i in range(node_count)]


class InMemoryTransport(SchemaTransport):
    """Schema transport backed by a simulated in-process cluster."""

    def __init__(self, config: TransportConfig):
        super().__init__(config)
        self._connected = False
        self._keyspace: Optional[str] = None
        self._keyspaces: Dict[str, KeyspaceDefinition] = {}
        self._next_cf_id = 1000

        self._nodes = node_addresses(config.node_count)
        self._version = str(uuid.uuid1())
        self._previous_version = self._version
        self._lagging_polls = 0

        # Names of calls made, in order
        self.call_log: List[str] = []

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def nodes(self) -> List[str]:
        return list(self._nodes)

    @property
    def schema_version(self) -> str:
        return self._version

    @property
    def selected_keyspace(self) -> Optional[str]:
        return self._keyspace

    async def connect(self) -> None:
        if self._connected:
            return
        logger.info(f"Connecting to in-memory cluster '{self.config.cluster_name}' at {self.server}")
        self._connected = True

    async def close(self) -> None:
        if self._connected:
            logger.info(f"Closing connection to {self.server}")
        self._connected = False
        self._keyspace = None

    def _record(self, call: str) -> None:
        if not self._connected:
            raise TransportError(f"Transport to {self.server} is not connected")
        self.call_log.append(call)

    def _bump_version(self) -> str:
        self._previous_version = self._version
        self._version = str(uuid.uuid1())
        self._lagging_polls = self.config.propagation_polls
        return self._version

    def _check_options(self, definition: Definition) -> None:
        unknown = [
            name for name in definition.extra_options
            if name not in self.config.accepted_options
        ]
        if unknown:
            raise InvalidRequestError(
                f"Unrecognized {type(definition).__name__} attribute(s): {', '.join(sorted(unknown))}"
            )

    def _check_column_family(self, cfdef: ColumnFamilyDefinition) -> None:
        self._check_options(cfdef)
        for column in cfdef.column_metadata:
            self._check_options(column)
        try:
            get_type_for(cfdef.comparator_type)
            if cfdef.subcomparator_type is not None:
                get_type_for(cfdef.subcomparator_type)
        except ValidationError as e:
            raise InvalidRequestError(f"Invalid comparator for {cfdef.full_name}: {e}") from e

        names = [column.name for column in cfdef.column_metadata]
        if len(names) != len(set(names)):
            raise InvalidRequestError(f"Duplicate column metadata in {cfdef.full_name}")

        index_names = [c.index_name for c in cfdef.column_metadata if c.index_name]
        if len(index_names) != len(set(index_names)):
            raise InvalidRequestError(f"Duplicate index name in {cfdef.full_name}")

    def _require_keyspace(self, keyspace: str) -> KeyspaceDefinition:
        if keyspace not in self._keyspaces:
            raise InvalidRequestError(f"Keyspace '{keyspace}' does not exist")
        return self._keyspaces[keyspace]

    def _require_selected(self, keyspace: Optional[str] = None) -> KeyspaceDefinition:
        if self._keyspace is None:
            raise InvalidRequestError("No keyspace has been selected")
        if keyspace is not None and keyspace != self._keyspace:
            raise InvalidRequestError(
                f"Column family keyspace '{keyspace}' does not match "
                f"selected keyspace '{self._keyspace}'"
            )
        return self._require_keyspace(self._keyspace)

    def _assign_id(self, cfdef: ColumnFamilyDefinition) -> None:
        cfdef.id = self._next_cf_id
        self._next_cf_id += 1

    async def add_keyspace(self, ksdef: KeyspaceDefinition) -> str:
        self._record("add_keyspace")
        if not ksdef.name:
            raise InvalidRequestError("Keyspace name must not be empty")
        if ksdef.name in self._keyspaces or ksdef.name == SYSTEM_KEYSPACE:
            raise InvalidRequestError(f"Keyspace '{ksdef.name}' already exists")
        self._check_options(ksdef)

        stored = ksdef.model_copy(deep=True)
        for cfdef in stored.cf_defs:
            if cfdef.keyspace != stored.name:
                raise InvalidRequestError(
                    f"Column family {cfdef.full_name} does not belong to keyspace '{stored.name}'"
                )
            self._check_column_family(cfdef)
            self._assign_id(cfdef)

        self._keyspaces[stored.name] = stored
        return self._bump_version()

    async def update_keyspace(self, ksdef: KeyspaceDefinition) -> str:
        self._record("update_keyspace")
        current = self._require_keyspace(ksdef.name)
        if ksdef.cf_defs:
            raise InvalidRequestError(
                "Keyspace update must not contain any column family definitions"
            )
        self._check_options(ksdef)

        stored = ksdef.model_copy(deep=True)
        stored.cf_defs = current.cf_defs
        self._keyspaces[stored.name] = stored
        return self._bump_version()

    async def drop_keyspace(self, keyspace: str) -> str:
        self._record("drop_keyspace")
        self._require_keyspace(keyspace)
        del self._keyspaces[keyspace]
        if self._keyspace == keyspace:
            self._keyspace = None
        return self._bump_version()

    async def add_column_family(self, cfdef: ColumnFamilyDefinition) -> str:
        self._record("add_column_family")
        ksdef = self._require_selected(cfdef.keyspace)
        if ksdef.get_column_family(cfdef.name) is not None:
            raise InvalidRequestError(f"Column family {cfdef.full_name} already exists")
        self._check_column_family(cfdef)

        stored = cfdef.model_copy(deep=True)
        self._assign_id(stored)
        ksdef.cf_defs.append(stored)
        return self._bump_version()

    async def update_column_family(self, cfdef: ColumnFamilyDefinition) -> str:
        self._record("update_column_family")
        ksdef = self._require_selected(cfdef.keyspace)
        current = ksdef.get_column_family(cfdef.name)
        if current is None:
            raise InvalidRequestError(f"Column family {cfdef.full_name} does not exist")
        if cfdef.column_type != current.column_type:
            raise InvalidRequestError("Cannot modify column type")
        if cfdef.comparator_type != current.comparator_type:
            raise InvalidRequestError("Cannot modify comparator")
        self._check_column_family(cfdef)

        stored = cfdef.model_copy(deep=True)
        stored.id = current.id
        ksdef.cf_defs[ksdef.cf_defs.index(current)] = stored
        return self._bump_version()

    async def drop_column_family(self, column_family: str) -> str:
        self._record("drop_column_family")
        ksdef = self._require_selected()
        current = ksdef.get_column_family(column_family)
        if current is None:
            raise InvalidRequestError(
                f"Column family '{column_family}' does not exist in '{ksdef.name}'"
            )
        ksdef.cf_defs.remove(current)
        return self._bump_version()

    async def truncate(self, column_family: str) -> None:
        self._record("truncate")
        ksdef = self._require_selected()
        if ksdef.get_column_family(column_family) is None:
            raise InvalidRequestError(
                f"Column family '{column_family}' does not exist in '{ksdef.name}'"
            )
        if self.config.down_nodes:
            raise UnavailableError(
                f"Cannot truncate {ksdef.name}.{column_family} while nodes are down",
                unavailable_nodes=self.config.down_nodes,
            )
        logger.debug(f"Truncated {ksdef.name}.{column_family}")

    async def select_keyspace(self, keyspace: str) -> None:
        self._record("select_keyspace")
        self._require_keyspace(keyspace)
        self._keyspace = keyspace

    async def describe_keyspace(self, keyspace: str) -> KeyspaceDefinition:
        self._record("describe_keyspace")
        if keyspace not in self._keyspaces:
            raise NotFoundError("keyspace", keyspace)
        return self._keyspaces[keyspace].model_copy(deep=True)

    async def describe_keyspaces(self) -> List[KeyspaceDefinition]:
        self._record("describe_keyspaces")
        return [ksdef.model_copy(deep=True) for ksdef in self._keyspaces.values()]

    async def describe_schema_versions(self) -> Dict[str, List[str]]:
        self._record("describe_schema_versions")
        down = set(self.config.down_nodes)
        live = [node for node in self._nodes if node not in down]

        versions: Dict[str, List[str]] = {}
        for position, node in enumerate(live):
            lagging = self._lagging_polls > 0 and position > 0
            version = self._previous_version if lagging else self._version
            versions.setdefault(version, []).append(node)
        if down:
            versions[UNREACHABLE] = sorted(down)

        if self._lagging_polls > 0:
            self._lagging_polls -= 1
        return versions

    async def describe_ring(self, keyspace: str) -> List[Dict[str, Any]]:
        self._record("describe_ring")
        self._require_keyspace(keyspace)

        step = TOKEN_SPACE // len(self._nodes)
        ring = []
        for position, node in enumerate(self._nodes):
            start = -(TOKEN_SPACE // 2) + position * step
            ring.append({
                "start_token": str(start),
                "end_token": str(start + step),
                "endpoints": [node],
            })
        return ring

    async def describe_cluster_name(self) -> str:
        self._record("describe_cluster_name")
        return self.config.cluster_name

    async def describe_version(self) -> str:
        self._record("describe_version")
        return self.config.api_version

    async def describe_partitioner(self) -> str:
        self._record("describe_partitioner")
        return self.config.partitioner

    async def describe_snitch(self) -> str:
        self._record("describe_snitch")
        return self.config.snitch
