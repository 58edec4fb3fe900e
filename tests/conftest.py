"""
Pytest configuration and shared fixtures for cschema tests.

This module provides shared fixtures and utilities for testing all cschema components.
"""

import tempfile
from typing import Any, Dict, List
from unittest.mock import AsyncMock, MagicMock

import pytest
import yaml

from cschema.config import AgreementConfig, CSchemaConfig, TransportConfig
from cschema.manager import SystemManager
from cschema.schema.definitions import (
    ColumnFamilyDefinition,
    ColumnMetadata,
    KeyspaceDefinition,
)
from cschema.transport.base import SchemaTransport
from cschema.transport.memory import InMemoryTransport


# ============================================================================
# Test Configuration Fixtures
# ============================================================================

@pytest.fixture
def sample_config_data() -> Dict[str, Any]:
    """Sample configuration as it would appear in a YAML file."""
    return {
        "transport": {
            "provider": "memory",
            "server": "cluster-node-1:9160",
            "credentials": {"username": "admin", "password": "secret"},
            "send_timeout_ms": 5000,
            "recv_timeout_ms": 10000,
            "node_count": 3,
            "propagation_polls": 2,
        },
        "agreement": {"interval": 0.01, "timeout": 5.0},
        "logging": {"level": "DEBUG"},
    }


@pytest.fixture
def sample_config(sample_config_data) -> CSchemaConfig:
    """Complete cschema configuration for testing."""
    return CSchemaConfig(**sample_config_data)


@pytest.fixture
def temp_config_file(sample_config_data) -> str:
    """Temporary configuration file for testing."""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        yaml.dump(sample_config_data, f)
        return f.name


@pytest.fixture
def transport_config() -> TransportConfig:
    """Three node simulated cluster that converges after two polls."""
    return TransportConfig(node_count=3, propagation_polls=2)


# ============================================================================
# Definition Fixtures
# ============================================================================

@pytest.fixture
def users_cfdef() -> ColumnFamilyDefinition:
    """Standard column family with one indexed UTF8 column."""
    return ColumnFamilyDefinition(
        keyspace="Keyspace1",
        name="Users",
        comparator_type="UTF8Type",
        default_validation_class="org.apache.cassandra.db.marshal.BytesType",
        gc_grace_seconds=864000,
        column_metadata=[
            ColumnMetadata(
                name=b"email",
                validation_class="org.apache.cassandra.db.marshal.UTF8Type",
                index_type="KEYS",
                index_name="users_email_idx",
            ),
            ColumnMetadata(
                name=b"age",
                validation_class="org.apache.cassandra.db.marshal.LongType",
            ),
        ],
    )


@pytest.fixture
def super_cfdef() -> ColumnFamilyDefinition:
    """Super column family whose subcolumn names are longs."""
    return ColumnFamilyDefinition(
        keyspace="Keyspace1",
        name="Timeline",
        column_type="Super",
        comparator_type="UTF8Type",
        subcomparator_type="LongType",
    )


@pytest.fixture
def keyspace_def(users_cfdef) -> KeyspaceDefinition:
    """Keyspace holding the Users column family."""
    return KeyspaceDefinition(
        name="Keyspace1",
        strategy_class="org.apache.cassandra.locator.NetworkTopologyStrategy",
        strategy_options={"dc1": "3", "dc2": "2"},
        durable_writes=False,
        cf_defs=[users_cfdef],
    )


# ============================================================================
# Transport Fixtures
# ============================================================================

@pytest.fixture
def mock_transport(keyspace_def) -> AsyncMock:
    """Mock transport whose cluster is always in agreement."""
    transport = AsyncMock(spec=SchemaTransport)
    transport.describe_keyspace.side_effect = lambda name: keyspace_def.model_copy(deep=True)
    transport.describe_schema_versions.return_value = {
        "a1b2c3d4-0000-1000-8000-000000000001": ["127.0.0.1", "127.0.0.2"]
    }
    return transport


@pytest.fixture
def mock_manager(mock_transport) -> SystemManager:
    """System manager around the mock transport."""
    return SystemManager(mock_transport, agreement_interval=0.001)


@pytest.fixture
async def memory_transport(transport_config):
    """Connected in-memory transport."""
    transport = InMemoryTransport(transport_config)
    await transport.connect()
    yield transport
    await transport.close()


@pytest.fixture
async def cluster_manager(transport_config):
    """Connected system manager around a fresh simulated cluster."""
    manager = SystemManager(
        InMemoryTransport(transport_config),
        agreement_interval=0.001,
        agreement_timeout=5.0,
    )
    async with manager:
        yield manager


def versions_sequence(disagreeing_polls: int) -> List[Dict[str, List[str]]]:
    """Version maps reporting two versions for some polls, then one."""
    split = {
        "version-new": ["127.0.0.1"],
        "version-old": ["127.0.0.2", "127.0.0.3"],
    }
    agreed = {"version-new": ["127.0.0.1", "127.0.0.2", "127.0.0.3"]}
    return [split] * disagreeing_polls + [agreed]


@pytest.fixture
def make_versions_transport():
    """Build a mock transport that converges after N polls."""
    def _make(disagreeing_polls: int) -> MagicMock:
        transport = AsyncMock(spec=SchemaTransport)
        transport.describe_schema_versions.side_effect = versions_sequence(disagreeing_polls)
        return transport
    return _make
