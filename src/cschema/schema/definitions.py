"""
Schema definition value objects.

Keyspace, column family and column definitions as submitted to and returned
by the cluster. Known engine attributes are typed fields validated on
assignment; anything else is carried in ``extra_options`` and forwarded
untouched.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _Keep:
    """Sentinel for "leave this value as it is", distinct from ``None``."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "KEEP"


KEEP: Any = _Keep()


class StrategyClass:
    """Replication strategy class names."""

    SIMPLE_STRATEGY = "org.apache.cassandra.locator.SimpleStrategy"
    NETWORK_TOPOLOGY_STRATEGY = "org.apache.cassandra.locator.NetworkTopologyStrategy"
    OLD_NETWORK_TOPOLOGY_STRATEGY = "org.apache.cassandra.locator.OldNetworkTopologyStrategy"
    LOCAL_STRATEGY = "org.apache.cassandra.locator.LocalStrategy"


class ColumnType(str, Enum):
    """Column family layouts."""

    STANDARD = "Standard"
    SUPER = "Super"


class IndexType(str, Enum):
    """Secondary index kinds. No index is represented by ``None``."""

    KEYS = "KEYS"
    CUSTOM = "CUSTOM"
    COMPOSITES = "COMPOSITES"


class Definition(BaseModel):
    """Base for schema definitions."""

    model_config = ConfigDict(validate_assignment=True, use_enum_values=False)

    extra_options: Dict[str, Any] = Field(
        default_factory=dict,
        description="Engine attributes this client has no typed field for",
    )

    @staticmethod
    def _stringify_options(value: Any) -> Any:
        # Option maps travel as string to string on the wire.
        if isinstance(value, dict):
            return {str(k): str(v) for k, v in value.items()}
        return value

    @classmethod
    def known_fields(cls) -> List[str]:
        """Names of the typed attributes, excluding the opaque options bag."""
        return [name for name in cls.model_fields if name != "extra_options"]

    def set_attribute(self, name: str, value: Any) -> None:
        """Set a typed attribute, or stash an unknown one in ``extra_options``."""
        if name in self.known_fields():
            setattr(self, name, value)
        else:
            self.extra_options[name] = value

    def get_attribute(self, name: str, default: Any = None) -> Any:
        if name in self.known_fields():
            return getattr(self, name)
        return self.extra_options.get(name, default)


class ColumnMetadata(Definition):
    """Validation and indexing metadata for a single column."""

    name: bytes = Field(..., description="Packed column name")
    validation_class: Optional[str] = Field(None, description="Value type")
    index_type: Optional[IndexType] = Field(None, description="Index kind")
    index_name: Optional[str] = Field(None, description="Index name")
    index_options: Optional[Dict[str, str]] = Field(None, description="Index options")

    @field_validator("index_options", mode="before")
    @classmethod
    def stringify_index_options(cls, v: Any) -> Any:
        return cls._stringify_options(v)

    @property
    def is_indexed(self) -> bool:
        return self.index_type is not None


class ColumnFamilyDefinition(Definition):
    """Column family (table) definition."""

    keyspace: str = Field(..., description="Owning keyspace")
    name: str = Field(..., description="Column family name")
    column_type: ColumnType = Field(ColumnType.STANDARD, description="Standard or Super")
    comparator_type: str = Field("BytesType", description="Column name type")
    subcomparator_type: Optional[str] = Field(None, description="Subcolumn name type")
    default_validation_class: Optional[str] = Field(None, description="Default value type")
    key_validation_class: Optional[str] = Field(None, description="Row key type")
    comment: Optional[str] = Field(None, description="Free-form comment")
    read_repair_chance: Optional[float] = Field(None, description="Read repair probability")
    gc_grace_seconds: Optional[int] = Field(None, description="Tombstone grace period")
    min_compaction_threshold: Optional[int] = Field(None, description="Min sstables to compact")
    max_compaction_threshold: Optional[int] = Field(None, description="Max sstables to compact")
    replicate_on_write: Optional[bool] = Field(None, description="Replicate counter writes")
    compaction_strategy: Optional[str] = Field(None, description="Compaction strategy class")
    compaction_strategy_options: Optional[Dict[str, str]] = Field(
        None, description="Compaction strategy options"
    )
    compression_options: Optional[Dict[str, str]] = Field(
        None, description="Compression options"
    )
    id: Optional[int] = Field(None, description="Server-assigned id")
    column_metadata: List[ColumnMetadata] = Field(
        default_factory=list, description="Per-column metadata"
    )

    @field_validator("compaction_strategy_options", "compression_options", mode="before")
    @classmethod
    def stringify_options(cls, v: Any) -> Any:
        return cls._stringify_options(v)

    @property
    def full_name(self) -> str:
        return f"{self.keyspace}.{self.name}"

    @property
    def column_name_type(self) -> Optional[str]:
        """Type used to encode column names in metadata."""
        if self.column_type == ColumnType.SUPER:
            return self.subcomparator_type
        return self.comparator_type

    def find_column(self, packed_name: bytes) -> Optional[ColumnMetadata]:
        for column in self.column_metadata:
            if column.name == packed_name:
                return column
        return None


class KeyspaceDefinition(Definition):
    """Keyspace definition."""

    name: str = Field(..., description="Keyspace name")
    strategy_class: str = Field(
        StrategyClass.SIMPLE_STRATEGY, description="Replication strategy class"
    )
    strategy_options: Dict[str, str] = Field(
        default_factory=lambda: {"replication_factor": "1"},
        description="Replication strategy options",
    )
    replication_factor: Optional[int] = Field(
        None, description="Deprecated top-level replication factor"
    )
    durable_writes: bool = Field(True, description="Write to the commit log")
    cf_defs: List[ColumnFamilyDefinition] = Field(
        default_factory=list, description="Column families in this keyspace"
    )

    @field_validator("strategy_options", mode="before")
    @classmethod
    def stringify_strategy_options(cls, v: Any) -> Any:
        return cls._stringify_options(v)

    def get_column_family(self, name: str) -> Optional[ColumnFamilyDefinition]:
        for cfdef in self.cf_defs:
            if cfdef.name == name:
                return cfdef
        return None

    @property
    def column_family_names(self) -> List[str]:
        return [cfdef.name for cfdef in self.cf_defs]
