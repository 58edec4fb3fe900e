"""
Schema definition package for cschema.

This package provides:
- Keyspace, column family and column metadata definitions
- Type name qualification and column name codecs
- Merging of partial attribute overrides into full definitions
- Single column metadata editing
- Schema agreement polling
"""

from .definitions import (
    KEEP,
    ColumnFamilyDefinition,
    ColumnMetadata,
    ColumnType,
    IndexType,
    KeyspaceDefinition,
    StrategyClass,
)
from .types import DataType, get_type_for, qualify_class_name, qualify_strategy_class
from .merger import DefinitionMerger
from .columns import ColumnMetadataEditor
from .agreement import SchemaAgreementPoller, SchemaVersionView

__all__ = [
    "KEEP",
    "ColumnFamilyDefinition",
    "ColumnMetadata",
    "ColumnType",
    "IndexType",
    "KeyspaceDefinition",
    "StrategyClass",
    "DataType",
    "get_type_for",
    "qualify_class_name",
    "qualify_strategy_class",
    "DefinitionMerger",
    "ColumnMetadataEditor",
    "SchemaAgreementPoller",
    "SchemaVersionView",
]
