"""
Column metadata editing for cschema.

Locates one column's metadata entry inside a column family definition by its
packed name and replaces it with an updated copy.
"""

import logging
from typing import Any, Optional, Union

from .definitions import KEEP, ColumnFamilyDefinition, ColumnMetadata, IndexType, _Keep
from .types import get_type_for, qualify_class_name


logger = logging.getLogger(__name__)


FALLBACK_VALIDATION_CLASS = "org.apache.cassandra.db.marshal.BytesType"


class ColumnMetadataEditor:
    """Replaces or inserts a single column metadata entry."""

    def pack_column_name(self, cfdef: ColumnFamilyDefinition, column: Any) -> bytes:
        """Encode a column name with the family's column name type."""
        return get_type_for(cfdef.column_name_type).pack(column)

    def edit(
        self,
        cfdef: ColumnFamilyDefinition,
        column: Any,
        data_type: Union[str, None, _Keep] = KEEP,
        index_type: Union[IndexType, None, _Keep] = KEEP,
        index_name: Union[str, None, _Keep] = KEEP,
    ) -> ColumnFamilyDefinition:
        """
        Return a copy of ``cfdef`` with the metadata for ``column`` updated.

        Fields passed as ``KEEP`` are left unchanged, fields passed as
        ``None`` are cleared. An existing entry for the same packed name is
        replaced rather than duplicated.

        Args:
            cfdef: Column family definition fetched from the cluster
            column: Column name in display form
            data_type: Validation class, short or fully qualified
            index_type: Index kind
            index_name: Index name

        Returns:
            Updated column family definition
        """
        packed_name = self.pack_column_name(cfdef, column)
        updated = cfdef.model_copy(deep=True)

        col_def: Optional[ColumnMetadata] = None
        remaining = []
        for entry in updated.column_metadata:
            if col_def is None and entry.name == packed_name:
                col_def = entry
            else:
                remaining.append(entry)

        if col_def is None:
            logger.debug(f"Adding metadata for new column {column!r} on {cfdef.full_name}")
            col_def = ColumnMetadata(name=packed_name)

        if data_type is not KEEP:
            col_def.validation_class = qualify_class_name(data_type)
        if index_type is not KEEP:
            col_def.index_type = index_type
        if index_name is not KEEP:
            col_def.index_name = index_name

        if col_def.validation_class is None:
            col_def.validation_class = qualify_class_name(
                cfdef.default_validation_class or FALLBACK_VALIDATION_CLASS
            )

        remaining.append(col_def)
        updated.column_metadata = remaining
        return updated
