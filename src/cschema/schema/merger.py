"""
Definition merging for cschema.

Turns a partial attribute mapping into a complete keyspace or column family
definition, starting either from engine defaults or from a definition
fetched from the cluster.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from .definitions import ColumnFamilyDefinition, Definition, KeyspaceDefinition
from .types import qualify_strategy_class
from ..exceptions import ValidationError


logger = logging.getLogger(__name__)


class DefinitionMerger:
    """Builds complete definitions from partial attribute overrides."""

    # Attributes that need more than a plain typed assignment
    _KEYSPACE_HANDLERS = {
        "strategy_class": qualify_strategy_class,
    }

    def merge_keyspace(
        self,
        name: str,
        overrides: Optional[Mapping[str, Any]] = None,
        existing: Optional[KeyspaceDefinition] = None,
    ) -> KeyspaceDefinition:
        """
        Merge attribute overrides into a keyspace definition.

        Args:
            name: Keyspace name, always written onto the result
            overrides: Attribute name to value mapping
            existing: Definition fetched from the cluster, or None to start
                from defaults (SimpleStrategy, replication factor "1")

        Returns:
            A new definition; ``existing`` is never modified. Column family
            definitions are not carried over, since keyspace updates must
            not contain them.
        """
        if existing is not None:
            ksdef = existing.model_copy(deep=True)
        else:
            ksdef = KeyspaceDefinition(name=name)

        ksdef.name = name
        ksdef.cf_defs = []
        self._apply(ksdef, overrides, self._KEYSPACE_HANDLERS)
        return ksdef

    def merge_column_family(
        self,
        keyspace: str,
        name: str,
        overrides: Optional[Mapping[str, Any]] = None,
        existing: Optional[ColumnFamilyDefinition] = None,
    ) -> ColumnFamilyDefinition:
        """Merge attribute overrides into a column family definition."""
        if existing is not None:
            cfdef = existing.model_copy(deep=True)
        else:
            cfdef = ColumnFamilyDefinition(keyspace=keyspace, name=name)

        cfdef.keyspace = keyspace
        cfdef.name = name
        self._apply(cfdef, overrides, {})
        return cfdef

    def _apply(
        self,
        definition: Definition,
        overrides: Optional[Mapping[str, Any]],
        handlers: Dict[str, Any],
    ) -> None:
        for attr, value in (overrides or {}).items():
            if attr in handlers and value is not None:
                value = handlers[attr](value)

            if attr not in definition.known_fields():
                logger.debug(
                    f"Forwarding unrecognized attribute '{attr}' on "
                    f"{type(definition).__name__}"
                )

            try:
                definition.set_attribute(attr, value)
            except PydanticValidationError as e:
                raise ValidationError(
                    f"Invalid value for attribute '{attr}': {value!r}",
                    details={"definition": type(definition).__name__},
                    cause=e,
                ) from e
