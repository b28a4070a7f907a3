"""Index status validation: decide whether the target index may be repaired."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping

from indexrepair.errors import IndexNotFoundError, InvalidIndexStateError
from indexrepair.schema.management import ManagementSystem
from indexrepair.schema.types import IndexDescriptor, MixedIndexDescriptor, SchemaStatus

logger = logging.getLogger(__name__)

ACCEPTED_INDEX_STATUSES = frozenset({SchemaStatus.ENABLED, SchemaStatus.REGISTERED})


@dataclass(frozen=True)
class StatusCheck:
    valid: bool
    # Field keys (or the index name) whose status rejects repair, with that status.
    offending: tuple[tuple[str, SchemaStatus], ...] = ()
    # Mixed index field keys that are DISABLED and excluded from repair.
    disabled_keys: tuple[str, ...] = ()


@dataclass(frozen=True)
class ValidatedIndex:
    index: IndexDescriptor
    disabled_keys: tuple[str, ...] = ()

    @property
    def effective_index(self) -> IndexDescriptor:
        """The index with DISABLED mixed-index fields removed."""
        if self.disabled_keys and isinstance(self.index, MixedIndexDescriptor):
            return self.index.without_fields(frozenset(self.disabled_keys))
        return self.index


def check_index_status(
    index: IndexDescriptor,
    status: SchemaStatus | None = None,
    field_statuses: Mapping[str, SchemaStatus] | None = None,
) -> StatusCheck:
    """Pure status decision.

    - Relation type and composite indexes: valid iff status is REGISTERED or ENABLED.
    - Mixed indexes: valid iff every field key is REGISTERED, ENABLED or DISABLED;
      DISABLED keys are reported so they can be skipped.
    """
    if not isinstance(index, MixedIndexDescriptor):
        if status in ACCEPTED_INDEX_STATUSES:
            return StatusCheck(valid=True)
        return StatusCheck(valid=False, offending=((index.name, status),))

    offending: list[tuple[str, SchemaStatus]] = []
    disabled: list[str] = []
    for key, field_status in (field_statuses or {}).items():
        if field_status == SchemaStatus.DISABLED:
            disabled.append(key)
        elif field_status not in ACCEPTED_INDEX_STATUSES:
            offending.append((key, field_status))
    return StatusCheck(valid=not offending, offending=tuple(offending), disabled_keys=tuple(disabled))


def resolve_index(mgmt: ManagementSystem, index_name: str, index_type: str | None = None) -> IndexDescriptor:
    """Look up the graph index, or the relation index on `index_type` when given."""
    if index_type is None or not index_type.strip():
        index = mgmt.get_graph_index(index_name)
    else:
        relation_type = mgmt.get_relation_type(index_type.strip())
        if relation_type is None:
            raise IndexNotFoundError(f"Could not find relation type: {index_type}")
        index = mgmt.get_relation_index(relation_type, index_name)

    if index is None:
        raise IndexNotFoundError(f"Could not find index: {index_name}")
    logger.info("found index %s (kind=%s owner_type=%s)", index.name, index.kind.value, index.owner_type)
    return index


def validate_index_status(
    mgmt: ManagementSystem,
    index_name: str,
    index_type: str | None = None,
) -> ValidatedIndex:
    """Check that the target index is in a state from which repair is legal.

    Raises:
        IndexNotFoundError: If the index or its relation type does not exist
        InvalidIndexStateError: If any examined status disallows repair
    """
    index = resolve_index(mgmt, index_name, index_type)

    if isinstance(index, MixedIndexDescriptor):
        check = check_index_status(index, field_statuses=mgmt.get_field_statuses(index))
    else:
        check = check_index_status(index, status=mgmt.get_index_status(index))

    for key, status in check.offending:
        logger.warning(
            "index %s has key %s in an invalid status %s",
            index.name,
            key,
            status.value if status is not None else None,
        )
    if not check.valid:
        raise InvalidIndexStateError(
            f"The index [{index.name}] is in an invalid state and cannot be indexed: "
            + ", ".join(f"{key}={status.value if status is not None else None}" for key, status in check.offending)
        )

    for key in check.disabled_keys:
        logger.warning("index %s key %s is DISABLED, skipping it", index.name, key)
    if isinstance(index, MixedIndexDescriptor) and len(check.disabled_keys) == len(index.field_keys):
        logger.warning("index %s has no enabled keys, repair will write nothing", index.name)

    logger.debug("index %s is valid for re-indexing", index.name)
    return ValidatedIndex(index=index, disabled_keys=check.disabled_keys)
