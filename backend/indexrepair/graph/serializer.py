"""Serialization of relations and elements into edge-store and index entries."""
from __future__ import annotations

import itertools
import json
from dataclasses import dataclass
from typing import Any

from indexrepair.common.keys import build_composite_key
from indexrepair.graph.elements import IndexedElement, index_applies_to
from indexrepair.graph.relations import Entry, IndexEntry, LoadedVertex, StoredEdge, StoredProperty, StoredRelation
from indexrepair.schema.types import (
    CompositeIndexDescriptor,
    Direction,
    MixedIndexDescriptor,
    RelationTypeIndexDescriptor,
)

# {store name: {document id: [IndexEntry, ...]}}
DocumentsPerStore = dict[str, dict[str, list[IndexEntry]]]


def _encode_value(value: Any) -> Any:
    if isinstance(value, LoadedVertex):
        return {"vertex": value.id}
    return value


def _dumps(obj: Any) -> str:
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), default=str)


class EdgeSerializer:
    def write_relation(
        self,
        relation: StoredRelation,
        index: RelationTypeIndexDescriptor,
        position: int,
    ) -> Entry:
        """Serialize one position of a relation into an adjacency entry.

        Column: [index name, direction, sort-key values, other endpoint, relation id]
        Value:  relation type, property value (properties only), remaining properties
        """
        direction = Direction.from_position(position)
        sort_values = [_encode_value(relation.properties.get(k)) for k in index.sort_keys]

        other_id = None
        if isinstance(relation, StoredEdge):
            other_id = relation.other_vertex(position).id

        column = _dumps([index.name, direction.value, sort_values, other_id, relation.id])

        payload: dict[str, Any] = {
            "type": relation.type.name,
            "properties": {
                k: _encode_value(v) for k, v in relation.properties.items() if k not in index.sort_keys
            },
        }
        if isinstance(relation, StoredProperty):
            payload["value"] = _encode_value(relation.value)
        return Entry(column=column, value=_dumps(payload))


@dataclass(frozen=True)
class IndexUpdate:
    key: str
    entry: Entry


def _value_combinations(element: IndexedElement, field_keys: tuple[str, ...]) -> list[tuple[Any, ...]]:
    value_lists = [element.values(k) for k in field_keys]
    if not field_keys or any(not values for values in value_lists):
        return []
    return list(itertools.product(*value_lists))


class IndexSerializer:
    def reindex_composite(self, element: IndexedElement, index: CompositeIndexDescriptor) -> set[IndexUpdate]:
        """Index updates for every full field-value combination of the element."""
        if not index_applies_to(index.index_only, element):
            return set()

        updates: set[IndexUpdate] = set()
        for values in _value_combinations(element, index.field_keys):
            # Unique indexes keep a single entry per key.
            column = "" if index.unique else element.key
            updates.add(
                IndexUpdate(
                    key=build_composite_key(index.name, values),
                    entry=Entry(column=column, value=element.key),
                )
            )
        return updates

    def reindex_mixed(
        self,
        element: IndexedElement,
        index: MixedIndexDescriptor,
        documents_per_store: DocumentsPerStore,
    ) -> None:
        """Add the element's full document to `documents_per_store`.

        An element without indexed values yields an empty document, which
        removes any stale copy from the store on restore.
        """
        if not index_applies_to(index.index_only, element):
            return

        entries = [IndexEntry(field=k, value=v) for k in index.field_keys for v in element.values(k)]
        documents_per_store.setdefault(index.store_name, {})[element.key] = entries
