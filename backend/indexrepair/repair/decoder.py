"""Reconstruct storage relations from serialized record relations."""
from __future__ import annotations

import logging

from indexrepair.graph.records import GraphRecord, RecordRelation
from indexrepair.graph.relations import StoredEdge, StoredProperty, StoredRelation
from indexrepair.graph.transaction import GraphTransaction

logger = logging.getLogger(__name__)


def decode_relation(record: GraphRecord, relation: RecordRelation, tx: GraphTransaction) -> StoredRelation | None:
    """Build the storage relation for `relation`, resolving endpoints through `tx`.

    Returns None (the relation is skipped) when an endpoint vertex cannot be
    resolved, e.g. because it has been deleted. Never writes.
    """
    stored: StoredRelation
    if relation.is_edge:
        start = tx.get_vertex(relation.out_vertex_id)
        end = tx.get_vertex(relation.in_vertex_id)
        if start is None or end is None:
            logger.debug(
                "skipping edge with unresolved endpoint (relation_id=%s out=%s in=%s)",
                relation.id,
                relation.out_vertex_id,
                relation.in_vertex_id,
            )
            return None
        stored = StoredEdge(
            id=relation.id,
            type=tx.get_relation_type(relation.type_name),
            out_vertex=start,
            in_vertex=end,
        )
    else:
        owner = tx.get_vertex(record.id)
        if owner is None:
            logger.debug("skipping property of unresolved vertex (relation_id=%s vertex=%s)", relation.id, record.id)
            return None
        stored = StoredProperty(
            id=relation.id,
            type=tx.get_relation_type(relation.type_name),
            owner=owner,
            value=relation.value,
        )

    for key, value in relation.properties.items():
        if value is not None:
            stored.set_property(key, value)
    for key, vertex_id in relation.edges.items():
        vertex = tx.get_vertex(vertex_id)
        if vertex is not None:
            stored.set_property(key, vertex)
    return stored
