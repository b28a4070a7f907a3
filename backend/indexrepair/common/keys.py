"""Utilities for consistent element keys across the edge, index and document stores.

Convention:
- Vertex key: "v{vertex_id:016x}" (edge-store row key, document id of vertex elements)
- Relation key: "r{relation_id:016x}" (document id / index entry of edge and property elements)
- Composite index key: "{index_name}:{sha1 of the field values}"
"""
from __future__ import annotations

import hashlib
import json
from typing import Any, Sequence

VERTEX_PREFIX = "v"
RELATION_PREFIX = "r"


def build_vertex_key(vertex_id: int) -> str:
    """Build the storage key of a vertex.

    Args:
        vertex_id: Vertex id

    Returns:
        key in format "v{vertex_id:016x}"
    """
    return f"{VERTEX_PREFIX}{vertex_id:016x}"


def build_relation_key(relation_id: int) -> str:
    """Build the storage key of an edge or property.

    Args:
        relation_id: Relation id

    Returns:
        key in format "r{relation_id:016x}"
    """
    return f"{RELATION_PREFIX}{relation_id:016x}"


def encode_values(values: Sequence[Any]) -> str:
    """Stable JSON encoding of field values (sorted keys, compact)."""
    return json.dumps(list(values), sort_keys=True, separators=(",", ":"), default=str)


def build_composite_key(index_name: str, values: Sequence[Any]) -> str:
    """Build the composite index key for one field-value combination.

    The key is opaque to callers; equal value combinations of the same index
    always map to the same key.
    """
    digest = hashlib.sha1(encode_values(values).encode("utf-8")).hexdigest()
    return f"{index_name}:{digest}"
