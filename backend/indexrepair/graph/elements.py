"""Gather the elements a graph index covers from one record."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from indexrepair.common.keys import build_relation_key, build_vertex_key
from indexrepair.graph.records import GraphRecord, RecordEdge, RecordProperty
from indexrepair.schema.types import ElementCategory


@dataclass(frozen=True)
class IndexedElement:
    """An element seen by a graph index: its key, label and field values."""

    key: str
    category: ElementCategory
    label: str | None
    fields: Mapping[str, tuple[Any, ...]] = field(default_factory=dict)

    def values(self, field_key: str) -> tuple[Any, ...]:
        return self.fields.get(field_key, ())


def _vertex_element(record: GraphRecord) -> IndexedElement:
    fields: dict[str, list[Any]] = {}
    for prop in record.properties:
        if prop.value is None:
            continue
        fields.setdefault(prop.key, []).append(prop.value)
    return IndexedElement(
        key=build_vertex_key(record.id),
        category=ElementCategory.VERTEX,
        label=record.label,
        fields={k: tuple(v) for k, v in fields.items()},
    )


def _property_element(prop: RecordProperty) -> IndexedElement:
    # A property exposes its own value under its key, plus its meta-properties.
    fields = {k: (v,) for k, v in prop.properties.items() if v is not None}
    if prop.value is not None:
        fields[prop.key] = (prop.value,)
    return IndexedElement(
        key=build_relation_key(prop.id),
        category=ElementCategory.PROPERTY,
        label=prop.key,
        fields=fields,
    )


def _edge_element(edge: RecordEdge) -> IndexedElement:
    return IndexedElement(
        key=build_relation_key(edge.id),
        category=ElementCategory.EDGE,
        label=edge.label,
        fields={k: (v,) for k, v in edge.properties.items() if v is not None},
    )


def gather_elements(record: GraphRecord, category: ElementCategory) -> list[IndexedElement]:
    """Elements of the given category attached to the record's vertex."""
    if category == ElementCategory.VERTEX:
        return [_vertex_element(record)]
    if category == ElementCategory.PROPERTY:
        return [_property_element(p) for p in record.properties]
    if category == ElementCategory.EDGE:
        return [_edge_element(e) for e in record.edges]
    raise AssertionError(f"Unexpected category: {category}")


def index_applies_to(index_only: str | None, element: IndexedElement) -> bool:
    """Whether an index restricted to `index_only` covers the element."""
    if not index_only:
        return True
    return element.label == index_only
