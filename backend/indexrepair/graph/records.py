"""Serialized graph records: one vertex plus its adjacent relations.

Input format (one JSON object per record):

    {"id": 1, "label": "person",
     "properties": [{"id": 11, "key": "name", "value": "alice", "properties": {}, "edges": {}}],
     "edges": [{"id": 21, "label": "knows", "out": 1, "in": 2,
                "properties": {"since": 2010}, "edges": {"witness": 3}}]}

`properties` on a relation are its property-typed secondary attributes,
`edges` its edge-typed secondary attributes (attribute name -> vertex id).
`edges` on a record lists both outgoing and incoming edges.
"""
from __future__ import annotations

from typing import Any, Iterator, Mapping, Union

from pydantic import Field

from indexrepair.common.schemas import FrozenModel
from indexrepair.schema.types import Direction


class RecordProperty(FrozenModel):
    id: int
    key: str
    value: Any = None
    properties: dict[str, Any] = Field(default_factory=dict)
    edges: dict[str, int] = Field(default_factory=dict)

    @property
    def type_name(self) -> str:
        return self.key

    @property
    def is_edge(self) -> bool:
        return False


class RecordEdge(FrozenModel):
    id: int
    label: str
    out_vertex_id: int = Field(alias="out")
    in_vertex_id: int = Field(alias="in")
    properties: dict[str, Any] = Field(default_factory=dict)
    edges: dict[str, int] = Field(default_factory=dict)

    @property
    def type_name(self) -> str:
        return self.label

    @property
    def is_edge(self) -> bool:
        return True


RecordRelation = Union[RecordProperty, RecordEdge]


class GraphRecord(FrozenModel):
    id: int
    label: str | None = None
    properties: list[RecordProperty] = Field(default_factory=list)
    edges: list[RecordEdge] = Field(default_factory=list)

    def relations(self) -> Iterator[RecordRelation]:
        yield from self.properties
        yield from self.edges

    def direction_of(self, relation: RecordRelation) -> Direction:
        """Direction of a relation relative to this record's vertex."""
        if not relation.is_edge:
            return Direction.OUT
        if relation.out_vertex_id == self.id:
            return Direction.OUT
        return Direction.IN


def parse_record(raw: Union[str, bytes, Mapping[str, Any], GraphRecord]) -> GraphRecord:
    """Parse one serialized record (JSON text or an already-decoded mapping)."""
    if isinstance(raw, GraphRecord):
        return raw
    if isinstance(raw, (str, bytes)):
        return GraphRecord.model_validate_json(raw)
    return GraphRecord.model_validate(raw)
