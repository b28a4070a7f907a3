"""In-memory relations as the storage engine understands them."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from indexrepair.schema.types import RelationTypeInfo


@dataclass(frozen=True)
class LoadedVertex:
    """A vertex resolved against the live graph."""

    id: int
    label: str | None = None


@dataclass(frozen=True)
class Entry:
    """One storage entry (column + value) under a row key."""

    column: str
    value: str = ""


@dataclass(frozen=True)
class IndexEntry:
    """One field/value pair of a search-store document."""

    field: str
    value: Any


@dataclass
class StoredRelation:
    id: int
    type: RelationTypeInfo
    properties: dict[str, Any] = field(default_factory=dict)

    arity = 0

    def set_property(self, key: str, value: Any) -> None:
        self.properties[key] = value

    def vertex(self, position: int) -> LoadedVertex:
        raise NotImplementedError


@dataclass
class StoredEdge(StoredRelation):
    out_vertex: LoadedVertex | None = None
    in_vertex: LoadedVertex | None = None

    arity = 2

    def vertex(self, position: int) -> LoadedVertex:
        if position == 0:
            return self.out_vertex
        if position == 1:
            return self.in_vertex
        raise IndexError(f"edge has no position {position}")

    def other_vertex(self, position: int) -> LoadedVertex:
        return self.vertex(1 - position)


@dataclass
class StoredProperty(StoredRelation):
    owner: LoadedVertex | None = None
    value: Any = None

    arity = 1

    def vertex(self, position: int) -> LoadedVertex:
        if position != 0:
            raise IndexError(f"property has no position {position}")
        return self.owner
