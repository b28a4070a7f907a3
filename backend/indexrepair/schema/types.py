"""Type definitions for the schema layer: statuses, directions and index descriptors."""
from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import Union


class SchemaStatus(str, enum.Enum):
    """Index lifecycle, in order: NEW -> INSTALLED -> REGISTERED -> ENABLED -> DISABLED."""

    NEW = "NEW"
    INSTALLED = "INSTALLED"
    REGISTERED = "REGISTERED"
    ENABLED = "ENABLED"
    DISABLED = "DISABLED"


class Direction(str, enum.Enum):
    OUT = "OUT"
    IN = "IN"
    BOTH = "BOTH"

    @classmethod
    def from_position(cls, position: int) -> "Direction":
        """Position 0 is the out-vertex of a relation, position 1 the in-vertex."""
        if position == 0:
            return cls.OUT
        if position == 1:
            return cls.IN
        raise ValueError(f"invalid relation position: {position}")


class ElementCategory(str, enum.Enum):
    VERTEX = "VERTEX"
    EDGE = "EDGE"
    PROPERTY = "PROPERTY"


class RelationCategory(str, enum.Enum):
    EDGE = "EDGE"
    PROPERTY = "PROPERTY"


class IndexKind(str, enum.Enum):
    RELATION_TYPE = "RelationTypeIndex"
    COMPOSITE = "CompositeIndex"
    MIXED = "MixedIndex"


@dataclass(frozen=True)
class RelationTypeInfo:
    """Edge label or property key as defined in the schema."""

    name: str
    category: RelationCategory


@dataclass(frozen=True)
class RelationTypeIndexDescriptor:
    """Vertex-centric index over the adjacency list of one relation type."""

    name: str
    owner_type: str
    direction: Direction = Direction.BOTH
    sort_keys: tuple[str, ...] = ()

    kind = IndexKind.RELATION_TYPE

    def is_unidirected(self, direction: Direction) -> bool:
        return self.direction == direction

    def covers_position(self, position: int) -> bool:
        return self.is_unidirected(Direction.BOTH) or self.is_unidirected(Direction.from_position(position))


@dataclass(frozen=True)
class CompositeIndexDescriptor:
    """Exact-match graph index over a combination of field values."""

    name: str
    element: ElementCategory
    field_keys: tuple[str, ...]
    unique: bool = False
    index_only: str | None = None

    kind = IndexKind.COMPOSITE
    owner_type = None


@dataclass(frozen=True)
class MixedIndexDescriptor:
    """Document-style graph index backed by an external search store."""

    name: str
    element: ElementCategory
    field_keys: tuple[str, ...]
    backing_index: str
    index_only: str | None = None

    kind = IndexKind.MIXED
    owner_type = None

    @property
    def store_name(self) -> str:
        return self.name

    def without_fields(self, keys: set[str] | frozenset[str]) -> "MixedIndexDescriptor":
        return replace(self, field_keys=tuple(k for k in self.field_keys if k not in keys))

IndexDescriptor = Union[RelationTypeIndexDescriptor, CompositeIndexDescriptor, MixedIndexDescriptor]