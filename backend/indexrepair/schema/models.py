"""ORM models for schema definitions (relation types, indexes and their status)."""
from __future__ import annotations

from sqlalchemy import JSON, Boolean, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from indexrepair.database import Base
from indexrepair.errors import UnsupportedIndexKindError
from indexrepair.schema.types import (
    CompositeIndexDescriptor,
    Direction,
    ElementCategory,
    IndexDescriptor,
    IndexKind,
    MixedIndexDescriptor,
    RelationCategory,
    RelationTypeIndexDescriptor,
    RelationTypeInfo,
    SchemaStatus,
)


class RelationTypeDefinition(Base):
    __tablename__ = "schema_relation_type"

    name: Mapped[str] = mapped_column(String(128), primary_key=True)
    category: Mapped[str] = mapped_column(String(16), nullable=False)

    def to_info(self) -> RelationTypeInfo:
        return RelationTypeInfo(
            name=self.name,
            category=RelationCategory(self.category),
        )


class IndexDefinition(Base):
    __tablename__ = "schema_index"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    # Null for graph-level indexes.
    owner_type: Mapped[str | None] = mapped_column(String(128), nullable=True)
    kind: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=SchemaStatus.NEW.value)

    # Relation type indexes
    direction: Mapped[str] = mapped_column(String(8), nullable=False, default=Direction.BOTH.value)
    sort_keys: Mapped[list | None] = mapped_column(JSON, nullable=True)

    # Graph indexes
    element: Mapped[str | None] = mapped_column(String(16), nullable=True)
    backing_index: Mapped[str | None] = mapped_column(String(128), nullable=True)
    unique: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    index_only: Mapped[str | None] = mapped_column(String(128), nullable=True)

    fields = relationship(
        "IndexField",
        order_by="IndexField.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (Index("idx_schema_index_name_owner", "name", "owner_type"),)

    def to_descriptor(self) -> IndexDescriptor:
        try:
            kind = IndexKind(self.kind)
        except ValueError as e:
            raise UnsupportedIndexKindError(f"Unsupported index found: {self.name} (kind={self.kind})") from e

        if kind == IndexKind.RELATION_TYPE:
            return RelationTypeIndexDescriptor(
                name=self.name,
                owner_type=self.owner_type or "",
                direction=Direction(self.direction or Direction.BOTH.value),
                sort_keys=tuple(self.sort_keys or ()),
            )

        field_keys = tuple(f.key for f in self.fields)
        element = ElementCategory(self.element or ElementCategory.VERTEX.value)
        if kind == IndexKind.COMPOSITE:
            return CompositeIndexDescriptor(
                name=self.name,
                element=element,
                field_keys=field_keys,
                unique=bool(self.unique),
                index_only=self.index_only,
            )
        return MixedIndexDescriptor(
            name=self.name,
            element=element,
            field_keys=field_keys,
            backing_index=self.backing_index or "",
            index_only=self.index_only,
        )


class IndexField(Base):
    __tablename__ = "schema_index_field"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    index_id: Mapped[int] = mapped_column(Integer, ForeignKey("schema_index.id", ondelete="CASCADE"), nullable=False)
    key: Mapped[str] = mapped_column(String(128), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Per-field status; only consulted for mixed indexes.
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=SchemaStatus.ENABLED.value)
