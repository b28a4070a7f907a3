"""ORM models for the live vertex set and the edge, index and document stores."""
from __future__ import annotations

from sqlalchemy import JSON, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from indexrepair.database import Base


class Vertex(Base):
    __tablename__ = "vertex"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    label: Mapped[str | None] = mapped_column(String(128), nullable=True)


class EdgeStoreEntry(Base):
    """One adjacency entry, keyed by the owning vertex key."""

    __tablename__ = "edgestore"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    column: Mapped[str] = mapped_column(String(1024), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False, default="")


class GraphIndexEntry(Base):
    """One composite index entry, keyed by the hashed field values."""

    __tablename__ = "graphindex"

    key: Mapped[str] = mapped_column(String(256), primary_key=True)
    column: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False, default="")


class IndexDocument(Base):
    """A search-store document, replaced wholesale on restore."""

    __tablename__ = "index_document"

    backing_index: Mapped[str] = mapped_column(String(128), primary_key=True)
    store: Mapped[str] = mapped_column(String(128), primary_key=True)
    doc_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    fields: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    __table_args__ = (Index("idx_index_document_store", "backing_index", "store"),)
