"""Graph and backend transactions bound to one SQLAlchemy session."""
from __future__ import annotations

import logging
from typing import Iterable, Mapping

from sqlalchemy.orm import Session

from indexrepair.backends.providers import IndexProvider
from indexrepair.errors import SchemaLookupError
from indexrepair.graph.models import EdgeStoreEntry, GraphIndexEntry, Vertex
from indexrepair.graph.relations import Entry, IndexEntry, LoadedVertex
from indexrepair.schema.models import RelationTypeDefinition
from indexrepair.schema.types import RelationTypeInfo

logger = logging.getLogger(__name__)

NO_DELETIONS: tuple[Entry, ...] = ()


class IndexTransaction:
    """Write handle on one backing search store."""

    def __init__(self, db: Session, provider: IndexProvider, backing_index: str) -> None:
        self.db = db
        self.provider = provider
        self.backing_index = backing_index

    def restore(self, documents: Mapping[str, Mapping[str, list[IndexEntry]]]) -> None:
        """Replace the given documents in full (store -> doc id -> entries)."""
        self.provider.restore(self.db, self.backing_index, documents)


class BackendTransaction:
    """Storage-level mutations: edge store, composite index store, search stores."""

    def __init__(self, db: Session, *, index_provider: IndexProvider) -> None:
        self.db = db
        self.index_provider = index_provider
        self._index_txs: dict[str, IndexTransaction] = {}

    def mutate_edges(self, key: str, additions: Iterable[Entry], deletions: Iterable[Entry] = NO_DELETIONS) -> None:
        self._mutate(EdgeStoreEntry, key, additions, deletions)

    def mutate_index(self, key: str, additions: Iterable[Entry], deletions: Iterable[Entry] = NO_DELETIONS) -> None:
        self._mutate(GraphIndexEntry, key, additions, deletions)

    def get_index_transaction(self, backing_index: str) -> IndexTransaction:
        tx = self._index_txs.get(backing_index)
        if tx is None:
            tx = IndexTransaction(self.db, self.index_provider, backing_index)
            self._index_txs[backing_index] = tx
        return tx

    def _mutate(self, model, key: str, additions: Iterable[Entry], deletions: Iterable[Entry]) -> None:
        for entry in deletions:
            row = self.db.get(model, (key, entry.column))
            if row is not None:
                self.db.delete(row)
        # Keyed upsert: re-adding an existing entry is a no-op.
        for entry in {e.column: e for e in additions}.values():
            self.db.merge(model(key=key, column=entry.column, value=entry.value))
        self.db.flush()


class GraphTransaction:
    """Read access to the live graph plus the backend write handle."""

    def __init__(self, db: Session, *, backend: BackendTransaction) -> None:
        self.db = db
        self.backend = backend
        self._vertices: dict[int, LoadedVertex | None] = {}
        self._relation_types: dict[str, RelationTypeInfo] = {}

    def get_vertex(self, vertex_id: int) -> LoadedVertex | None:
        """Resolve a vertex id; None if the vertex does not exist (e.g. deleted)."""
        if vertex_id in self._vertices:
            return self._vertices[vertex_id]
        row = self.db.get(Vertex, vertex_id)
        vertex = LoadedVertex(id=row.id, label=row.label) if row is not None else None
        self._vertices[vertex_id] = vertex
        return vertex

    def clear_vertex_cache(self) -> None:
        self._vertices.clear()

    def find_relation_type(self, name: str) -> RelationTypeInfo | None:
        info = self._relation_types.get(name)
        if info is not None:
            return info
        row = self.db.get(RelationTypeDefinition, name)
        if row is None:
            return None
        info = row.to_info()
        self._relation_types[name] = info
        return info

    def get_relation_type(self, name: str) -> RelationTypeInfo:
        info = self.find_relation_type(name)
        if info is None:
            raise SchemaLookupError(f"Could not find relation type: {name}")
        return info
