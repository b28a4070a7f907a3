from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from indexrepair.backends.providers import IndexProvider
from indexrepair.errors import IndexNotFoundError
from indexrepair.graph.transaction import BackendTransaction, GraphTransaction
from indexrepair.schema.models import IndexDefinition
from indexrepair.schema.types import IndexDescriptor, RelationTypeInfo, SchemaStatus

logger = logging.getLogger(__name__)


class ManagementSystem:
    """Administrative transaction: schema lookup, index status and the wrapped graph transaction."""

    def __init__(self, db: Session, *, index_provider: IndexProvider) -> None:
        self.db = db
        self._tx = GraphTransaction(db, backend=BackendTransaction(db, index_provider=index_provider))
        self.open = True

    @property
    def wrapped_tx(self) -> GraphTransaction:
        return self._tx

    def get_relation_type(self, name: str) -> RelationTypeInfo | None:
        return self._tx.find_relation_type(name)

    def get_graph_index(self, name: str) -> IndexDescriptor | None:
        row = self._find_index(name, owner_type=None)
        return row.to_descriptor() if row is not None else None

    def get_relation_index(self, relation_type: RelationTypeInfo, name: str) -> IndexDescriptor | None:
        row = self._find_index(name, owner_type=relation_type.name)
        return row.to_descriptor() if row is not None else None

    def get_index_status(self, index: IndexDescriptor) -> SchemaStatus:
        row = self._require_index(index)
        return SchemaStatus(row.status)

    def get_field_statuses(self, index: IndexDescriptor) -> dict[str, SchemaStatus]:
        """Status of each indexed field key, in field order."""
        row = self._require_index(index)
        return {f.key: SchemaStatus(f.status) for f in row.fields}

    def commit(self) -> None:
        """Commit and close; a failed commit is rolled back before the error propagates."""
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        finally:
            self._close()

    def rollback(self) -> None:
        if not self.open:
            return
        logger.warning("rolling back management transaction")
        self.db.rollback()
        self._close()

    def _close(self) -> None:
        self.db.close()
        self.open = False

    def _find_index(self, name: str, *, owner_type: str | None) -> IndexDefinition | None:
        query = self.db.query(IndexDefinition).filter(IndexDefinition.name == name)
        if owner_type is None:
            query = query.filter(IndexDefinition.owner_type.is_(None))
        else:
            query = query.filter(IndexDefinition.owner_type == owner_type)
        return query.first()

    def _require_index(self, index: IndexDescriptor) -> IndexDefinition:
        row = self._find_index(index.name, owner_type=index.owner_type)
        if row is None:
            raise IndexNotFoundError(f"Could not find index: {index.name}")
        return row
