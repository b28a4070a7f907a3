"""Search store providers for mixed indexes.

A provider receives full documents grouped by store and replaces them in the
backing search store. Providers are selected by configuration
(SEARCH_BACKEND / `indexrepair.search.backend`):

- "noop": drop documents (default; mixed indexes without a configured store)
- "sql":  keep documents in the `index_document` table of the graph storage
"""
from __future__ import annotations

import logging
from typing import Mapping, Protocol

from sqlalchemy.orm import Session

from indexrepair.errors import RepairConfigError
from indexrepair.graph.models import IndexDocument
from indexrepair.graph.relations import IndexEntry

logger = logging.getLogger(__name__)


class IndexProvider(Protocol):
    name: str

    def restore(
        self,
        db: Session,
        backing_index: str,
        documents: Mapping[str, Mapping[str, list[IndexEntry]]],
    ) -> None:
        ...


def document_fields(entries: list[IndexEntry]) -> dict[str, object]:
    """Collapse index entries into a field map; repeated fields become lists."""
    fields: dict[str, object] = {}
    for entry in entries:
        if entry.field not in fields:
            fields[entry.field] = entry.value
            continue
        current = fields[entry.field]
        if isinstance(current, list):
            current.append(entry.value)
        else:
            fields[entry.field] = [current, entry.value]
    return fields


class NoopIndexProvider:
    name = "noop"

    def restore(self, db: Session, backing_index: str, documents) -> None:
        logger.debug(
            "noop index provider dropped documents (backing_index=%s stores=%s docs=%s)",
            backing_index,
            len(documents),
            sum(len(docs) for docs in documents.values()),
        )


class SqlIndexProvider:
    name = "sql"

    def restore(self, db: Session, backing_index: str, documents) -> None:
        for store, docs in documents.items():
            for doc_id, entries in docs.items():
                if not entries:
                    # Restoring an empty document removes it.
                    existing = db.get(IndexDocument, (backing_index, store, doc_id))
                    if existing is not None:
                        db.delete(existing)
                    continue
                db.merge(
                    IndexDocument(
                        backing_index=backing_index,
                        store=store,
                        doc_id=doc_id,
                        fields=document_fields(entries),
                    )
                )
        db.flush()


INDEX_PROVIDERS: dict[str, type] = {
    NoopIndexProvider.name: NoopIndexProvider,
    SqlIndexProvider.name: SqlIndexProvider,
}


def build_index_provider(kind: str | None) -> IndexProvider:
    key = (kind or NoopIndexProvider.name).strip().lower()
    provider_cls = INDEX_PROVIDERS.get(key)
    if provider_cls is None:
        raise RepairConfigError(
            f"Unknown search backend: {kind!r} (expected one of {', '.join(sorted(INDEX_PROVIDERS))})"
        )
    return provider_cls()
