"""Turn one graph record into the index mutations that repair the target index.

Dispatch by index kind:
- RelationTypeIndex: adjacency entries for outgoing relations of the index's
  relation type, one storage mutation per endpoint row (the record's vertex first).
- CompositeIndex: one index-store entry per element and field-value combination.
- MixedIndex: one full-document restore per record against the backing store.

No storage deletions are ever emitted; a mixed restore replaces whole documents.
"""
from __future__ import annotations

from indexrepair.common.keys import build_vertex_key
from indexrepair.errors import UnsupportedIndexKindError
from indexrepair.graph.elements import gather_elements
from indexrepair.graph.records import GraphRecord
from indexrepair.graph.relations import Entry
from indexrepair.graph.serializer import DocumentsPerStore, EdgeSerializer, IndexSerializer
from indexrepair.graph.transaction import GraphTransaction
from indexrepair.repair.decoder import decode_relation
from indexrepair.repair.types import DocumentRestore, EdgeMutation, IndexEntryMutation, Mutation, RecordMutations
from indexrepair.schema.types import (
    CompositeIndexDescriptor,
    Direction,
    IndexDescriptor,
    MixedIndexDescriptor,
    RelationTypeIndexDescriptor,
)


class MutationBuilder:
    def __init__(
        self,
        index: IndexDescriptor,
        *,
        edge_serializer: EdgeSerializer | None = None,
        index_serializer: IndexSerializer | None = None,
    ) -> None:
        self.index = index
        self.edge_serializer = edge_serializer or EdgeSerializer()
        self.index_serializer = index_serializer or IndexSerializer()

    def build(self, record: GraphRecord, tx: GraphTransaction) -> RecordMutations:
        index = self.index
        if isinstance(index, RelationTypeIndexDescriptor):
            return self._relation_type_mutations(index, record, tx)
        if isinstance(index, CompositeIndexDescriptor):
            return RecordMutations(mutations=self._composite_mutations(index, record))
        if isinstance(index, MixedIndexDescriptor):
            return RecordMutations(mutations=self._mixed_mutations(index, record))
        raise UnsupportedIndexKindError(f"Unsupported index found: {index!r}")

    def _relation_type_mutations(
        self,
        index: RelationTypeIndexDescriptor,
        record: GraphRecord,
        tx: GraphTransaction,
    ) -> RecordMutations:
        # Row key -> entries; the record's own row comes first.
        additions: dict[str, list[Entry]] = {build_vertex_key(record.id): []}
        skipped = 0
        for relation in record.relations():
            # Only the owner type's outgoing side; the in-vertex record would duplicate it.
            if relation.type_name != index.owner_type or record.direction_of(relation) != Direction.OUT:
                continue
            stored = decode_relation(record, relation, tx)
            if stored is None:
                skipped += 1
                continue
            for position in range(stored.arity):
                if not index.covers_position(position):
                    continue
                row_key = build_vertex_key(stored.vertex(position).id)
                additions.setdefault(row_key, []).append(self.edge_serializer.write_relation(stored, index, position))

        mutations: list[Mutation] = [
            EdgeMutation(key=key, additions=tuple(entries)) for key, entries in additions.items() if entries
        ]
        return RecordMutations(mutations=mutations, skipped_relations=skipped)

    def _composite_mutations(self, index: CompositeIndexDescriptor, record: GraphRecord) -> list[Mutation]:
        mutations: list[Mutation] = []
        for element in gather_elements(record, index.element):
            updates = self.index_serializer.reindex_composite(element, index)
            for update in sorted(updates, key=lambda u: (u.key, u.entry.column)):
                mutations.append(IndexEntryMutation(key=update.key, additions=(update.entry,)))
        return mutations

    def _mixed_mutations(self, index: MixedIndexDescriptor, record: GraphRecord) -> list[Mutation]:
        documents_per_store: DocumentsPerStore = {}
        for element in gather_elements(record, index.element):
            self.index_serializer.reindex_mixed(element, index, documents_per_store)
        if not documents_per_store:
            return []
        return [DocumentRestore(backing_index=index.backing_index, documents=documents_per_store)]
