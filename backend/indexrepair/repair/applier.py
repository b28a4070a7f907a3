from __future__ import annotations

import logging
from typing import Iterable

from indexrepair.errors import BackendMutationError
from indexrepair.graph.transaction import BackendTransaction
from indexrepair.repair.types import DocumentRestore, EdgeMutation, IndexEntryMutation, Mutation

logger = logging.getLogger(__name__)


class MutationApplier:
    """Submit computed mutations to the backend transaction."""

    def __init__(self, backend: BackendTransaction) -> None:
        self.backend = backend

    def apply(self, mutations: Iterable[Mutation]) -> int:
        applied = 0
        for mutation in mutations:
            try:
                self._apply_one(mutation)
            except Exception as e:
                raise BackendMutationError(f"{type(mutation).__name__} failed: {type(e).__name__}: {e}") from e
            applied += 1
        logger.debug("applied mutations (count=%s)", applied)
        return applied

    def _apply_one(self, mutation: Mutation) -> None:
        if isinstance(mutation, EdgeMutation):
            self.backend.mutate_edges(mutation.key, mutation.additions, mutation.deletions)
        elif isinstance(mutation, IndexEntryMutation):
            self.backend.mutate_index(mutation.key, mutation.additions, mutation.deletions)
        elif isinstance(mutation, DocumentRestore):
            self.backend.get_index_transaction(mutation.backing_index).restore(mutation.documents)
        else:
            raise TypeError(f"unknown mutation: {mutation!r}")
