"""Type definitions for the repair worker."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Mapping, Union

from pydantic import BaseModel, ConfigDict, Field

from indexrepair.config import INDEX_NAME_KEY, INDEX_TYPE_KEY, SEARCH_BACKEND_KEY, STORAGE_URL_KEY
from indexrepair.graph.relations import Entry, IndexEntry


class Counters(str, enum.Enum):
    SUCCESSFUL_TRANSACTIONS = "SuccessfulTransactions"
    FAILED_TRANSACTIONS = "FailedTransactions"
    SUCCESSFUL_SHUTDOWNS = "SuccessfulShutdowns"
    FAILED_SHUTDOWNS = "FailedShutdowns"
    SKIPPED_RELATIONS = "SkippedRelations"


class WorkerState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    VALIDATING = "validating"
    READY = "ready"
    PROCESSING = "processing"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class RepairJobConfig(BaseModel):
    """Typed view over the task configuration mapping."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    index_name: str | None = Field(default=None, alias=INDEX_NAME_KEY)
    index_type: str | None = Field(default=None, alias=INDEX_TYPE_KEY)
    storage_url: str | None = Field(default=None, alias=STORAGE_URL_KEY)
    search_backend: str = Field(default="noop", alias=SEARCH_BACKEND_KEY)

    @classmethod
    def from_context(cls, context) -> "RepairJobConfig":
        return cls.model_validate(dict(context.configuration))


@dataclass(frozen=True)
class EdgeMutation:
    """Adjacency entries under one vertex key."""

    key: str
    additions: tuple[Entry, ...]
    deletions: tuple[Entry, ...] = ()


@dataclass(frozen=True)
class IndexEntryMutation:
    """Composite index entries under one index key."""

    key: str
    additions: tuple[Entry, ...]
    deletions: tuple[Entry, ...] = ()


@dataclass(frozen=True)
class DocumentRestore:
    """Full documents for one backing search store: store -> doc id -> entries."""

    backing_index: str
    documents: Mapping[str, Mapping[str, list[IndexEntry]]] = field(default_factory=dict)


Mutation = Union[EdgeMutation, IndexEntryMutation, DocumentRestore]


@dataclass(frozen=True)
class RecordMutations:
    """Mutations computed for one record."""

    mutations: list[Mutation] = field(default_factory=list)
    skipped_relations: int = 0
