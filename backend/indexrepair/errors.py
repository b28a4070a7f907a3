"""Index repair domain errors."""
from __future__ import annotations


class IndexRepairError(RuntimeError):
    """Base error for the index repair engine."""


class RepairConfigError(IndexRepairError):
    """Raised when required repair configuration is missing/invalid."""


class IndexNotFoundError(IndexRepairError):
    """Raised when the named index (or its owning relation type) does not exist."""


class InvalidIndexStateError(IndexRepairError):
    """Raised when the index status does not allow repair."""


class UnsupportedIndexKindError(IndexRepairError):
    """Raised for an index kind other than relation-type, composite or mixed."""


class SchemaLookupError(IndexRepairError):
    """Raised when a relation type referenced by a record is not defined."""


class BackendMutationError(IndexRepairError):
    """Raised when the storage or search backend rejects a mutation."""


class WorkerStateError(IndexRepairError):
    """Raised when worker lifecycle hooks are invoked out of order."""
