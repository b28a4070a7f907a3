"""Per-partition index repair worker.

The batch framework creates one worker per input partition and calls
`setup`, `process` (once per record) and `teardown` in that order. The worker
owns one administrative transaction for its whole lifetime:

    UNINITIALIZED -> VALIDATING -> READY -> PROCESSING -> COMMITTED | ROLLED_BACK

Any setup or per-record failure rolls the transaction back, bumps
FailedTransactions and fails the worker; the framework owns retries.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Mapping, Union

from indexrepair.errors import RepairConfigError, WorkerStateError
from indexrepair.graph.graph import RepairGraph, open_graph
from indexrepair.graph.records import GraphRecord, parse_record
from indexrepair.repair.applier import MutationApplier
from indexrepair.repair.context import TaskContext
from indexrepair.repair.mutations import MutationBuilder
from indexrepair.repair.types import Counters, RepairJobConfig, WorkerState
from indexrepair.repair.validator import ValidatedIndex, validate_index_status
from indexrepair.schema.management import ManagementSystem

logger = logging.getLogger(__name__)

RecordInput = Union[GraphRecord, Mapping[str, Any], str, bytes]


class IndexRepairWorker:
    """Rebuilds one named index from the records of one partition."""

    def __init__(self, *, graph_factory: Callable[[RepairJobConfig], RepairGraph] | None = None) -> None:
        self.graph_factory = graph_factory or open_graph
        self.state = WorkerState.UNINITIALIZED
        self.config: RepairJobConfig | None = None
        self.graph: RepairGraph | None = None
        self.mgmt: ManagementSystem | None = None
        self.validated: ValidatedIndex | None = None
        self.builder: MutationBuilder | None = None
        self.records_processed = 0

    def setup(self, context: TaskContext) -> None:
        """Open the graph and the administrative transaction, then validate the index.

        Raises:
            RepairConfigError: If no index name is configured (before any transaction opens)
        """
        self._require_state(WorkerState.UNINITIALIZED)
        config = RepairJobConfig.from_context(context)
        if config.index_name is None or not config.index_name.strip():
            raise RepairConfigError("Need to provide at least an index name for re-index job")
        self.config = config
        logger.info("read index information: name=%s type=%s", config.index_name, config.index_type)

        self.state = WorkerState.VALIDATING
        try:
            self.graph = self.graph_factory(config)
            self.mgmt = self.graph.open_management()
            self.validated = validate_index_status(self.mgmt, config.index_name.strip(), config.index_type)
            self.builder = MutationBuilder(
                self.validated.effective_index,
                edge_serializer=self.graph.edge_serializer,
                index_serializer=self.graph.index_serializer,
            )
        except Exception:
            logger.exception("worker setup failed (index=%s)", config.index_name)
            self._fail(context)
            raise

        self.state = WorkerState.READY
        logger.info(
            "worker ready",
            extra={
                "index_name": self.validated.index.name,
                "index_kind": self.validated.index.kind.value,
                "disabled_keys": list(self.validated.disabled_keys),
            },
        )

    def process(self, record: RecordInput, context: TaskContext) -> None:
        """Compute and apply the index mutations for one record."""
        self._require_state(WorkerState.READY, WorkerState.PROCESSING)
        self.state = WorkerState.PROCESSING
        vertex_id = None
        try:
            graph_record = parse_record(record)
            vertex_id = graph_record.id
            tx = self.mgmt.wrapped_tx
            result = self.builder.build(graph_record, tx)
            MutationApplier(tx.backend).apply(result.mutations)
            tx.clear_vertex_cache()
        except Exception:
            logger.exception("index repair failed for record (vertex_id=%s)", vertex_id)
            self._fail(context)
            raise

        if result.skipped_relations:
            context.increment_counter(Counters.SKIPPED_RELATIONS, result.skipped_relations)
        self.records_processed += 1

    def teardown(self, context: TaskContext) -> None:
        """Commit the administrative transaction, then shut the graph down.

        After a rollback only the shutdown happens. Commit and shutdown
        failures are counted and re-raised.
        """
        if self.state in (WorkerState.READY, WorkerState.PROCESSING):
            try:
                self._commit(context)
            finally:
                self._shutdown(context)
            return
        if self.state == WorkerState.ROLLED_BACK:
            self._shutdown(context)
            return
        if self.state == WorkerState.UNINITIALIZED:
            # Setup never opened anything (e.g. missing configuration).
            return
        raise WorkerStateError(f"teardown called in state {self.state.value}")

    def run(self, records: Iterable[RecordInput], context: TaskContext) -> int:
        """Run setup, process every record and teardown, in that order.

        Returns:
            Number of records processed
        """
        try:
            self.setup(context)
            for record in records:
                self.process(record, context)
        finally:
            self.teardown(context)
        return self.records_processed

    def _commit(self, context: TaskContext) -> None:
        try:
            self.mgmt.commit()
        except Exception:
            logger.exception("transaction commit failed")
            context.increment_counter(Counters.FAILED_TRANSACTIONS)
            self.state = WorkerState.ROLLED_BACK
            raise
        context.increment_counter(Counters.SUCCESSFUL_TRANSACTIONS)
        self.state = WorkerState.COMMITTED
        logger.info("transaction committed (records=%s)", self.records_processed)

    def _shutdown(self, context: TaskContext) -> None:
        if self.graph is None:
            return
        try:
            self.graph.shutdown()
        except Exception:
            logger.exception("graph shutdown failed")
            context.increment_counter(Counters.FAILED_SHUTDOWNS)
            raise
        context.increment_counter(Counters.SUCCESSFUL_SHUTDOWNS)

    def _fail(self, context: TaskContext) -> None:
        if self.mgmt is not None:
            try:
                self.mgmt.rollback()
            except Exception:
                logger.exception("rollback failed")
        context.increment_counter(Counters.FAILED_TRANSACTIONS)
        self.state = WorkerState.ROLLED_BACK

    def _require_state(self, *allowed: WorkerState) -> None:
        if self.state not in allowed:
            raise WorkerStateError(
                f"worker is {self.state.value}, expected {' or '.join(s.value for s in allowed)}"
            )
