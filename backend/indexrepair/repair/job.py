"""Local batch runner for index repair.

Usage:
    python -m indexrepair.repair.job records.jsonl

Reads one serialized graph record per line, partitions records by vertex id
and runs one IndexRepairWorker per partition on a thread pool. Each partition
gets its own task context; counters are summed into the job report.
"""
from __future__ import annotations

import json
import logging
import sys
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping

from indexrepair.config import STORAGE_URL_KEY, get_settings
from indexrepair.graph.graph import RepairGraph, open_graph
from indexrepair.graph.records import GraphRecord, parse_record
from indexrepair.repair.context import LocalTaskContext
from indexrepair.repair.types import RepairJobConfig
from indexrepair.repair.worker import IndexRepairWorker

logger = logging.getLogger(__name__)


@dataclass
class JobReport:
    counters: Counter = field(default_factory=Counter)
    processed: int = 0
    failed_partitions: list[int] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed_partitions


def read_records(path: str | Path) -> list[GraphRecord]:
    """Parse a JSON-lines file of graph records; blank lines are ignored."""
    records: list[GraphRecord] = []
    with open(path, "r", encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                records.append(parse_record(line))
            except ValueError as e:
                raise ValueError(f"{path}:{line_no}: invalid record: {e}") from e
    return records


def partition_records(records: Iterable[GraphRecord], partitions: int) -> list[list[GraphRecord]]:
    """Split records into `partitions` buckets by vertex id."""
    partitions = max(1, int(partitions))
    buckets: list[list[GraphRecord]] = [[] for _ in range(partitions)]
    for record in records:
        buckets[record.id % partitions].append(record)
    return buckets


class LocalRepairJob:
    """Run one repair worker per partition in this process."""

    def __init__(
        self,
        configuration: Mapping[str, Any],
        *,
        partitions: int = 4,
        max_workers: int = 4,
        graph_factory: Callable[[RepairJobConfig], RepairGraph] | None = None,
    ) -> None:
        self.configuration = dict(configuration)
        self.partitions = max(1, partitions)
        self.max_workers = max(1, max_workers)
        storage_url = str(self.configuration.get(STORAGE_URL_KEY) or "")
        if storage_url.startswith("sqlite") and self.max_workers > 1:
            # SQLite allows a single writer.
            logger.warning("sqlite storage runs partitions serially (max_workers=%s -> 1)", self.max_workers)
            self.max_workers = 1
        self.graph_factory = graph_factory or open_graph

    def run(self, records: Iterable[GraphRecord]) -> JobReport:
        buckets = partition_records(records, self.partitions)
        contexts = [
            LocalTaskContext(configuration=self.configuration, task_id=f"partition-{i}")
            for i in range(len(buckets))
        ]

        report = JobReport()
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = [
                pool.submit(self._run_partition, bucket, context)
                for bucket, context in zip(buckets, contexts)
            ]
            for i, future in enumerate(futures):
                try:
                    report.processed += future.result()
                except Exception:
                    logger.exception("partition failed (partition=%s)", i)
                    report.failed_partitions.append(i)

        for context in contexts:
            report.counters.update(context.counters)

        logger.info(
            "repair job finished",
            extra={
                "processed": report.processed,
                "failed_partitions": report.failed_partitions,
                "counters": dict(report.counters),
            },
        )
        return report

    def _run_partition(self, records: list[GraphRecord], context: LocalTaskContext) -> int:
        worker = IndexRepairWorker(graph_factory=self.graph_factory)
        return worker.run(records, context)


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the local repair job."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        logger.error("usage: python -m indexrepair.repair.job <records.jsonl>")
        raise SystemExit(2)

    records = read_records(args[0])
    job = LocalRepairJob(
        settings.job_configuration(),
        partitions=settings.repair_partitions,
        max_workers=settings.repair_max_workers,
    )
    report = job.run(records)
    print(json.dumps({"processed": report.processed, "counters": dict(report.counters)}, sort_keys=True))
    raise SystemExit(0 if report.ok else 1)


if __name__ == "__main__":
    main()
