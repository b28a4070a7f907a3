"""Task context handed to a worker by the batch framework."""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol

from indexrepair.repair.types import Counters


class TaskContext(Protocol):
    configuration: Mapping[str, Any]

    def increment_counter(self, counter: Counters, amount: int = 1) -> None:
        ...


@dataclass
class LocalTaskContext:
    """In-process task context; counters accumulate per worker."""

    configuration: Mapping[str, Any] = field(default_factory=dict)
    task_id: str = "local"
    counters: Counter = field(default_factory=Counter)

    def increment_counter(self, counter: Counters, amount: int = 1) -> None:
        self.counters[Counters(counter).value] += amount

    def get_counter(self, counter: Counters) -> int:
        return self.counters[Counters(counter).value]
