"""Selection performance tracking."""

import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from ..config.models import SelectionStrategy

if TYPE_CHECKING:
    from .selector import SelectionResult

MAX_RECORDED_SELECTIONS = 100


@dataclass
class SelectionMetrics:
    """Timing and size figures of one selection."""

    task_count: int
    actionable_count: int
    strategy: SelectionStrategy
    execution_time: float
    timestamp: datetime


class PerformanceMonitor:
    """Keeps metrics of the most recent selections."""

    def __init__(self, max_entries: int = MAX_RECORDED_SELECTIONS):
        self._selections: deque[SelectionMetrics] = deque(maxlen=max_entries)
        self._lock = threading.Lock()

    def record_selection(
        self, result: "SelectionResult", task_count: int, actionable_count: int
    ) -> None:
        metrics = SelectionMetrics(
            task_count=task_count,
            actionable_count=actionable_count,
            strategy=result.strategy,
            execution_time=result.execution_time,
            timestamp=result.selected_at,
        )
        with self._lock:
            self._selections.append(metrics)

    def average_execution_time(self, strategy: SelectionStrategy) -> float:
        """Return the mean selection time in seconds for a strategy (0.0 if unseen)."""
        with self._lock:
            times = [m.execution_time for m in self._selections if m.strategy == strategy]
        if not times:
            return 0.0
        return sum(times) / len(times)

    def metrics(self) -> list[SelectionMetrics]:
        with self._lock:
            return list(self._selections)
