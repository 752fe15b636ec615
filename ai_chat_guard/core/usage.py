"""
In-memory usage tracking.

Counts successful completions per model for the lifetime of one
assistant instance. Nothing here is persisted.
"""

import threading
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List


@dataclass(frozen=True)
class UsageStatistic:
    """Share of successful completions served by one model."""
    model: str
    count: int
    percentage: float


class UsageTracker:
    """Per-instance usage counters.

    Counters start empty and only ever grow. Increments are guarded by a
    lock so a tracker can be shared by concurrent completions.
    """

    def __init__(self):
        self._counts: Dict[str, int] = {}
        self._total_cost = Decimal("0")
        self._lock = threading.Lock()

    def record(self, model: str, cost: float = 0.0) -> None:
        """Record one successful completion."""
        with self._lock:
            self._counts[model] = self._counts.get(model, 0) + 1
            self._total_cost += Decimal(str(cost))

    @property
    def total_completions(self) -> int:
        with self._lock:
            return sum(self._counts.values())

    @property
    def total_cost(self) -> float:
        """Estimated cost of all recorded completions."""
        with self._lock:
            return float(self._total_cost)

    def statistics(self) -> List[UsageStatistic]:
        """Per-model statistics, most used first.

        Returns:
            Empty list when nothing has been recorded. Ties keep the
            order in which models were first seen.
        """
        with self._lock:
            counts = list(self._counts.items())

        total = sum(count for _, count in counts)
        if total == 0:
            return []

        ordered = sorted(counts, key=lambda item: item[1], reverse=True)
        return [
            UsageStatistic(model=model, count=count, percentage=count * 100 / total)
            for model, count in ordered
        ]
