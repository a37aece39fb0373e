"""
Per-group CPU/memory history keyed by PID.

A ProcessMetricsStore owns one MetricPair per member PID of a monitored
group. Entries are created lazily on a PID's first sample and dropped by
``prune`` once the PID leaves the group's relation closure, so history for
exited processes does not accumulate.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from ..validation import validate_positive_integer
from .rolling import RollingMetric

logger = logging.getLogger(__name__)


@dataclass
class MetricPair:
    """CPU and memory windows of the same capacity for one series owner."""

    cpu: RollingMetric
    memory: RollingMetric

    @classmethod
    def create(cls, capacity: int) -> "MetricPair":
        return cls(cpu=RollingMetric(capacity), memory=RollingMetric(capacity))

    @property
    def capacity(self) -> int:
        return self.cpu.capacity

    def push(self, cpu_percent: float, memory_value: float) -> None:
        self.cpu.push(cpu_percent)
        self.memory.push(memory_value)


class ProcessMetricsStore:
    """
    Mapping from PID to its CPU/memory rolling windows.

    The store is built for one capacity. ``reconfigure`` with a different
    capacity discards every window: histories are never truncated or migrated.
    """

    def __init__(self, capacity: int):
        self._capacity = validate_positive_integer(capacity, min_value=1, field_name="capacity")
        self._metrics: Dict[int, MetricPair] = {}

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._metrics)

    def __contains__(self, pid: object) -> bool:
        return pid in self._metrics

    def pids(self) -> List[int]:
        return list(self._metrics)

    def get(self, pid: int) -> Optional[MetricPair]:
        return self._metrics.get(pid)

    def record(self, pid: int, cpu_percent: float, memory_value: float) -> MetricPair:
        """Push one sample for ``pid``, creating its windows on first use."""
        pair = self._metrics.get(pid)
        if pair is None:
            pair = MetricPair.create(self._capacity)
            self._metrics[pid] = pair
        pair.push(cpu_percent, memory_value)
        return pair

    def prune(self, active_pids: Iterable[int]) -> int:
        """
        Drop every PID that is not in ``active_pids``.

        Returns:
            The number of PIDs removed.
        """
        active = set(active_pids)
        stale = [pid for pid in self._metrics if pid not in active]
        for pid in stale:
            del self._metrics[pid]
        if stale:
            logger.debug(f"Pruned {len(stale)} exited PIDs: {stale}")
        return len(stale)

    def clear(self) -> None:
        self._metrics.clear()

    def reconfigure(self, capacity: int) -> bool:
        """
        Switch to a new window capacity.

        If ``capacity`` differs from the current one, all history is
        discarded and the store starts empty with the new capacity.

        Returns:
            True if history was discarded, False if nothing changed.
        """
        capacity = validate_positive_integer(capacity, min_value=1, field_name="capacity")
        if capacity == self._capacity:
            return False
        logger.info(
            f"History capacity changed {self._capacity} -> {capacity}; "
            f"discarding history for {len(self._metrics)} PIDs"
        )
        self._capacity = capacity
        self._metrics = {}
        return True
