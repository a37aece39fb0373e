"""
Mutable per-group monitoring state.

A MonitoredGroup is owned by the monitor engine's refresh tick. Readers never
touch it: they get the immutable GroupResult built by ``to_result``.
"""

import logging
import math
from typing import List, Optional

from ..collectors.base import ProcessSample
from ..metrics import MetricPair, ProcessMetricsStore
from ..models.identifiers import ProcessIdentifier
from ..models.results import GroupResult, MemberStats, ProcessGeneralStats

logger = logging.getLogger(__name__)


def _as_bytes(value: float) -> int:
    return int(value) if math.isfinite(value) else 0


class MonitoredGroup:
    """
    One watched identifier with its history and last computed statistics.

    Attributes:
        identifier: The identifier the group was added with.
        store: Per-member CPU/memory windows.
        aggregate: Windows fed with the group's per-tick CPU and memory sums.
        stats: Statistics computed by the last tick.
        members: Samples of the members seen by the last tick, in discovery order.
        is_running: False when the last tick found no matching process.
    """

    def __init__(self, identifier: ProcessIdentifier, capacity: int):
        self.identifier = identifier
        self.store = ProcessMetricsStore(capacity)
        self.aggregate = MetricPair.create(capacity)
        self.stats = ProcessGeneralStats()
        self.members: List[ProcessSample] = []
        self.is_running = False

    @property
    def capacity(self) -> int:
        return self.store.capacity

    def reconfigure(self, capacity: int) -> bool:
        """
        Apply a new history capacity.

        A different capacity discards all member and aggregate history; the
        group restarts empty on its next tick.

        Returns:
            True if history was discarded.
        """
        if not self.store.reconfigure(capacity):
            return False
        self.aggregate = MetricPair.create(capacity)
        self.stats = ProcessGeneralStats()
        self.members = []
        logger.info(f"Group {self.identifier}: history discarded for capacity {capacity}")
        return True

    def clear(self) -> None:
        """Reset history and statistics, keeping the identifier."""
        self.store.clear()
        self.aggregate = MetricPair.create(self.capacity)
        self.stats = ProcessGeneralStats()
        self.members = []
        self.is_running = False

    def mark_vanished(self) -> None:
        """Record a tick in which no process matched the identifier."""
        self.store.prune(())
        self.members = []
        self.is_running = False
        self.stats = self._aggregate_stats(0.0, 0, 0, 0)

    def update(
        self,
        members: List[ProcessSample],
        total_cpu: float,
        total_memory: int,
        process_count: int,
        thread_count: int,
    ) -> None:
        """Push this tick's sums into the aggregate window and refresh stats."""
        self.aggregate.push(total_cpu, total_memory)
        self.members = members
        self.is_running = True
        self.stats = self._aggregate_stats(total_cpu, total_memory, process_count, thread_count)

    def _aggregate_stats(
        self, current_cpu: float, current_memory: int, process_count: int, thread_count: int
    ) -> ProcessGeneralStats:
        return ProcessGeneralStats(
            current_cpu=current_cpu,
            peak_cpu=self.aggregate.cpu.peak(),
            avg_cpu=self.aggregate.cpu.average(),
            current_memory=current_memory,
            peak_memory=_as_bytes(self.aggregate.memory.peak()),
            avg_memory=_as_bytes(self.aggregate.memory.average()),
            process_count=process_count,
            thread_count=thread_count,
        )

    def _member_stats(self, sample: ProcessSample) -> Optional[MemberStats]:
        pair = self.store.get(sample.pid)
        if pair is None:
            return None
        return MemberStats(
            pid=sample.pid,
            parent_pid=sample.parent_pid,
            name=sample.name,
            is_thread=sample.is_thread,
            current_cpu=pair.cpu.last(),
            peak_cpu=pair.cpu.peak(),
            avg_cpu=pair.cpu.average(),
            current_memory=_as_bytes(pair.memory.last()),
            peak_memory=_as_bytes(pair.memory.peak()),
            avg_memory=_as_bytes(pair.memory.average()),
        )

    def to_result(self, refreshed_at: float) -> GroupResult:
        """Build the immutable view published to readers."""
        members = tuple(
            stats for stats in (self._member_stats(sample) for sample in self.members)
            if stats is not None
        )
        return GroupResult(
            identifier=self.identifier,
            stats=self.stats,
            members=members,
            cpu_history=tuple(self.aggregate.cpu.to_ordered_sequence()),
            memory_history=tuple(self.aggregate.memory.to_ordered_sequence()),
            is_running=self.is_running,
            refreshed_at=refreshed_at,
        )
