"""
Monitoring result models.

This module defines the immutable structures the monitor engine publishes
after every refresh tick. Readers (a GUI, the CLI, the exporter) only ever
see complete GroupResult objects; they never reach into the engine's
mutable per-group state.

The models are designed to support:
- Group-level aggregate statistics (current, peak and average CPU/memory)
- Per-member statistics for the process list of a group
- Aggregate history series for plotting
- Per-view metric selection and member ordering without global state
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from .identifiers import ProcessIdentifier

BYTES_PER_MB = 1024 * 1024


class MetricType(Enum):
    """Which aggregate series a view is showing."""
    CPU = "cpu"
    MEMORY = "memory"


class SortType(Enum):
    """Ordering of a group's member list."""
    AVG_CPU = "avg_cpu"
    MEMORY = "memory"


@dataclass(frozen=True)
class ProcessGeneralStats:
    """
    Aggregate statistics for one monitored group.

    ``current_*`` are this tick's sums over non-thread members. ``peak_*`` and
    ``avg_*`` come from the group's own aggregate rolling window, which is fed
    with those per-tick sums.
    """

    current_cpu: float = 0.0
    peak_cpu: float = 0.0
    avg_cpu: float = 0.0
    # Memory values are in bytes.
    current_memory: int = 0
    peak_memory: int = 0
    avg_memory: int = 0
    process_count: int = 0
    thread_count: int = 0

    @property
    def current_memory_mb(self) -> float:
        return self.current_memory / BYTES_PER_MB

    @property
    def peak_memory_mb(self) -> float:
        return self.peak_memory / BYTES_PER_MB

    @property
    def avg_memory_mb(self) -> float:
        return self.avg_memory / BYTES_PER_MB


@dataclass(frozen=True)
class MemberStats:
    """Statistics for one member (process or thread) of a group."""

    pid: int
    parent_pid: Optional[int]
    name: str
    is_thread: bool
    current_cpu: float
    peak_cpu: float
    avg_cpu: float
    # Memory values are in bytes.
    current_memory: int
    peak_memory: int
    avg_memory: int

    @property
    def current_memory_mb(self) -> float:
        return self.current_memory / BYTES_PER_MB


@dataclass(frozen=True)
class GroupResult:
    """
    The published view of one monitored group after a refresh tick.

    Attributes:
        identifier: The identifier the group was added with.
        stats: Aggregate statistics for the group.
        members: Members in relation-closure discovery order.
        cpu_history: Aggregate CPU% window, oldest first.
        memory_history: Aggregate memory window in bytes, oldest first.
        is_running: False when the last tick found no live member.
        refreshed_at: Epoch seconds of the tick that produced this result.
    """

    identifier: ProcessIdentifier
    stats: ProcessGeneralStats = field(default_factory=ProcessGeneralStats)
    members: Tuple[MemberStats, ...] = ()
    cpu_history: Tuple[float, ...] = ()
    memory_history: Tuple[float, ...] = ()
    is_running: bool = False
    refreshed_at: float = field(default_factory=time.time)

    @classmethod
    def empty(cls, identifier: ProcessIdentifier) -> "GroupResult":
        """A present-but-empty result for a group with no data yet."""
        return cls(identifier=identifier)

    def history(self, metric_type: MetricType) -> Tuple[float, ...]:
        """Return the aggregate series for the requested metric."""
        if metric_type is MetricType.MEMORY:
            return self.memory_history
        return self.cpu_history

    def sorted_members(self, sort_type: SortType) -> Tuple[MemberStats, ...]:
        """Return members ordered for display, highest first."""
        if sort_type is SortType.MEMORY:
            key = lambda member: member.current_memory
        else:
            key = lambda member: member.avg_cpu
        # sorted() is stable, so ties keep discovery order
        return tuple(sorted(self.members, key=key, reverse=True))

    def get_member(self, pid: int) -> Optional[MemberStats]:
        for member in self.members:
            if member.pid == pid:
                return member
        return None
