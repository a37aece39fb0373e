"""
Defines the base structures and abstract class for process snapshot sources.

This module provides:
- ProcessSample: one process's CPU/memory reading at a point in time.
- ProcessSnapshot: the full process table read in one refresh.
- SnapshotUnavailableError: raised when no snapshot could be taken at all.
- AbstractSnapshotSource: the interface every snapshot source implements
  (psutil in production, in-memory fakes in tests).
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessSample:
    """
    CPU and memory reading for a single process or thread.

    Attributes:
        pid: Process (or thread) ID, unique within one snapshot.
        parent_pid: Parent PID. May reference a PID absent from the snapshot
                    when the parent already exited; None for root processes.
        name: The process name (e.g., "firefox", "python3").
        cpu_percent: CPU usage in percent; can exceed 100 on multi-core systems.
        memory_bytes: Resident memory in bytes.
        is_thread: True for a lightweight thread of another process. Thread
                   memory is already counted in the owning process.
    """

    pid: int
    parent_pid: Optional[int]
    name: str
    cpu_percent: float
    memory_bytes: int
    is_thread: bool = False


class SnapshotUnavailableError(Exception):
    """
    Raised when the process table could not be read at all.

    An empty snapshot is a valid answer ("no processes"); this error means
    the source could not be asked.
    """


class ProcessSnapshot:
    """
    Read-only process table from one refresh, keyed by PID.

    Iteration follows the order the source reported the processes in, which
    keeps relation resolution deterministic for a given snapshot.
    """

    def __init__(self, samples: Iterable[ProcessSample], taken_at: Optional[float] = None):
        self._samples: Dict[int, ProcessSample] = {}
        for sample in samples:
            if sample.pid in self._samples:
                logger.debug(f"Duplicate PID {sample.pid} in snapshot, keeping first record")
                continue
            self._samples[sample.pid] = sample
        self.taken_at = time.time() if taken_at is None else taken_at

    def get(self, pid: int) -> Optional[ProcessSample]:
        return self._samples.get(pid)

    def __contains__(self, pid: object) -> bool:
        return pid in self._samples

    def __iter__(self) -> Iterator[ProcessSample]:
        return iter(self._samples.values())

    def __len__(self) -> int:
        return len(self._samples)

    def __repr__(self) -> str:
        return f"ProcessSnapshot({len(self._samples)} processes, taken_at={self.taken_at:.3f})"


class AbstractSnapshotSource(ABC):
    """
    Abstract base class for process snapshot sources.

    A source answers two questions on demand: what the whole process table
    looks like right now, and what a single PID looks like right now.
    Implementations must not block indefinitely.
    """

    @abstractmethod
    def take_snapshot(self) -> ProcessSnapshot:
        """
        Read the full current process table.

        Returns:
            A ProcessSnapshot, possibly empty.

        Raises:
            SnapshotUnavailableError: If the table could not be read.
        """

    @abstractmethod
    def get_process(self, pid: int) -> Optional[ProcessSample]:
        """
        Read a single process by PID.

        Returns:
            The sample, or None if no such process exists.

        Raises:
            SnapshotUnavailableError: If the process table could not be read.
        """
