"""
Process snapshot source implementation using the 'psutil' library.

This module provides the PsutilSnapshotSource class, which reads the PID,
parent PID, name, CPU% and resident memory of every running process, and
optionally the CPU% of every thread.
"""

import logging
import time
from typing import Dict, List, Optional

import psutil

from .base import (
    AbstractSnapshotSource,
    ProcessSample,
    ProcessSnapshot,
    SnapshotUnavailableError,
)

logger = logging.getLogger(__name__)


class PsutilSnapshotSource(AbstractSnapshotSource):
    """
    Reads process snapshots with psutil.

    CPU percentages come from ``cpu_percent(interval=None)``, which compares
    against the previous call on the same ``psutil.Process`` object.
    ``psutil.process_iter`` caches those objects between calls, so every
    snapshot after the first reports the usage since the previous snapshot;
    the first snapshot reports 0.0 for every process.

    Attributes:
        PROCESS_ATTRS: The attributes fetched for every process.
        include_threads: Whether threads are reported as their own rows.
    """

    PROCESS_ATTRS: List[str] = ["pid", "ppid", "name", "cpu_percent", "memory_info"]
    """Defines the per-process attributes read by this implementation."""

    def __init__(self, include_threads: bool = False):
        """
        Initializes the PsutilSnapshotSource.

        Args:
            include_threads: Report every non-main thread of each process as a
                             separate ``is_thread=True`` row parented to it.
        """
        self.include_threads = include_threads
        # Per-thread psutil.Process objects, kept so cpu_percent has a baseline.
        self._thread_cache: Dict[int, psutil.Process] = {}
        logger.info(f"PsutilSnapshotSource initialized (include_threads={include_threads})")

    def take_snapshot(self) -> ProcessSnapshot:
        """
        Scan all system processes and return them as one snapshot.

        Raises:
            SnapshotUnavailableError: If the process table cannot be iterated.
        """
        start_time = time.monotonic()
        samples: List[ProcessSample] = []
        seen_threads = set()

        try:
            for proc in psutil.process_iter():
                sample = self._sample_process(proc)
                if sample is None:
                    continue
                samples.append(sample)
                if self.include_threads:
                    samples.extend(self._sample_threads(proc, sample, seen_threads))
        except (psutil.Error, OSError) as e:
            raise SnapshotUnavailableError(f"Cannot read process table: {e}") from e

        if self.include_threads:
            for tid in list(self._thread_cache):
                if tid not in seen_threads:
                    del self._thread_cache[tid]

        logger.debug(
            f"Snapshot of {len(samples)} rows took {time.monotonic() - start_time:.3f}s"
        )
        return ProcessSnapshot(samples)

    def get_process(self, pid: int) -> Optional[ProcessSample]:
        """
        Read a single process by PID.

        The CPU% of a one-off lookup has no baseline and reads 0.0.
        """
        try:
            proc = psutil.Process(pid)
        except psutil.NoSuchProcess:
            return None
        except (psutil.Error, OSError) as e:
            raise SnapshotUnavailableError(f"Cannot read process {pid}: {e}") from e
        return self._sample_process(proc)

    def _sample_process(self, proc: psutil.Process) -> Optional[ProcessSample]:
        """
        Build a sample for one process.

        Returns:
            A ProcessSample, or None if the process vanished mid-read.
        """
        try:
            # as_dict inside the try block: .info can race with short-lived
            # processes, as_dict raises NoSuchProcess which we can skip.
            info = proc.as_dict(attrs=self.PROCESS_ATTRS, ad_value=None)
        except (psutil.NoSuchProcess, psutil.ZombieProcess):
            return None

        pid = info["pid"]
        parent_pid = info["ppid"]
        # PID 0 reports itself as its own parent on some platforms.
        if parent_pid is not None and parent_pid == pid:
            parent_pid = None

        mem_info = info["memory_info"]
        return ProcessSample(
            pid=pid,
            parent_pid=parent_pid,
            name=info["name"] or "",
            cpu_percent=float(info["cpu_percent"] or 0.0),
            memory_bytes=int(mem_info.rss) if mem_info is not None else 0,
            is_thread=False,
        )

    def _sample_threads(
        self, proc: psutil.Process, owner: ProcessSample, seen_threads: set
    ) -> List[ProcessSample]:
        """
        Build one ``is_thread=True`` sample per non-main thread of ``proc``.

        Threads the platform does not expose as PIDs keep a CPU% of 0.0.
        """
        try:
            threads = proc.threads()
        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
            return []

        thread_samples = []
        for thread in threads:
            tid = thread.id
            if tid == owner.pid:
                continue
            seen_threads.add(tid)
            thread_samples.append(
                ProcessSample(
                    pid=tid,
                    parent_pid=owner.pid,
                    name=owner.name,
                    cpu_percent=self._thread_cpu_percent(tid),
                    memory_bytes=owner.memory_bytes,
                    is_thread=True,
                )
            )
        return thread_samples

    def _thread_cpu_percent(self, tid: int) -> float:
        try:
            thread_proc = self._thread_cache.get(tid)
            if thread_proc is None:
                thread_proc = psutil.Process(tid)
                self._thread_cache[tid] = thread_proc
            return float(thread_proc.cpu_percent(interval=None))
        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
            self._thread_cache.pop(tid, None)
            return 0.0
