"""
Process table queries for choosing what to watch.

These helpers answer the questions a process picker asks about a snapshot:
which process names exist, which (name, PID) pairs exist, and whether an
identifier currently matches anything.
"""

import logging
from typing import List, Optional, Tuple

from ..collectors.base import ProcessSample, ProcessSnapshot
from ..models.identifiers import ProcessIdentifier

logger = logging.getLogger(__name__)


def list_process_names(snapshot: ProcessSnapshot, include_threads: bool = False) -> List[str]:
    """
    Return the distinct process names of a snapshot, sorted.

    Args:
        snapshot: The process table to read.
        include_threads: Whether thread rows contribute their names.

    Examples:
        A snapshot with "bash", "sshd" and "bash" gives ``["bash", "sshd"]``.
    """
    names = {
        sample.name
        for sample in snapshot
        if sample.name and (include_threads or not sample.is_thread)
    }
    return sorted(names)


def list_processes_with_pid(
    snapshot: ProcessSnapshot, include_threads: bool = False
) -> List[Tuple[str, int]]:
    """Return ``(name, pid)`` pairs sorted by name, then PID."""
    pairs = [
        (sample.name, sample.pid)
        for sample in snapshot
        if include_threads or not sample.is_thread
    ]
    pairs.sort()
    return pairs


def find_process(snapshot: ProcessSnapshot, pid: int) -> Optional[ProcessSample]:
    """Return the sample of one PID, or None if it is not in the snapshot."""
    return snapshot.get(pid)


def process_exists(identifier: ProcessIdentifier, snapshot: ProcessSnapshot) -> bool:
    """
    Check whether an identifier matches at least one process in a snapshot.

    A PID identifier matches that exact PID; a name identifier matches any
    process with exactly that name.
    """
    if identifier.is_pid:
        return identifier.pid in snapshot
    exists = any(sample.name == identifier.name for sample in snapshot)
    if not exists:
        logger.debug(f"No process named '{identifier.name}' in snapshot")
    return exists
