"""
Process snapshot sources.

The monitor engine reads the system process table through the
AbstractSnapshotSource interface; PsutilSnapshotSource is the production
implementation.
"""

from .base import (
    AbstractSnapshotSource,
    ProcessSample,
    ProcessSnapshot,
    SnapshotUnavailableError,
)
from .psutil_source import PsutilSnapshotSource

__all__ = [
    "AbstractSnapshotSource",
    "ProcessSample",
    "ProcessSnapshot",
    "SnapshotUnavailableError",
    "PsutilSnapshotSource",
]
