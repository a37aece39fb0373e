"""
Monitor engine: the periodic refresh tick and the published results.

The engine owns the watch list and one MonitoredGroup per watched identifier.
A refresh tick reads one process snapshot, resolves every group against it,
updates the rolling histories and publishes a fresh GroupResult per group.

Threading model:
- One refresh tick at a time (normally driven by a RefreshWorker thread).
  Only the tick touches MonitoredGroup objects.
- Readers call ``get_last_result``/``get_all_results`` from any thread. The
  published results live in a dict that is replaced, never mutated, so a
  reader sees either the previous tick's results or the new ones.
- Watch list edits and configuration changes take a short lock and are
  picked up at the start of the next tick.
"""

import logging
import threading
import time
from enum import Enum
from typing import Dict, List, Optional, Set

from ..collectors.base import (
    AbstractSnapshotSource,
    ProcessSample,
    ProcessSnapshot,
    SnapshotUnavailableError,
)
from ..models.config import (
    DEFAULT_HISTORY_LENGTH,
    DEFAULT_INTERVAL_SECONDS,
    MIN_INTERVAL_SECONDS,
    MonitorConfig,
)
from ..models.identifiers import ProcessIdentifier
from ..models.results import GroupResult
from ..relations import RelationResolver
from ..validation import validate_positive_float, validate_positive_integer
from .group import MonitoredGroup

logger = logging.getLogger(__name__)


class EngineState(Enum):
    """Whether a refresh tick is currently running."""

    IDLE = "idle"
    REFRESHING = "refreshing"


class MonitorEngine:
    """
    Periodically refreshes the statistics of every watched process group.

    Attributes:
        source: The snapshot source the process table is read from.
        resolver: Resolves identifiers to group members.
        tick_count: Number of ticks that published results.
        failed_tick_count: Number of ticks aborted by an unavailable snapshot.
    """

    def __init__(
        self,
        source: AbstractSnapshotSource,
        refresh_interval: float = DEFAULT_INTERVAL_SECONDS,
        history_capacity: int = DEFAULT_HISTORY_LENGTH,
    ):
        self.source = source
        self.resolver = RelationResolver()

        self._refresh_interval = validate_positive_float(
            refresh_interval, min_value=MIN_INTERVAL_SECONDS, field_name="refresh_interval"
        )
        self._history_capacity = validate_positive_integer(
            history_capacity, min_value=1, field_name="history_capacity"
        )

        self._lock = threading.Lock()
        self._tick_lock = threading.Lock()
        self._state = EngineState.IDLE

        # Guarded by _lock
        self._watch: List[ProcessIdentifier] = []
        self._pending_clears: Set[ProcessIdentifier] = set()
        self._cleared_in_flight: Set[ProcessIdentifier] = set()
        self._published: Dict[ProcessIdentifier, GroupResult] = {}

        # Owned by the refresh tick
        self._groups: Dict[ProcessIdentifier, MonitoredGroup] = {}
        self._last_refresh: Optional[float] = None
        self._last_snapshot: Optional[ProcessSnapshot] = None

        self.tick_count = 0
        self.failed_tick_count = 0

        logger.info(
            f"MonitorEngine initialized (interval: {self._refresh_interval}s, "
            f"history: {self._history_capacity} samples)"
        )

    @classmethod
    def from_config(
        cls, config: MonitorConfig, source: Optional[AbstractSnapshotSource] = None
    ) -> "MonitorEngine":
        """
        Build an engine from the monitor configuration.

        Without an explicit source, a PsutilSnapshotSource honouring
        ``include_threads`` is created. The configured watch list is added
        in order.
        """
        if source is None:
            from ..collectors.psutil_source import PsutilSnapshotSource

            source = PsutilSnapshotSource(include_threads=config.include_threads)
        engine = cls(
            source,
            refresh_interval=config.interval_seconds,
            history_capacity=config.history_length,
        )
        for text in config.watch:
            engine.add_group(ProcessIdentifier.parse(text))
        return engine

    # --- Configuration ---

    @property
    def refresh_interval(self) -> float:
        return self._refresh_interval

    @property
    def history_capacity(self) -> int:
        return self._history_capacity

    def set_refresh_interval(self, seconds: float) -> None:
        """Set the minimum time between ticks; gates the next tick."""
        value = validate_positive_float(
            seconds, min_value=MIN_INTERVAL_SECONDS, field_name="refresh_interval"
        )
        with self._lock:
            self._refresh_interval = value
        logger.info(f"Refresh interval set to {value}s")

    def set_history_capacity(self, capacity: int) -> None:
        """
        Set the history window length.

        Applied at the start of the next tick. Groups whose capacity differs
        lose their history at that point.
        """
        value = validate_positive_integer(capacity, min_value=1, field_name="history_capacity")
        with self._lock:
            self._history_capacity = value
        logger.info(f"History capacity set to {value} samples (applied on next refresh)")

    # --- Watch list ---

    def watched(self) -> List[ProcessIdentifier]:
        """Return the watched identifiers in insertion order."""
        with self._lock:
            return list(self._watch)

    def add_group(self, identifier: ProcessIdentifier) -> bool:
        """
        Start watching an identifier.

        The group is published with an empty result until its first tick.

        Returns:
            False if the identifier is already watched.
        """
        with self._lock:
            if identifier in self._watch:
                return False
            self._watch.append(identifier)
            # A group removed and re-added starts over, even mid-tick.
            self._pending_clears.add(identifier)
            self._cleared_in_flight.add(identifier)
            self._publish_one(identifier, GroupResult.empty(identifier))
        logger.info(f"Watching {identifier}")
        return True

    def remove_group(self, identifier: ProcessIdentifier) -> bool:
        """
        Stop watching an identifier and drop its published result.

        Returns:
            False if the identifier was not watched.
        """
        with self._lock:
            if identifier not in self._watch:
                return False
            self._watch.remove(identifier)
            self._pending_clears.discard(identifier)
            published = dict(self._published)
            published.pop(identifier, None)
            self._published = published
        logger.info(f"Stopped watching {identifier}")
        return True

    def clear_group_history(self, identifier: ProcessIdentifier) -> bool:
        """
        Discard a group's history, keeping it on the watch list.

        The empty result is published at once; the group's windows are reset
        at the start of the next tick.

        Returns:
            False if the identifier is not watched.
        """
        with self._lock:
            if identifier not in self._watch:
                return False
            self._pending_clears.add(identifier)
            self._cleared_in_flight.add(identifier)
            self._publish_one(identifier, GroupResult.empty(identifier))
        logger.info(f"Cleared history of {identifier}")
        return True

    def _publish_one(self, identifier: ProcessIdentifier, result: GroupResult) -> None:
        # Caller holds _lock
        published = dict(self._published)
        published[identifier] = result
        self._published = published

    # --- Readers ---

    def get_last_result(self, identifier: ProcessIdentifier) -> Optional[GroupResult]:
        """Return the last published result of a group, or None if not watched."""
        return self._published.get(identifier)

    def get_all_results(self) -> Dict[ProcessIdentifier, GroupResult]:
        """Return all published results keyed by identifier, in watch order."""
        return dict(self._published)

    def group(self, identifier: ProcessIdentifier) -> Optional[MonitoredGroup]:
        """
        The mutable state of a group, for inspection between ticks.

        Only the refresh tick may modify it. Groups added since the last tick
        have no state yet.
        """
        return self._groups.get(identifier)

    @property
    def last_snapshot(self) -> Optional[ProcessSnapshot]:
        """The process table read by the last successful tick."""
        return self._last_snapshot

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def last_refresh(self) -> Optional[float]:
        """Monotonic time of the last tick attempt, None before the first."""
        return self._last_refresh

    # --- Refresh ---

    def should_refresh(self, now: Optional[float] = None) -> bool:
        """
        Check whether a tick is due.

        Args:
            now: A ``time.monotonic()`` reading; the current one if omitted.
        """
        if self._last_refresh is None:
            return True
        if now is None:
            now = time.monotonic()
        return now - self._last_refresh >= self._refresh_interval

    def seconds_until_refresh(self, now: Optional[float] = None) -> float:
        """Time left until the next tick is due, 0.0 if it already is."""
        if self._last_refresh is None:
            return 0.0
        if now is None:
            now = time.monotonic()
        return max(0.0, self._last_refresh + self._refresh_interval - now)

    def maybe_refresh(self) -> bool:
        """
        Run a tick if one is due.

        Returns:
            True if a tick ran.

        Raises:
            SnapshotUnavailableError: If the due tick could not read the
                process table.
        """
        if not self.should_refresh():
            return False
        self.refresh()
        return True

    def refresh(self) -> Dict[ProcessIdentifier, GroupResult]:
        """
        Run one refresh tick and publish its results.

        Returns:
            The results computed by this tick, keyed by identifier.

        Raises:
            RuntimeError: If another tick is already running.
            SnapshotUnavailableError: If the process table could not be read.
                The previously published results are kept.
        """
        if not self._tick_lock.acquire(blocking=False):
            raise RuntimeError("A refresh tick is already in progress")
        try:
            self._state = EngineState.REFRESHING
            return self._run_tick()
        finally:
            self._state = EngineState.IDLE
            self._tick_lock.release()

    def _run_tick(self) -> Dict[ProcessIdentifier, GroupResult]:
        with self._lock:
            watch = list(self._watch)
            clears = set(self._pending_clears)
            self._pending_clears.clear()
            self._cleared_in_flight = set()
            capacity = self._history_capacity

        self._sync_groups(watch, clears, capacity)
        self._last_refresh = time.monotonic()

        try:
            snapshot = self.source.take_snapshot()
        except SnapshotUnavailableError:
            self.failed_tick_count += 1
            logger.debug("Snapshot unavailable, keeping previous results")
            raise

        results: Dict[ProcessIdentifier, GroupResult] = {}
        for identifier in watch:
            group = self._groups[identifier]
            self._refresh_group(group, snapshot)
            results[identifier] = group.to_result(snapshot.taken_at)

        self._publish(results)
        self._last_snapshot = snapshot
        self.tick_count += 1
        logger.debug(
            f"Tick {self.tick_count}: {len(results)} groups over {len(snapshot)} processes"
        )
        return results

    def _sync_groups(
        self, watch: List[ProcessIdentifier], clears: Set[ProcessIdentifier], capacity: int
    ) -> None:
        """Create, drop, clear and resize groups to match the watch list."""
        for identifier in list(self._groups):
            if identifier not in watch:
                del self._groups[identifier]

        for identifier in watch:
            group = self._groups.get(identifier)
            if group is None:
                self._groups[identifier] = MonitoredGroup(identifier, capacity)
                continue
            group.reconfigure(capacity)
            if identifier in clears:
                group.clear()

    def _refresh_group(self, group: MonitoredGroup, snapshot: ProcessSnapshot) -> None:
        members = self.resolver.resolve(group.identifier, snapshot)
        if members is None:
            group.mark_vanished()
            return

        live: List[ProcessSample] = []
        total_cpu = 0.0
        total_memory = 0
        process_count = 0
        thread_count = 0

        for pid in members:
            sample = snapshot.get(pid)
            if sample is None:
                continue
            group.store.record(pid, sample.cpu_percent, sample.memory_bytes)
            live.append(sample)
            if sample.is_thread:
                # Thread memory is already part of the owning process.
                thread_count += 1
                continue
            process_count += 1
            total_cpu += sample.cpu_percent
            total_memory += sample.memory_bytes

        group.store.prune(members)
        group.update(live, total_cpu, total_memory, process_count, thread_count)

    def _publish(self, results: Dict[ProcessIdentifier, GroupResult]) -> None:
        with self._lock:
            published: Dict[ProcessIdentifier, GroupResult] = {}
            for identifier in self._watch:
                result = results.get(identifier)
                if result is None or identifier in self._cleared_in_flight:
                    # Added or cleared while the tick ran: keep what is published.
                    existing = self._published.get(identifier)
                    result = existing if existing is not None else GroupResult.empty(identifier)
                published[identifier] = result
            self._published = published
