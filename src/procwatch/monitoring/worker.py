"""
Background thread driving the monitor engine's refresh ticks.
"""

import logging
import threading
import time
from typing import Optional

from ..collectors.base import SnapshotUnavailableError
from ..validation import ErrorSeverity, handle_snapshot_error
from .engine import MonitorEngine

logger = logging.getLogger(__name__)


class RefreshWorker:
    """
    Runs ``engine.maybe_refresh()`` on a daemon thread until stopped.

    Between ticks the worker sleeps in short chunks on a stop event, so a stop
    request and interval changes are honoured quickly.

    Attributes:
        engine: The engine whose ticks this worker drives.
        poll_interval: Upper bound of one sleep chunk, in seconds.
    """

    def __init__(self, engine: MonitorEngine, poll_interval: float = 0.05,
                 thread_name: str = "procwatch-refresh"):
        self.engine = engine
        self.poll_interval = poll_interval
        self.thread_name = thread_name
        self._stop_event = threading.Event()
        self._worker_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._start_time: Optional[float] = None
        self.iteration_count = 0

    @property
    def is_running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def start(self) -> None:
        """
        Start the refresh thread.

        Raises:
            RuntimeError: If the worker is already running.
        """
        with self._worker_lock:
            if self.is_running:
                raise RuntimeError("RefreshWorker is already running")
            self._stop_event.clear()
            self._start_time = time.monotonic()
            self._thread = threading.Thread(target=self._run, name=self.thread_name, daemon=True)
            self._thread.start()
        logger.info(f"RefreshWorker started (interval: {self.engine.refresh_interval}s)")

    def stop(self, timeout: float = 10.0) -> bool:
        """
        Stop the refresh thread.

        Args:
            timeout: Maximum time to wait for the thread to exit (seconds).
                     If 0, returns immediately without waiting.

        Returns:
            True if the thread exited (or was not running), False on timeout.
        """
        with self._worker_lock:
            thread = self._thread
            if thread is None or not thread.is_alive():
                logger.debug("RefreshWorker was not running")
                return True
            logger.info(f"Stopping RefreshWorker (timeout: {timeout}s)")
            self._stop_event.set()

        if timeout <= 0:
            return True
        thread.join(timeout)
        if thread.is_alive():
            logger.warning(f"RefreshWorker did not stop within {timeout}s")
            return False

        if self._start_time is not None:
            logger.info(f"RefreshWorker ran for {time.monotonic() - self._start_time:.2f} seconds")
        return True

    def _run(self) -> None:
        logger.debug("Refresh loop started")
        while not self._stop_event.is_set():
            try:
                if self.engine.maybe_refresh():
                    self.iteration_count += 1
            except SnapshotUnavailableError as e:
                handle_snapshot_error(
                    e, "refresh tick", severity=ErrorSeverity.WARNING, reraise=False, logger=logger
                )
            except Exception as e:
                logger.error(f"Unexpected error in refresh tick: {e}", exc_info=True)

            wait = self.engine.seconds_until_refresh()
            # Interruptible sleep; interval changes are seen on the next chunk.
            self._stop_event.wait(min(max(wait, 0.001), self.poll_interval))

        logger.info(f"Refresh loop finished after {self.iteration_count} ticks")
