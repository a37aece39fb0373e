"""
Pytest configuration and shared fixtures for the procwatch test suite.

This module provides common fixtures, an in-memory snapshot source and
configuration file helpers for all test modules.
"""

import shutil
import sys
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from procwatch.collectors.base import (  # noqa: E402
    AbstractSnapshotSource,
    ProcessSample,
    ProcessSnapshot,
    SnapshotUnavailableError,
)


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


def make_sample(
    pid: int,
    parent_pid: Optional[int] = None,
    name: str = "proc",
    cpu: float = 0.0,
    memory: int = 0,
    is_thread: bool = False,
) -> ProcessSample:
    """Build a ProcessSample with test defaults."""
    return ProcessSample(
        pid=pid,
        parent_pid=parent_pid,
        name=name,
        cpu_percent=cpu,
        memory_bytes=memory,
        is_thread=is_thread,
    )


class FakeSnapshotSource(AbstractSnapshotSource):
    """
    In-memory snapshot source.

    Each ``take_snapshot`` call returns the next queued table; the last table
    is repeated once the queue is exhausted. Queue ``None`` to make a call
    raise SnapshotUnavailableError.
    """

    def __init__(self, tables: Optional[Iterable[Optional[List[ProcessSample]]]] = None):
        self.tables: List[Optional[List[ProcessSample]]] = list(tables or [[]])
        self.calls = 0
        self._current: Optional[List[ProcessSample]] = None

    def queue(self, table: Optional[List[ProcessSample]]) -> None:
        self.tables.append(table)

    def take_snapshot(self) -> ProcessSnapshot:
        self.calls += 1
        if self.tables:
            self._current = self.tables.pop(0)
        if self._current is None:
            raise SnapshotUnavailableError("process table unavailable")
        return ProcessSnapshot(self._current, taken_at=1000.0 + self.calls)

    def get_process(self, pid: int) -> Optional[ProcessSample]:
        for sample in self._current or []:
            if sample.pid == pid:
                return sample
        return None


class TestUtils:
    """Utility functions for testing."""

    make_sample = staticmethod(make_sample)
    FakeSnapshotSource = FakeSnapshotSource


@pytest.fixture
def test_utils():
    """Provide test utility functions."""
    return TestUtils


@pytest.fixture
def browser_table() -> List[ProcessSample]:
    """
    A small process table:

        1 init
        |- 100 firefox
        |   |- 101 firefox (content)
        |   |   `- 102 helper
        |   `- 103 firefox (thread of 100)
        `- 200 bash
            `- 201 firefox
    """
    return [
        make_sample(1, None, "init", cpu=0.1, memory=1_000),
        make_sample(100, 1, "firefox", cpu=10.0, memory=100_000),
        make_sample(101, 100, "firefox", cpu=5.0, memory=50_000),
        make_sample(102, 101, "helper", cpu=1.0, memory=10_000),
        make_sample(103, 100, "firefox", cpu=2.0, memory=100_000, is_thread=True),
        make_sample(200, 1, "bash", cpu=0.5, memory=5_000),
        make_sample(201, 200, "firefox", cpu=3.0, memory=30_000),
    ]


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def sample_config_data() -> Dict[str, Any]:
    """Sample [monitor] configuration data for testing."""
    return {
        "general": {
            "log_level": "DEBUG",
            "watch": ["firefox", "pid:42"],
        },
        "collection": {
            "interval_seconds": 0.5,
            "history_length": 60,
            "include_threads": True,
        },
        "storage": {
            "compression": "zstd",
            "export_dir": "",
        },
    }


@pytest.fixture
def config_files(temp_dir, sample_config_data):
    """Create a temporary config.toml for testing."""
    import toml

    config_file = temp_dir / "config.toml"
    with open(config_file, "w") as f:
        toml.dump({"monitor": sample_config_data}, f)

    return {"config": config_file, "dir": temp_dir}


@pytest.fixture(autouse=True)
def clear_config_after_test():
    """Automatically clear configuration cache after each test."""
    original_config_path = Path(__file__).parent.parent / "conf" / "config.toml"

    yield  # Run the test

    from procwatch.config import clear_config_cache, set_config_path

    clear_config_cache()
    # Always reset to original config path
    set_config_path(original_config_path)
