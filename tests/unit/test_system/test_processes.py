"""
Unit tests for the process picker queries.
"""

import pytest

from procwatch.collectors import ProcessSnapshot
from procwatch.models import ProcessIdentifier
from procwatch.system import (
    find_process,
    list_process_names,
    list_processes_with_pid,
    process_exists,
)


@pytest.fixture
def snapshot(browser_table):
    return ProcessSnapshot(browser_table)


@pytest.mark.unit
class TestProcessQueries:
    def test_names_sorted_and_unique(self, snapshot):
        assert list_process_names(snapshot) == ["bash", "firefox", "helper", "init"]

    def test_names_skip_threads_by_default(self, test_utils):
        snapshot = ProcessSnapshot([test_utils.make_sample(5, 1, "worker-thread", is_thread=True)])

        assert list_process_names(snapshot) == []
        assert list_process_names(snapshot, include_threads=True) == ["worker-thread"]

    def test_processes_with_pid(self, snapshot):
        pairs = list_processes_with_pid(snapshot)

        assert pairs == [
            ("bash", 200),
            ("firefox", 100),
            ("firefox", 101),
            ("firefox", 201),
            ("helper", 102),
            ("init", 1),
        ]

    def test_find_process(self, snapshot):
        assert find_process(snapshot, 102).name == "helper"
        assert find_process(snapshot, 999) is None

    @pytest.mark.parametrize(
        "text, expected",
        [("firefox", True), ("pid:200", True), ("pid:999", False), ("chrome", False)],
    )
    def test_process_exists(self, snapshot, text, expected):
        assert process_exists(ProcessIdentifier.parse(text), snapshot) is expected
