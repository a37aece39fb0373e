"""
Tests for the MonitorEngine refresh tick, publishing and interval gating.

The engine is driven with an in-memory snapshot source so every tick sees an
exact, known process table.
"""

import pytest

from conftest import FakeSnapshotSource, make_sample
from procwatch.collectors import ProcessSnapshot, SnapshotUnavailableError
from procwatch.models import MonitorConfig, ProcessIdentifier
from procwatch.monitoring import EngineState, MonitorEngine
from procwatch.validation import ValidationError

FIREFOX = ProcessIdentifier.from_name("firefox")
PID_100 = ProcessIdentifier.from_pid(100)


def make_engine(tables, interval=1.0, capacity=100):
    source = FakeSnapshotSource(tables)
    return MonitorEngine(source, refresh_interval=interval, history_capacity=capacity), source


class HookedSource(FakeSnapshotSource):
    """Runs ``hook`` inside take_snapshot, i.e. while a tick is in flight."""

    def __init__(self, tables, hook):
        super().__init__(tables)
        self.hook = hook

    def take_snapshot(self) -> ProcessSnapshot:
        self.hook()
        return super().take_snapshot()


@pytest.mark.unit
class TestWatchList:
    def test_add_group_publishes_empty_result(self):
        engine, _ = make_engine([[]])

        assert engine.add_group(FIREFOX) is True
        result = engine.get_last_result(FIREFOX)

        assert result is not None
        assert result.is_running is False
        assert result.members == ()
        assert result.stats.process_count == 0

    def test_add_duplicate(self):
        engine, _ = make_engine([[]])
        engine.add_group(FIREFOX)

        assert engine.add_group(ProcessIdentifier.parse("firefox")) is False
        assert engine.watched() == [FIREFOX]

    def test_watch_order_is_insertion_order(self, browser_table):
        engine, _ = make_engine([browser_table])
        for identifier in [PID_100, FIREFOX, ProcessIdentifier.from_name("bash")]:
            engine.add_group(identifier)

        engine.refresh()

        assert engine.watched() == [PID_100, FIREFOX, ProcessIdentifier.from_name("bash")]
        assert list(engine.get_all_results()) == engine.watched()

    def test_unknown_group(self):
        engine, _ = make_engine([[]])

        assert engine.get_last_result(FIREFOX) is None
        assert engine.remove_group(FIREFOX) is False
        assert engine.clear_group_history(FIREFOX) is False

    def test_watch_list_edits_never_refresh(self):
        engine, source = make_engine([[]])
        engine.add_group(FIREFOX)
        engine.clear_group_history(FIREFOX)
        engine.remove_group(FIREFOX)

        assert source.calls == 0


@pytest.mark.unit
class TestRefreshTick:
    def test_aggregates_over_closure(self, browser_table):
        engine, _ = make_engine([browser_table])
        engine.add_group(FIREFOX)

        results = engine.refresh()
        result = engine.get_last_result(FIREFOX)

        assert results[FIREFOX] is result
        assert result.is_running is True
        # 100, 101, 201 and helper 102; thread 103 only counted.
        assert result.stats.current_cpu == pytest.approx(19.0)
        assert result.stats.current_memory == 190_000
        assert result.stats.process_count == 4
        assert result.stats.thread_count == 1
        assert [m.pid for m in result.members] == [100, 101, 103, 201, 102]
        assert result.refreshed_at == 1001.0

    def test_pid_group(self, browser_table):
        engine, _ = make_engine([browser_table])
        engine.add_group(PID_100)

        result = engine.refresh()[PID_100]

        assert [m.pid for m in result.members] == [100, 101, 103, 102]
        assert result.stats.current_cpu == pytest.approx(16.0)
        assert result.stats.process_count == 3

    def test_identical_snapshots_are_idempotent(self, browser_table):
        engine, _ = make_engine([browser_table, browser_table])
        engine.add_group(FIREFOX)

        first = engine.refresh()[FIREFOX]
        second = engine.refresh()[FIREFOX]

        assert second.stats.current_cpu == first.stats.current_cpu
        assert second.stats.current_memory == first.stats.current_memory
        assert len(first.cpu_history) == 1
        assert len(second.cpu_history) == 2
        assert second.stats.avg_cpu == pytest.approx(19.0)

    def test_history_bounded_by_capacity(self, browser_table):
        engine, _ = make_engine([browser_table], capacity=3)
        engine.add_group(FIREFOX)

        for _ in range(5):
            engine.refresh()

        result = engine.get_last_result(FIREFOX)
        assert len(result.cpu_history) == 3
        assert len(result.memory_history) == 3

    def test_peak_and_average_from_aggregate_window(self):
        low = [make_sample(1, None, "svc", cpu=10.0, memory=1000)]
        high = [make_sample(1, None, "svc", cpu=30.0, memory=3000)]
        engine, _ = make_engine([low, high, low])
        identifier = ProcessIdentifier.from_name("svc")
        engine.add_group(identifier)

        for _ in range(3):
            engine.refresh()

        stats = engine.get_last_result(identifier).stats
        assert stats.current_cpu == pytest.approx(10.0)
        assert stats.peak_cpu == pytest.approx(30.0)
        assert stats.avg_cpu == pytest.approx(50.0 / 3)
        assert stats.peak_memory == 3000
        assert stats.avg_memory == 1666

    def test_member_stats_from_member_windows(self):
        tables = [
            [make_sample(1, None, "svc", cpu=2.0, memory=100)],
            [make_sample(1, None, "svc", cpu=4.0, memory=300)],
        ]
        engine, _ = make_engine(tables)
        identifier = ProcessIdentifier.from_pid(1)
        engine.add_group(identifier)
        engine.refresh()
        engine.refresh()

        member = engine.get_last_result(identifier).get_member(1)

        assert member.current_cpu == 4.0
        assert member.peak_cpu == 4.0
        assert member.avg_cpu == pytest.approx(3.0)
        assert member.current_memory == 300
        assert member.avg_memory == 200

    def test_thread_excluded_from_sums(self):
        table = [
            make_sample(1, None, "app", cpu=1.0, memory=100),
            make_sample(2, 1, "app", cpu=50.0, memory=5000, is_thread=True),
        ]
        engine, _ = make_engine([table])
        identifier = ProcessIdentifier.from_pid(1)
        engine.add_group(identifier)

        stats = engine.refresh()[identifier].stats

        assert stats.current_memory == 100
        assert stats.current_cpu == pytest.approx(1.0)
        assert stats.process_count == 1
        assert stats.thread_count == 1

    def test_exited_member_pruned(self, browser_table):
        without_helper = [s for s in browser_table if s.pid != 102]
        engine, _ = make_engine([browser_table, without_helper])
        engine.add_group(FIREFOX)

        engine.refresh()
        assert 102 in engine.group(FIREFOX).store

        engine.refresh()

        assert 102 not in engine.group(FIREFOX).store
        assert engine.get_last_result(FIREFOX).get_member(102) is None

    def test_groups_are_independent(self, browser_table):
        engine, _ = make_engine([browser_table])
        engine.add_group(FIREFOX)
        engine.add_group(PID_100)

        engine.refresh()

        assert engine.group(FIREFOX).store is not engine.group(PID_100).store
        assert len(engine.group(FIREFOX).store) == 5
        assert len(engine.group(PID_100).store) == 4

    def test_state_during_and_after_tick(self, browser_table):
        seen = []
        engine = None

        def hook():
            seen.append(engine.state)

        source = HookedSource([browser_table], hook)
        engine = MonitorEngine(source)

        engine.refresh()

        assert seen == [EngineState.REFRESHING]
        assert engine.state is EngineState.IDLE
        assert engine.tick_count == 1
        assert len(engine.last_snapshot) == len(browser_table)

    def test_overlapping_tick_rejected(self, browser_table):
        errors = []
        engine = None

        def hook():
            try:
                engine.refresh()
            except RuntimeError as e:
                errors.append(e)

        engine = MonitorEngine(HookedSource([browser_table], hook))
        engine.refresh()

        assert len(errors) == 1
        assert engine.tick_count == 1


@pytest.mark.unit
class TestVanishedTarget:
    def test_vanished_pid_keeps_group(self, browser_table):
        gone = [s for s in browser_table if s.pid not in (100, 101, 102, 103)]
        engine, _ = make_engine([browser_table, gone, browser_table])
        engine.add_group(PID_100)

        engine.refresh()
        result = engine.refresh()[PID_100]

        assert engine.watched() == [PID_100]
        assert result.is_running is False
        assert result.members == ()
        assert result.stats.current_cpu == 0.0
        assert result.stats.current_memory == 0
        assert result.stats.process_count == 0
        assert result.stats.thread_count == 0
        assert result.stats.peak_cpu == pytest.approx(16.0)
        assert len(result.cpu_history) == 1
        assert len(engine.group(PID_100).store) == 0

        reappeared = engine.refresh()[PID_100]

        assert reappeared.is_running is True
        assert len(reappeared.cpu_history) == 2

    def test_never_seen_name(self):
        engine, _ = make_engine([[make_sample(1, None, "init")]])
        missing = ProcessIdentifier.from_name("missing")
        engine.add_group(missing)

        result = engine.refresh()[missing]

        assert result.is_running is False
        assert result.cpu_history == ()

    def test_empty_snapshot_is_not_an_error(self):
        engine, _ = make_engine([[]])
        engine.add_group(FIREFOX)

        result = engine.refresh()[FIREFOX]

        assert result.is_running is False
        assert engine.failed_tick_count == 0


@pytest.mark.unit
class TestSnapshotUnavailable:
    def test_previous_results_stay_published(self, browser_table):
        engine, _ = make_engine([browser_table, None, browser_table], interval=10.0)
        engine.add_group(FIREFOX)
        engine.refresh()
        before = engine.get_last_result(FIREFOX)

        with pytest.raises(SnapshotUnavailableError):
            engine.refresh()

        assert engine.get_last_result(FIREFOX) is before
        assert engine.failed_tick_count == 1
        assert engine.tick_count == 1
        assert engine.state is EngineState.IDLE
        # The failed attempt still gates the next tick.
        assert engine.should_refresh() is False

        after = engine.refresh()[FIREFOX]
        assert len(after.cpu_history) == 2

    def test_maybe_refresh_propagates(self):
        engine, _ = make_engine([None])

        with pytest.raises(SnapshotUnavailableError):
            engine.maybe_refresh()


@pytest.mark.unit
class TestIntervalGating:
    def test_first_tick_always_due(self):
        engine, _ = make_engine([[]], interval=10.0)

        assert engine.should_refresh() is True
        assert engine.last_refresh is None
        assert engine.seconds_until_refresh() == 0.0

    def test_gating_by_interval(self):
        engine, source = make_engine([[]], interval=10.0)

        assert engine.maybe_refresh() is True
        assert engine.maybe_refresh() is False
        assert source.calls == 1

        last = engine.last_refresh
        assert engine.should_refresh(now=last + 9.99) is False
        assert engine.should_refresh(now=last + 10.0) is True
        assert engine.seconds_until_refresh(now=last + 4.0) == pytest.approx(6.0)

    def test_interval_change_applies_to_next_gate(self):
        engine, _ = make_engine([[]], interval=10.0)
        engine.refresh()

        engine.set_refresh_interval(0.5)

        assert engine.refresh_interval == 0.5
        assert engine.should_refresh(now=engine.last_refresh + 0.5) is True

    @pytest.mark.parametrize("bad", [0, -1, 0.001, "soon", float("nan")])
    def test_invalid_interval(self, bad):
        engine, _ = make_engine([[]])

        with pytest.raises(ValidationError):
            engine.set_refresh_interval(bad)

    def test_invalid_constructor_arguments(self):
        with pytest.raises(ValidationError):
            MonitorEngine(FakeSnapshotSource(), history_capacity=0)
        with pytest.raises(ValidationError):
            MonitorEngine(FakeSnapshotSource(), refresh_interval=0)


@pytest.mark.unit
class TestConfigurationChanges:
    def test_capacity_change_discards_history(self, browser_table):
        engine, _ = make_engine([browser_table], capacity=100)
        engine.add_group(FIREFOX)
        engine.refresh()
        engine.refresh()

        engine.set_history_capacity(50)
        # Deferred: nothing changes until the next tick.
        assert engine.group(FIREFOX).capacity == 100
        assert len(engine.get_last_result(FIREFOX).cpu_history) == 2

        result = engine.refresh()[FIREFOX]

        assert engine.history_capacity == 50
        assert engine.group(FIREFOX).capacity == 50
        assert len(result.cpu_history) == 1
        member_pair = engine.group(FIREFOX).store.get(100)
        assert member_pair.capacity == 50
        assert len(member_pair.cpu) == 1

    def test_same_capacity_keeps_history(self, browser_table):
        engine, _ = make_engine([browser_table], capacity=10)
        engine.add_group(FIREFOX)
        engine.refresh()

        engine.set_history_capacity(10)

        assert len(engine.refresh()[FIREFOX].cpu_history) == 2

    def test_invalid_capacity(self):
        engine, _ = make_engine([[]])

        with pytest.raises(ValidationError):
            engine.set_history_capacity(0)


@pytest.mark.unit
class TestClearAndRemove:
    def test_clear_publishes_empty_and_resets_next_tick(self, browser_table):
        engine, _ = make_engine([browser_table])
        engine.add_group(FIREFOX)
        engine.refresh()
        engine.refresh()

        assert engine.clear_group_history(FIREFOX) is True
        assert engine.get_last_result(FIREFOX).cpu_history == ()
        assert engine.watched() == [FIREFOX]

        result = engine.refresh()[FIREFOX]

        assert len(result.cpu_history) == 1
        assert result.get_member(100).avg_cpu == pytest.approx(10.0)
        assert len(engine.group(FIREFOX).store.get(100).cpu) == 1

    def test_remove_drops_result(self, browser_table):
        engine, _ = make_engine([browser_table])
        engine.add_group(FIREFOX)
        engine.refresh()

        assert engine.remove_group(FIREFOX) is True
        assert engine.get_last_result(FIREFOX) is None

        engine.refresh()

        assert engine.get_all_results() == {}
        assert engine.group(FIREFOX) is None

    def test_readd_starts_empty(self, browser_table):
        engine, _ = make_engine([browser_table])
        engine.add_group(FIREFOX)
        engine.refresh()
        engine.remove_group(FIREFOX)
        engine.add_group(FIREFOX)

        result = engine.refresh()[FIREFOX]

        assert len(result.cpu_history) == 1

    def test_remove_during_tick_not_resurrected(self, browser_table):
        engine = None

        def hook():
            engine.remove_group(FIREFOX)

        engine = MonitorEngine(HookedSource([browser_table], hook))
        engine.add_group(FIREFOX)

        engine.refresh()

        assert engine.get_last_result(FIREFOX) is None
        assert FIREFOX not in engine.get_all_results()

    def test_clear_during_tick_keeps_cleared_result(self, browser_table):
        calls = []
        engine = None

        def hook():
            calls.append(1)
            if len(calls) == 2:
                engine.clear_group_history(FIREFOX)

        engine = MonitorEngine(HookedSource([browser_table], hook))
        engine.add_group(FIREFOX)
        engine.refresh()

        engine.refresh()

        assert engine.get_last_result(FIREFOX).cpu_history == ()

        result = engine.refresh()[FIREFOX]
        assert len(result.cpu_history) == 1

    def test_add_during_tick_stays_empty(self, browser_table):
        engine = None
        bash = ProcessIdentifier.from_name("bash")

        def hook():
            engine.add_group(bash)

        engine = MonitorEngine(HookedSource([browser_table], hook))
        engine.add_group(FIREFOX)
        engine.refresh()

        assert engine.get_last_result(bash).is_running is False
        assert engine.get_last_result(FIREFOX).is_running is True
        assert engine.watched() == [FIREFOX, bash]


@pytest.mark.unit
def test_from_config_adds_watch_list(browser_table):
    config = MonitorConfig(watch=["firefox", "pid:100"], interval_seconds=0.25, history_length=7)

    engine = MonitorEngine.from_config(config, source=FakeSnapshotSource([browser_table]))

    assert engine.watched() == [FIREFOX, PID_100]
    assert engine.refresh_interval == 0.25
    assert engine.history_capacity == 7
