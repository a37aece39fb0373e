"""
Command-line interface for the procwatch process monitor.

This module provides the headless front end of the monitor engine: it loads
the configuration, applies command-line overrides, runs a RefreshWorker in
the background and periodically logs a summary of every watched group until
the requested duration elapses or a SIGINT/SIGTERM arrives.
"""

import argparse
import dataclasses
import logging
import signal
import sys
import threading
import time
from pathlib import Path
from typing import List, Optional

from ..collectors import PsutilSnapshotSource, SnapshotUnavailableError
from ..config import get_config, set_config_path
from ..models.config import MIN_INTERVAL_SECONDS, MonitorConfig
from ..models.results import GroupResult, SortType
from ..monitoring import MonitorEngine, RefreshWorker
from ..storage import create_storage, export_group_results
from ..system import list_process_names
from ..validation import (
    ValidationError,
    handle_cli_error,
    validate_identifier_list,
    validate_positive_float,
    validate_positive_integer,
)

# --- Logging Setup ---
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)

SORT_CHOICES = {"avg_cpu": SortType.AVG_CPU, "memory": SortType.MEMORY}
TOP_MEMBERS = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="procwatch",
        description="Monitor the CPU and memory usage of process groups.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config.toml. Defaults to conf/config.toml of the project.",
    )
    parser.add_argument(
        "-w",
        "--watch",
        action="append",
        default=[],
        metavar="IDENTIFIER",
        help="Process name or 'pid:<n>' to watch, with all descendants. Repeatable.",
    )
    parser.add_argument(
        "-i",
        "--interval",
        type=float,
        help="Refresh interval in seconds (overrides config).",
    )
    parser.add_argument(
        "-n",
        "--history",
        type=int,
        help="Number of samples kept per metric (overrides config).",
    )
    parser.add_argument(
        "--include-threads",
        action="store_true",
        help="Report threads as group members (counted, not summed).",
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=0.0,
        help="Stop after this many seconds. 0 runs until interrupted.",
    )
    parser.add_argument(
        "--report-every",
        type=float,
        default=5.0,
        help="Seconds between summary reports.",
    )
    parser.add_argument(
        "--sort",
        choices=sorted(SORT_CHOICES),
        default="avg_cpu",
        help="Order of the member list in reports.",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="Print the names of all running processes and exit.",
    )
    parser.add_argument(
        "--export-dir",
        type=Path,
        help="Export group histories to this directory on exit (overrides config).",
    )
    return parser


def apply_cli_overrides(config: MonitorConfig, args: argparse.Namespace) -> MonitorConfig:
    """
    Return a copy of ``config`` with the command-line options applied.

    Identifiers given with ``--watch`` are appended to the configured ones.

    Raises:
        ValidationError: If an option value is invalid.
    """
    changes = {}
    if args.watch:
        extra = validate_identifier_list(list(args.watch), field_name="--watch")
        changes["watch"] = list(config.watch) + [w for w in extra if w not in config.watch]
    if args.interval is not None:
        changes["interval_seconds"] = validate_positive_float(
            args.interval, min_value=MIN_INTERVAL_SECONDS, field_name="--interval"
        )
    if args.history is not None:
        changes["history_length"] = validate_positive_integer(
            args.history, min_value=1, field_name="--history"
        )
    if args.include_threads:
        changes["include_threads"] = True
    if args.export_dir is not None:
        changes["storage"] = dataclasses.replace(config.storage, export_dir=args.export_dir)
    return dataclasses.replace(config, **changes)


def format_group_summary(result: GroupResult, sort_type: SortType = SortType.AVG_CPU) -> List[str]:
    """Render one group's result as log lines, top members last."""
    stats = result.stats
    if not result.is_running:
        status = "not running"
    else:
        status = f"{stats.process_count} processes, {stats.thread_count} threads"
    lines = [
        f"{result.identifier}: {status} | "
        f"CPU {stats.current_cpu:.1f}% (peak {stats.peak_cpu:.1f}%, avg {stats.avg_cpu:.1f}%) | "
        f"MEM {stats.current_memory_mb:.1f} MB (peak {stats.peak_memory_mb:.1f} MB, "
        f"avg {stats.avg_memory_mb:.1f} MB)"
    ]
    for member in result.sorted_members(sort_type)[:TOP_MEMBERS]:
        kind = "thread" if member.is_thread else "process"
        lines.append(
            f"    {member.name} ({kind} {member.pid}): CPU {member.current_cpu:.1f}% "
            f"(avg {member.avg_cpu:.1f}%), MEM {member.current_memory_mb:.1f} MB"
        )
    return lines


def report(engine: MonitorEngine, sort_type: SortType) -> None:
    for result in engine.get_all_results().values():
        for line in format_group_summary(result, sort_type):
            logger.info(line)


def run_monitor(
    engine: MonitorEngine,
    shutdown_event: threading.Event,
    duration: float = 0.0,
    report_every: float = 5.0,
    sort_type: SortType = SortType.AVG_CPU,
) -> None:
    """
    Drive the engine with a RefreshWorker until shutdown or ``duration``.

    A summary of every group is logged every ``report_every`` seconds and
    once more before returning.
    """
    worker = RefreshWorker(engine)
    worker.start()
    deadline = time.monotonic() + duration if duration > 0 else None
    try:
        while not shutdown_event.is_set():
            wait = report_every
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    logger.info(f"Duration of {duration}s reached")
                    break
                wait = min(wait, remaining)
            if shutdown_event.wait(wait):
                break
            report(engine, sort_type)
    finally:
        worker.stop(timeout=max(5.0, engine.refresh_interval * 2))
    report(engine, sort_type)


def _list_processes(include_threads: bool) -> None:
    source = PsutilSnapshotSource(include_threads=include_threads)
    snapshot = source.take_snapshot()
    for name in list_process_names(snapshot, include_threads=include_threads):
        print(name)


def main_cli(argv: Optional[List[str]] = None) -> None:
    """
    Main command-line interface for the procwatch application.

    Raises:
        SystemExit: On configuration errors or invalid arguments.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    # --- Global state for graceful shutdown ---
    shutdown_event = threading.Event()

    def global_signal_handler(signum, frame):
        """Handle signals globally to ensure a clean shutdown."""
        if shutdown_event.is_set():
            logger.warning("Shutdown already in progress. Please be patient.")
            return
        logger.info(f"Signal {signal.strsignal(signum)} received. Stopping monitor...")
        shutdown_event.set()

    signal.signal(signal.SIGINT, global_signal_handler)
    signal.signal(signal.SIGTERM, global_signal_handler)

    if args.config is not None:
        set_config_path(args.config)

    # Load application configuration
    try:
        app_config = get_config()
    except (FileNotFoundError, KeyError, ValidationError) as e:
        handle_cli_error(
            error=e,
            context="configuration loading",
            exit_code=1,
            include_traceback=True,
            logger=logger,
        )

    try:
        monitor_config = apply_cli_overrides(app_config.monitor, args)
        report_every = validate_positive_float(
            args.report_every, min_value=MIN_INTERVAL_SECONDS, field_name="--report-every"
        )
        duration = validate_positive_float(args.duration, min_value=0.0, field_name="--duration")
    except ValidationError as e:
        handle_cli_error(
            error=e,
            context="argument validation",
            exit_code=2,
            include_traceback=False,
            logger=logger,
        )

    logging.getLogger().setLevel(monitor_config.log_level)

    if args.list:
        try:
            _list_processes(monitor_config.include_threads)
        except SnapshotUnavailableError as e:
            handle_cli_error(error=e, context="listing processes", exit_code=1, logger=logger)
        return

    if not monitor_config.watch:
        logger.error("Nothing to watch. Use --watch or set monitor.general.watch in config.toml.")
        sys.exit(2)

    try:
        engine = MonitorEngine.from_config(monitor_config)
    except ValidationError as e:
        handle_cli_error(error=e, context="engine setup", exit_code=2, logger=logger)

    logger.info(
        f"Watching {', '.join(str(identifier) for identifier in engine.watched())} "
        f"every {engine.refresh_interval}s"
    )
    run_monitor(
        engine,
        shutdown_event,
        duration=duration,
        report_every=report_every,
        sort_type=SORT_CHOICES[args.sort],
    )

    export_dir = monitor_config.storage.export_dir
    if export_dir is not None:
        storage = create_storage(compression=monitor_config.storage.compression)
        paths = export_group_results(engine.get_all_results().values(), export_dir, storage)
        logger.info(f"Wrote {len(paths)} files to {export_dir}")

    logger.info(
        f"Monitoring finished after {engine.tick_count} refreshes "
        f"({engine.failed_tick_count} failed)"
    )


if __name__ == "__main__":
    main_cli()
