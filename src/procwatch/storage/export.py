"""
Export of published group results to Parquet and JSON files.

For every group three files are written into the export directory:

- ``<slug>_history.parquet``: the aggregate CPU and memory window, oldest first
- ``<slug>_members.parquet``: one row per member with its current/peak/avg values
- ``<slug>_stats.json``: the group's aggregate statistics

``<slug>`` is the identifier reduced to filename-safe characters.
"""

import dataclasses
import logging
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set, Union

import polars as pl

from ..models.results import BYTES_PER_MB, GroupResult
from .base import DataStorage
from .factory import create_storage

logger = logging.getLogger(__name__)

HISTORY_SCHEMA = {
    "sample": pl.Int64,
    "cpu_percent": pl.Float64,
    "memory_bytes": pl.Float64,
    "memory_mb": pl.Float64,
}

MEMBER_SCHEMA = {
    "pid": pl.Int64,
    "parent_pid": pl.Int64,
    "name": pl.Utf8,
    "is_thread": pl.Boolean,
    "current_cpu": pl.Float64,
    "peak_cpu": pl.Float64,
    "avg_cpu": pl.Float64,
    "current_memory": pl.Int64,
    "peak_memory": pl.Int64,
    "avg_memory": pl.Int64,
}

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def identifier_slug(text: str) -> str:
    """
    Reduce an identifier string to a filename-safe slug.

    Examples:
        >>> identifier_slug("pid:42")
        'pid_42'
        >>> identifier_slug("Web Content")
        'Web_Content'
    """
    slug = _UNSAFE_CHARS.sub("_", text).strip("_.")
    return slug or "group"


def group_history_frame(result: GroupResult) -> pl.DataFrame:
    """Build a DataFrame of a group's aggregate history, oldest sample first."""
    cpu = list(result.cpu_history)
    memory = [float(value) for value in result.memory_history]
    return pl.DataFrame(
        {
            "sample": list(range(len(cpu))),
            "cpu_percent": cpu,
            "memory_bytes": memory,
            "memory_mb": [value / BYTES_PER_MB for value in memory],
        },
        schema=HISTORY_SCHEMA,
    )


def member_stats_frame(result: GroupResult) -> pl.DataFrame:
    """Build a DataFrame with one row per group member, in discovery order."""
    columns: Dict[str, List[Any]] = {name: [] for name in MEMBER_SCHEMA}
    for member in result.members:
        for name in MEMBER_SCHEMA:
            columns[name].append(getattr(member, name))
    return pl.DataFrame(columns, schema=MEMBER_SCHEMA)


def _stats_dict(result: GroupResult) -> Dict[str, Any]:
    return {
        "identifier": str(result.identifier),
        "is_running": result.is_running,
        "refreshed_at": result.refreshed_at,
        "member_count": len(result.members),
        "history_length": len(result.cpu_history),
        "stats": dataclasses.asdict(result.stats),
    }


def export_group_results(
    results: Iterable[GroupResult],
    directory: Union[str, Path],
    storage: Optional[DataStorage] = None,
) -> List[Path]:
    """
    Write every group's history, members and statistics to ``directory``.

    Args:
        results: The group results to export.
        directory: Target directory; created if missing.
        storage: Storage backend; a snappy ParquetStorage if omitted.

    Returns:
        The paths written, three per group.
    """
    storage = storage or create_storage()
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    written: List[Path] = []
    used_slugs: Set[str] = set()

    for result in results:
        slug = identifier_slug(str(result.identifier))
        base_slug, suffix = slug, 1
        while slug in used_slugs:
            suffix += 1
            slug = f"{base_slug}_{suffix}"
        used_slugs.add(slug)

        history_path = directory / f"{slug}_history.parquet"
        members_path = directory / f"{slug}_members.parquet"
        stats_path = directory / f"{slug}_stats.json"

        storage.save_dataframe(group_history_frame(result), str(history_path))
        storage.save_dataframe(member_stats_frame(result), str(members_path))
        storage.save_dict(_stats_dict(result), str(stats_path))
        written.extend([history_path, members_path, stats_path])

    logger.info(f"Exported {len(written) // 3} groups to {directory}")
    return written
