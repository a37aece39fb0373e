"""
Storage module for exporting monitoring histories.

This module provides:
- Parquet storage with columnar compression (Snappy, Gzip, Brotli, LZ4, Zstd)
- A common storage interface for alternative backends
- Export of published group results to Parquet and JSON files

It uses Polars for DataFrame construction and Parquet I/O.
"""

from .base import DataStorage
from .export import (
    export_group_results,
    group_history_frame,
    identifier_slug,
    member_stats_frame,
)
from .factory import create_storage
from .parquet_storage import ParquetStorage

__all__ = [
    "DataStorage",
    "ParquetStorage",
    "create_storage",
    "export_group_results",
    "group_history_frame",
    "identifier_slug",
    "member_stats_frame",
]
