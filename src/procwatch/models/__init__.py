"""
Data models and structures for the monitoring system.

This module provides the data models used throughout the application,
organized by their functional purpose:

Identifier Models:
- The name-or-PID handle a user attaches monitoring to

Result Models:
- Aggregate group statistics published after every refresh tick
- Per-member statistics and aggregate history series
- Per-view metric and sort selection

Configuration Models:
- Refresh interval, history length and startup watch list
- Export settings

All models use type hints and dataclasses; the published result models are
frozen so readers can share them without copying.
"""

# Identifier models
from .identifiers import IdentifierKind, ProcessIdentifier

# Result models
from .results import (
    GroupResult,
    MemberStats,
    MetricType,
    ProcessGeneralStats,
    SortType,
)

# Configuration models
from .config import AppConfig, MonitorConfig, StorageConfig

__all__ = [
    # Identifiers
    "IdentifierKind",
    "ProcessIdentifier",
    # Results
    "GroupResult",
    "MemberStats",
    "MetricType",
    "ProcessGeneralStats",
    "SortType",
    # Configuration
    "AppConfig",
    "MonitorConfig",
    "StorageConfig",
]
