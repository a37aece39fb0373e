"""
procwatch: CPU and memory monitoring of process groups.

A process group is a target process, picked by name or by PID, together with
all of its descendants. The monitor engine refreshes every watched group on a
fixed interval and keeps a bounded rolling history of its CPU and memory use.

The package is organized into specialized modules:
- models: Identifiers, published results and configuration structures
- metrics: Rolling metric windows and the per-process metrics store
- relations: Resolution of an identifier to its group members
- collectors: Process snapshot sources (psutil)
- monitoring: The refresh engine and its background worker
- system: Process table queries for picking what to watch
- config: Configuration management and validation
- validation: Input validation and error handling
- storage: Parquet/JSON export of group histories
- cli: Command-line interface

Usage:
    From command line:
        procwatch --watch firefox --watch pid:1234 --interval 0.5

    Programmatically:
        from procwatch import MonitorEngine, PsutilSnapshotSource, ProcessIdentifier
        engine = MonitorEngine(PsutilSnapshotSource())
        engine.add_group(ProcessIdentifier.parse("firefox"))
        engine.refresh()
        result = engine.get_last_result(ProcessIdentifier.parse("firefox"))
"""

# Main interfaces
from .config import get_config, clear_config_cache, set_config_path
from .collectors import (
    AbstractSnapshotSource,
    ProcessSample,
    ProcessSnapshot,
    PsutilSnapshotSource,
    SnapshotUnavailableError,
)
from .metrics import MetricPair, ProcessMetricsStore, RollingMetric
from .monitoring import EngineState, MonitorEngine, RefreshWorker
from .relations import RelationResolver, resolve_relations

# Model classes for external use
from .models import (
    AppConfig,
    GroupResult,
    IdentifierKind,
    MemberStats,
    MetricType,
    MonitorConfig,
    ProcessGeneralStats,
    ProcessIdentifier,
    SortType,
    StorageConfig,
)

# Validation utilities
from .validation import ValidationError

__version__ = "0.1.0"

__all__ = [
    # Main interfaces
    "get_config",
    "clear_config_cache",
    "set_config_path",
    "MonitorEngine",
    "EngineState",
    "RefreshWorker",
    "RelationResolver",
    "resolve_relations",
    # Snapshot sources
    "AbstractSnapshotSource",
    "ProcessSample",
    "ProcessSnapshot",
    "PsutilSnapshotSource",
    "SnapshotUnavailableError",
    # Metrics
    "MetricPair",
    "ProcessMetricsStore",
    "RollingMetric",
    # Models
    "AppConfig",
    "GroupResult",
    "IdentifierKind",
    "MemberStats",
    "MetricType",
    "MonitorConfig",
    "ProcessGeneralStats",
    "ProcessIdentifier",
    "SortType",
    "StorageConfig",
    # Validation
    "ValidationError",
]
