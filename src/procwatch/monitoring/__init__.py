"""
Monitoring: per-group state, the refresh engine and its worker thread.
"""

from .engine import EngineState, MonitorEngine
from .group import MonitoredGroup
from .worker import RefreshWorker

__all__ = ["EngineState", "MonitorEngine", "MonitoredGroup", "RefreshWorker"]
