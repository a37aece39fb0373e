"""
Rolling statistics for monitored processes.

- RollingMetric: fixed-capacity window with O(1) last/peak/average
- MetricPair: CPU and memory windows for one series owner
- ProcessMetricsStore: per-group PID -> MetricPair mapping
"""

from .rolling import RollingMetric
from .store import MetricPair, ProcessMetricsStore

__all__ = ["RollingMetric", "MetricPair", "ProcessMetricsStore"]
