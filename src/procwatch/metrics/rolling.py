"""
Fixed-capacity rolling window for one scalar series.

RollingMetric keeps the most recent ``capacity`` samples of a measurement
(CPU%, memory bytes) in a preallocated ring and answers last/peak/average
queries without rescanning the window on every push:

- The running sum is maintained incrementally and re-derived exactly once
  per full wrap of the write cursor, so rounding error cannot accumulate
  over a long session.
- The peak is updated in O(1) when the new value reaches it. The window is
  rescanned only when the evicted slot held a value equal to the peak.

Values are expected to be finite and non-negative. NaN and infinities are
tolerated: comparisons treat NaN as the least value, and non-finite values
contribute 0.0 to the running sum.
"""

import math
from typing import List, Optional

from ..validation import validate_positive_integer


def _is_greater(a: float, b: float) -> bool:
    """Total order comparison with NaN as the least value."""
    if math.isnan(a):
        return False
    if math.isnan(b):
        return True
    return a > b


def _is_same(a: float, b: float) -> bool:
    if math.isnan(a) or math.isnan(b):
        return math.isnan(a) and math.isnan(b)
    return a == b


def _sum_term(value: float) -> float:
    return value if math.isfinite(value) else 0.0


class RollingMetric:
    """
    A bounded history of one scalar series with O(1) push and queries.

    The capacity is fixed at construction. Callers that need a different
    capacity build a new instance and lose the old history.

    Attributes:
        capacity: Maximum number of samples retained.
    """

    __slots__ = ("_capacity", "_data", "_cursor", "_count", "_sum", "_peak")

    def __init__(self, capacity: int):
        self._capacity = validate_positive_integer(capacity, min_value=1, field_name="capacity")
        self._data: List[float] = [0.0] * self._capacity
        self._cursor = 0
        self._count = 0
        self._sum = 0.0
        self._peak: Optional[float] = None

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def is_full(self) -> bool:
        return self._count == self._capacity

    def __len__(self) -> int:
        return self._count

    def __repr__(self) -> str:
        return (
            f"RollingMetric(capacity={self._capacity}, count={self._count}, "
            f"last={self.last()}, peak={self.peak()}, average={self.average()})"
        )

    def push(self, value: float) -> None:
        """Append a value, evicting the oldest one once the window is full."""
        value = float(value)
        evicted: Optional[float] = None

        if self._count == self._capacity:
            evicted = self._data[self._cursor]
            self._sum -= _sum_term(evicted)
        else:
            self._count += 1

        self._data[self._cursor] = value
        self._sum += _sum_term(value)
        self._cursor = (self._cursor + 1) % self._capacity

        if self._cursor == 0:
            self._sum = math.fsum(_sum_term(v) for v in self._data[:self._count])

        if self._peak is None or not _is_greater(self._peak, value):
            self._peak = value
        elif evicted is not None and _is_same(evicted, self._peak):
            self._peak = self._scan_peak()

    def _scan_peak(self) -> Optional[float]:
        peak: Optional[float] = None
        for v in self._iter_window():
            if peak is None or _is_greater(v, peak):
                peak = v
        return peak

    def _iter_window(self):
        # Oldest slot is the cursor once the ring has wrapped.
        start = self._cursor if self._count == self._capacity else 0
        for i in range(self._count):
            yield self._data[(start + i) % self._capacity]

    def last(self) -> float:
        """The most recently pushed value, or 0.0 when empty."""
        if self._count == 0:
            return 0.0
        return self._data[(self._cursor - 1) % self._capacity]

    def peak(self) -> float:
        """The maximum of the current window, or 0.0 when empty."""
        if self._count == 0 or self._peak is None:
            return 0.0
        return self._peak

    def average(self) -> float:
        """The mean of the current window, or 0.0 when empty."""
        if self._count == 0:
            return 0.0
        return self._sum / self._count

    def to_ordered_sequence(self) -> List[float]:
        """Return a copy of the window, oldest value first."""
        return list(self._iter_window())
