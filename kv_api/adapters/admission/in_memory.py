"""In-memory sliding-window admission controller.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: each arrival log primitive runs under the log's own lock.
- Self-expiring: stale arrivals are evicted on every check, no sweeper thread.
"""

from __future__ import annotations

import heapq
import itertools
import threading

from kv_api.adapters.admission.base import (
    AbstractAdmissionController,
    AdmissionDecision,
    ArrivalRecord,
)
from kv_api.utils.clock import Clock, wall_clock_ms


class ArrivalLog:
    """Process-local collection of arrival records.

    Records are kept in a min-heap ordered by ``(timestamp_ms, sequence_id)``,
    so eviction only touches records that are leaving the window, even when
    timestamps were inserted out of order.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._heap: list[tuple[int, int]] = []
        self._sequence = itertools.count(1)

    def insert(self, timestamp_ms: int) -> ArrivalRecord:
        """Add an arrival and assign it the next sequence id."""
        with self._lock:
            record = ArrivalRecord(sequence_id=next(self._sequence), timestamp_ms=timestamp_ms)
            heapq.heappush(self._heap, (record.timestamp_ms, record.sequence_id))
            return record

    def evict_older_than(self, cutoff_ms: int) -> int:
        """Remove every arrival with ``timestamp_ms < cutoff_ms``.

        Returns:
            Number of evicted records.
        """
        evicted = 0
        with self._lock:
            while self._heap and self._heap[0][0] < cutoff_ms:
                heapq.heappop(self._heap)
                evicted += 1
        return evicted

    def count(self) -> int:
        with self._lock:
            return len(self._heap)

    def oldest(self) -> ArrivalRecord | None:
        with self._lock:
            if not self._heap:
                return None
            timestamp_ms, sequence_id = self._heap[0]
            return ArrivalRecord(sequence_id=sequence_id, timestamp_ms=timestamp_ms)

    def clear(self) -> None:
        """Drop all arrivals; sequence ids keep increasing."""
        with self._lock:
            self._heap.clear()

    def __len__(self) -> int:
        return self.count()


class SlidingWindowAdmissionController(AbstractAdmissionController):
    """Admission controller counting attempts over a trailing window.

    Every call is recorded before the count is evaluated, so rejected
    attempts also occupy the window and a sustained burst settles into
    steady rejection instead of oscillating.

    The window covering a call at ``now_ms`` is inclusive of
    ``now_ms - window_ms + 1`` through ``now_ms``.
    """

    def __init__(
        self,
        *,
        max_per_window: int,
        window_ms: int = 1000,
        clock: Clock = wall_clock_ms,
        arrivals: ArrivalLog | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            max_per_window: Maximum admitted arrivals per window; 0 or
                negative disables admission control entirely.
            window_ms: Trailing window length in milliseconds.
            clock: Time source returning integer milliseconds.
            arrivals: Arrival log to own; a fresh one is created if omitted.

        Raises:
            ValueError: If window_ms is not positive.
        """
        if window_ms < 1:
            raise ValueError("window_ms must be >= 1")

        self._max_per_window = max_per_window
        self._window_ms = window_ms
        self._clock = clock
        self._arrivals = arrivals if arrivals is not None else ArrivalLog()

    @property
    def enabled(self) -> bool:
        return self._max_per_window > 0

    @property
    def max_per_window(self) -> int:
        return self._max_per_window

    @property
    def window_ms(self) -> int:
        return self._window_ms

    @property
    def arrivals(self) -> ArrivalLog:
        return self._arrivals

    def reset(self) -> None:
        """Forget all recorded arrivals (done once at process start)."""
        self._arrivals.clear()

    def evaluate(self) -> AdmissionDecision:
        if not self.enabled:
            return AdmissionDecision(
                allowed=True,
                limit=self._max_per_window,
                count=0,
                window_ms=self._window_ms,
                now_ms=0,
                retry_after_ms=None,
            )

        now_ms = self._clock()
        self._arrivals.insert(now_ms)
        self._arrivals.evict_older_than(now_ms - (self._window_ms - 1))
        count = self._arrivals.count()

        if count > self._max_per_window:
            return AdmissionDecision(
                allowed=False,
                limit=self._max_per_window,
                count=count,
                window_ms=self._window_ms,
                now_ms=now_ms,
                retry_after_ms=self._retry_after_ms(now_ms),
            )

        return AdmissionDecision(
            allowed=True,
            limit=self._max_per_window,
            count=count,
            window_ms=self._window_ms,
            now_ms=now_ms,
            retry_after_ms=None,
        )

    def _retry_after_ms(self, now_ms: int) -> int:
        oldest = self._arrivals.oldest()
        if oldest is None:
            return self._window_ms
        return max(1, oldest.timestamp_ms + self._window_ms - now_ms)
