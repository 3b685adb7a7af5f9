"""Per-attempt recording and summary statistics."""

import math
import threading
import time
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from .models import Attempt, RunSummary


def percentile(sorted_values: Sequence[float], fraction: float) -> float:
    """
    Value at index floor(n * fraction) of an ascending sequence.

    The index is clamped to the last element; no interpolation is done.
    Returns 0.0 for an empty sequence.
    """
    if not sorted_values:
        return 0.0
    index = math.floor(len(sorted_values) * fraction)
    index = max(0, min(index, len(sorted_values) - 1))
    return sorted_values[index]


class MetricsCollector:
    """
    Accumulates attempts for one run and computes its summary.

    `record()` may be called from several workers at once. `summarize()`
    must only be called once every worker has been joined.
    """

    def __init__(
        self,
        mode: str = "sequential",
        batch_size: Optional[int] = None,
        concurrency: int = 1,
    ):
        self.mode = mode
        self.batch_size = batch_size
        self.concurrency = concurrency

        self._lock = threading.Lock()
        self._attempts: List[Attempt] = []
        self._latency_total_ms = 0.0
        self._success_count = 0

        self.started_at: Optional[float] = None
        self.finished_at: Optional[float] = None
        self.start_timestamp: Optional[datetime] = None
        self.end_timestamp: Optional[datetime] = None

    def start(self, at: Optional[float] = None) -> None:
        """
        Mark the beginning of the run window.

        `at` is a reading of a monotonic clock (time.perf_counter by
        default); the wall-clock start is recorded separately for reports.
        """
        self.started_at = at if at is not None else time.perf_counter()
        self.finished_at = None
        self.start_timestamp = datetime.now()
        self.end_timestamp = None

    def stop(self, at: Optional[float] = None) -> None:
        """Mark the end of the run window, on the same clock as start()."""
        self.finished_at = at if at is not None else time.perf_counter()
        self.end_timestamp = datetime.now()

    def record(self, attempt: Attempt) -> None:
        """Append a finalized attempt."""
        with self._lock:
            self._attempts.append(attempt)
            if attempt.success:
                self._success_count += 1
                self._latency_total_ms += attempt.latency_ms

    @property
    def attempts(self) -> List[Attempt]:
        with self._lock:
            return list(self._attempts)

    @property
    def completed(self) -> int:
        with self._lock:
            return len(self._attempts)

    @property
    def running_average_latency_ms(self) -> float:
        """Mean latency of the successful attempts recorded so far."""
        with self._lock:
            if not self._success_count:
                return 0.0
            return self._latency_total_ms / self._success_count

    def merge(self, others: Iterable["MetricsCollector"]) -> "MetricsCollector":
        """
        Fold the attempts of other, already joined, collectors into this one.

        The run window widens to cover every collector's window. All
        collectors must have been timed with the same clock.
        """
        for other in others:
            for attempt in other.attempts:
                self.record(attempt)
            if other.started_at is not None and (
                self.started_at is None or other.started_at < self.started_at
            ):
                self.started_at = other.started_at
                self.start_timestamp = other.start_timestamp
            if other.finished_at is not None and (
                self.finished_at is None or other.finished_at > self.finished_at
            ):
                self.finished_at = other.finished_at
                self.end_timestamp = other.end_timestamp
        return self

    def _duration(self, attempts: Sequence[Attempt]) -> float:
        start = self.started_at
        end = self.finished_at
        if start is None and attempts:
            start = min(a.start_time for a in attempts)
        if end is None and attempts:
            end = max(a.end_time for a in attempts)
        if start is None or end is None:
            return 0.0
        return max(end - start, 0.0)

    def summarize(self, duration_seconds: Optional[float] = None) -> RunSummary:
        """
        Compute summary statistics over the recorded attempts.

        Args:
            duration_seconds: Wall-clock duration of the run. Defaults to the
                start()/stop() window, or to first start through last end of
                the recorded attempts.

        Returns:
            RunSummary; calling this again without new records yields an
            equal summary.
        """
        attempts = self.attempts

        total = len(attempts)
        succeeded = sum(1 for a in attempts if a.success)
        failed = total - succeeded
        success_rate = succeeded / total if total > 0 else 0.0

        latencies = [a.latency_ms for a in attempts if a.success]
        sorted_latencies = sorted(latencies)
        if sorted_latencies:
            min_latency = sorted_latencies[0]
            max_latency = sorted_latencies[-1]
            avg_latency = sum(sorted_latencies) / len(sorted_latencies)
        else:
            min_latency = max_latency = avg_latency = 0.0

        if duration_seconds is None:
            duration_seconds = self._duration(attempts)
        throughput = succeeded / duration_seconds if duration_seconds > 0 else 0.0

        error_histogram: Dict[str, int] = {}
        for a in attempts:
            if not a.success:
                reason = a.error or ""
                error_histogram[reason] = error_histogram.get(reason, 0) + 1

        return RunSummary(
            total=total,
            succeeded=succeeded,
            failed=failed,
            success_rate=success_rate,
            duration_seconds=duration_seconds,
            throughput_tps=throughput,
            min_latency_ms=min_latency,
            avg_latency_ms=avg_latency,
            p50_latency_ms=percentile(sorted_latencies, 0.50),
            p90_latency_ms=percentile(sorted_latencies, 0.90),
            p95_latency_ms=percentile(sorted_latencies, 0.95),
            p99_latency_ms=percentile(sorted_latencies, 0.99),
            max_latency_ms=max_latency,
            latencies_ms=tuple(latencies),
            error_histogram=error_histogram,
            mode=self.mode,
            batch_size=self.batch_size,
            concurrency=self.concurrency,
            start_timestamp=self.start_timestamp,
            end_timestamp=self.end_timestamp,
        )
