"""Data models for benchmarking."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple, Dict, Any

from .errors import ConfigurationError


DEFAULT_FUNCTION_NAME = "addBatchSensorReadings"


@dataclass
class RunConfig:
    """Configuration for a single benchmark run."""

    transaction_count: int
    batch_size: int
    worker_index: int
    total_workers: int
    progress_interval: int

    # In-process worker loops (1 = strictly sequential)
    concurrency: int = 1

    # Number of failures logged verbatim before only counting them
    failure_detail_limit: int = 5

    # Stop issuing new transactions after this many seconds
    timeout_seconds: Optional[float] = None

    function_name: str = DEFAULT_FUNCTION_NAME

    def __post_init__(self) -> None:
        self.validate()

    @property
    def is_sequential(self) -> bool:
        """Check if this config is for sequential mode."""
        return self.concurrency == 1

    def validate(self) -> None:
        """Raise ConfigurationError if any field is out of range."""
        positive = {
            "transaction_count": self.transaction_count,
            "batch_size": self.batch_size,
            "total_workers": self.total_workers,
            "progress_interval": self.progress_interval,
            "concurrency": self.concurrency,
        }
        for name, value in positive.items():
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise ConfigurationError(
                    f"{name} must be a positive integer, got {value!r}"
                )

        if (
            not isinstance(self.worker_index, int)
            or isinstance(self.worker_index, bool)
            or self.worker_index < 0
        ):
            raise ConfigurationError(
                f"worker_index must be a non-negative integer, got {self.worker_index!r}"
            )
        if self.worker_index >= self.total_workers:
            raise ConfigurationError(
                f"worker_index {self.worker_index} is out of range for "
                f"{self.total_workers} total workers"
            )
        if (
            not isinstance(self.failure_detail_limit, int)
            or isinstance(self.failure_detail_limit, bool)
            or self.failure_detail_limit < 0
        ):
            raise ConfigurationError(
                f"failure_detail_limit must be an integer >= 0, got {self.failure_detail_limit!r}"
            )
        if self.timeout_seconds is not None and (
            not isinstance(self.timeout_seconds, (int, float))
            or isinstance(self.timeout_seconds, bool)
            or not self.timeout_seconds > 0
        ):
            raise ConfigurationError(
                f"timeout_seconds must be a positive number, got {self.timeout_seconds!r}"
            )
        if not isinstance(self.function_name, str) or not self.function_name:
            raise ConfigurationError(
                f"function_name must be a non-empty string, got {self.function_name!r}"
            )


@dataclass(frozen=True)
class Attempt:
    """One transaction submission and its outcome."""

    index: int
    worker_index: int
    payload: Any
    start_time: float
    end_time: float
    success: bool
    error: Optional[str] = None

    @property
    def latency_ms(self) -> float:
        return (self.end_time - self.start_time) * 1000


@dataclass(frozen=True)
class ProgressUpdate:
    """Running figures emitted every progress interval."""

    completed: int
    total: int
    elapsed_seconds: float
    throughput_tps: float
    avg_latency_ms: float


@dataclass(frozen=True)
class RunSummary:
    """Results from a single benchmark run."""

    # Attempt counts
    total: int
    succeeded: int
    failed: int
    success_rate: float

    # Throughput metrics
    duration_seconds: float
    throughput_tps: float

    # Latency metrics (milliseconds, successful attempts only)
    min_latency_ms: float
    avg_latency_ms: float
    p50_latency_ms: float
    p90_latency_ms: float
    p95_latency_ms: float
    p99_latency_ms: float
    max_latency_ms: float

    # Recording order is kept for order-sensitive diagnostics
    latencies_ms: Tuple[float, ...] = field(default=(), repr=False)
    error_histogram: Dict[str, int] = field(default_factory=dict)

    # Run identification
    mode: str = "sequential"
    batch_size: Optional[int] = None
    concurrency: int = 1
    start_timestamp: Optional[datetime] = None
    end_timestamp: Optional[datetime] = None

    @property
    def error_rate(self) -> float:
        """Failed attempts as a percentage of the total."""
        if self.total == 0:
            return 0.0
        return self.failed / self.total * 100

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "mode": self.mode,
            "batch_size": self.batch_size,
            "concurrency": self.concurrency,
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "success_rate": self.success_rate,
            "error_rate": self.error_rate,
            "duration_seconds": self.duration_seconds,
            "throughput_tps": self.throughput_tps,
            "min_latency_ms": self.min_latency_ms,
            "avg_latency_ms": self.avg_latency_ms,
            "p50_latency_ms": self.p50_latency_ms,
            "p90_latency_ms": self.p90_latency_ms,
            "p95_latency_ms": self.p95_latency_ms,
            "p99_latency_ms": self.p99_latency_ms,
            "max_latency_ms": self.max_latency_ms,
            "error_histogram": dict(self.error_histogram),
            "start_timestamp": (
                self.start_timestamp.isoformat() if self.start_timestamp else None
            ),
            "end_timestamp": (
                self.end_timestamp.isoformat() if self.end_timestamp else None
            ),
        }
