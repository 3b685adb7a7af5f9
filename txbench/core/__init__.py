"""Core benchmarking components."""

from .errors import BenchmarkError, ConfigurationError, GenerationError, SubmissionFailure
from .models import RunConfig, Attempt, RunSummary, ProgressUpdate
from .workload import (
    ValueDistribution,
    UniformRange,
    RecordSchema,
    Payload,
    WorkloadGenerator,
    SENSOR_READING_SCHEMA,
)
from .metrics import MetricsCollector, percentile
from .submitters import Submitter, HttpSubmitter, CallableSubmitter, DryRunSubmitter
from .driver import BenchmarkDriver, TransactionCounter
from .config_loader import RUN_DEFAULTS, build_run_config, load_run_config

__all__ = [
    "BenchmarkError",
    "ConfigurationError",
    "GenerationError",
    "SubmissionFailure",
    "RunConfig",
    "Attempt",
    "RunSummary",
    "ProgressUpdate",
    "ValueDistribution",
    "UniformRange",
    "RecordSchema",
    "Payload",
    "WorkloadGenerator",
    "SENSOR_READING_SCHEMA",
    "MetricsCollector",
    "percentile",
    "Submitter",
    "HttpSubmitter",
    "CallableSubmitter",
    "DryRunSubmitter",
    "BenchmarkDriver",
    "TransactionCounter",
    "RUN_DEFAULTS",
    "build_run_config",
    "load_run_config",
]
