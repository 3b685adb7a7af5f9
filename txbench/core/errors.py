"""Exceptions raised by the benchmark harness."""


class BenchmarkError(Exception):
    """Base class for harness errors."""


class ConfigurationError(BenchmarkError, ValueError):
    """Run configuration is invalid; the run must not start."""


class GenerationError(BenchmarkError, ValueError):
    """The workload generator could not produce a payload."""


class SubmissionFailure(BenchmarkError):
    """A single transaction was rejected by the target system.

    Raised by submitters and recovered by the driver, which records the
    attempt as failed and moves on to the next transaction.
    """
