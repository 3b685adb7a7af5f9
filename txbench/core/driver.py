"""Benchmark driver: submits generated transactions and records outcomes."""

import asyncio
import logging
import threading
import time
from typing import Callable, Optional

from .errors import GenerationError
from .metrics import MetricsCollector
from .models import Attempt, ProgressUpdate, RunConfig, RunSummary
from .submitters import Submitter
from .workload import WorkloadGenerator


class TransactionCounter:
    """Hands out 1-based transaction indices up to a fixed limit."""

    def __init__(self, limit: int):
        self.limit = limit
        self._issued = 0
        self._lock = threading.Lock()

    def claim(self) -> Optional[int]:
        """Return the next index, or None once the limit is reached."""
        with self._lock:
            if self._issued >= self.limit:
                return None
            self._issued += 1
            return self._issued

    @property
    def issued(self) -> int:
        return self._issued


def _failure_reason(error: BaseException) -> str:
    return str(error) or type(error).__name__


class BenchmarkDriver:
    """
    Runs a fixed number of transactions against a submitter.

    Supports two modes:
    - Sequential: one transaction in flight at a time (concurrency == 1)
    - Concurrent: `concurrency` worker loops, each sequential, sharing one
      transaction counter and one collector

    `clock` measures latencies and the run window and must be monotonic.
    Payload timestamps are taken from the wall clock by the generator.
    """

    def __init__(
        self,
        config: RunConfig,
        submitter: Submitter,
        generator: Optional[WorkloadGenerator] = None,
        progress_callback: Optional[Callable[[ProgressUpdate], None]] = None,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self.config = config
        self.submitter = submitter
        self.generator = generator or WorkloadGenerator()
        self.progress_callback = progress_callback
        self.clock = clock

        self.collector: Optional[MetricsCollector] = None
        self.counter: Optional[TransactionCounter] = None
        self._start_time: Optional[float] = None
        self._deadline: Optional[float] = None
        self._stop_requested = False
        self._failures_reported = 0

        logging.basicConfig(
            level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
        )
        self.logger = logging.getLogger(__name__)

    def stop(self) -> None:
        """Stop issuing new transactions; in-flight ones still complete."""
        self._stop_requested = True

    def _should_stop(self) -> bool:
        if self._stop_requested:
            return True
        return self._deadline is not None and self.clock() >= self._deadline

    async def run(self) -> RunSummary:
        """
        Execute the configured run and summarize it.

        Raises:
            ConfigurationError: If the configuration is invalid (nothing is sent)
            GenerationError: If a payload cannot be generated
        """
        self.config.validate()
        config = self.config

        mode = "sequential" if config.is_sequential else "concurrent"
        self.collector = MetricsCollector(
            mode=mode, batch_size=config.batch_size, concurrency=config.concurrency
        )
        self.counter = TransactionCounter(config.transaction_count)
        self._stop_requested = False
        self._failures_reported = 0

        self.logger.info(f"Starting {mode} benchmark:")
        self.logger.info(
            f"  {config.transaction_count} transactions, "
            f"{config.batch_size} records per transaction, "
            f"function {config.function_name}"
        )
        if not config.is_sequential:
            self.logger.info(f"  Concurrency: {config.concurrency} worker loops")
        self.submitter.reserve(config.concurrency)

        self._start_time = self.clock()
        self._deadline = (
            self._start_time + config.timeout_seconds if config.timeout_seconds else None
        )
        self.collector.start(self._start_time)

        if config.is_sequential:
            try:
                await self._worker_loop()
            finally:
                self.collector.stop(self.clock())
        else:
            results = await asyncio.gather(
                *(self._worker_loop() for _ in range(config.concurrency)),
                return_exceptions=True,
            )
            self.collector.stop(self.clock())
            for result in results:
                if isinstance(result, BaseException):
                    raise result

        summary = self.collector.summarize()
        if summary.total < config.transaction_count:
            self.logger.warning(
                f"Run stopped early: {summary.total}/{config.transaction_count} "
                "transactions executed"
            )
        self.logger.info(
            f"Finished: {summary.succeeded}/{summary.total} succeeded in "
            f"{summary.duration_seconds:.2f}s ({summary.throughput_tps:.2f} TPS)"
        )
        return summary

    def partial_summary(self) -> RunSummary:
        """Summarize whatever attempts completed before an interruption."""
        if self.collector is None:
            raise RuntimeError("No run has been started")
        if self.collector.finished_at is None:
            self.collector.stop(self.clock())
        return self.collector.summarize()

    async def _worker_loop(self) -> None:
        try:
            while not self._should_stop():
                index = self.counter.claim()
                if index is None:
                    return
                attempt = await self._execute(index)
                self.collector.record(attempt)
                self._after_attempt(attempt)
        except GenerationError:
            # Let sibling workers drain before the error propagates
            self._stop_requested = True
            raise

    async def _execute(self, index: int) -> Attempt:
        """Generate, submit and time a single transaction."""
        config = self.config
        try:
            payload = self.generator.generate_batch(
                config.worker_index, index, config.batch_size
            )
            serialized = payload.serialize()
        except GenerationError:
            raise
        except Exception as e:
            raise GenerationError(
                f"Cannot build transaction {index}: {_failure_reason(e)}"
            ) from e

        start_time = self.clock()
        try:
            await self.submitter.submit(config.function_name, serialized, payload.timestamp)
        except Exception as e:
            end_time = self.clock()
            return Attempt(
                index=index,
                worker_index=config.worker_index,
                payload=payload,
                start_time=start_time,
                end_time=end_time,
                success=False,
                error=_failure_reason(e),
            )

        end_time = self.clock()
        return Attempt(
            index=index,
            worker_index=config.worker_index,
            payload=payload,
            start_time=start_time,
            end_time=end_time,
            success=True,
        )

    def _after_attempt(self, attempt: Attempt) -> None:
        if not attempt.success:
            self._report_failure(attempt)

        completed = self.collector.completed
        if completed % self.config.progress_interval == 0:
            self._emit_progress(completed)

    def _report_failure(self, attempt: Attempt) -> None:
        limit = self.config.failure_detail_limit
        if self._failures_reported < limit:
            self.logger.error(f"Transaction {attempt.index} failed: {attempt.error}")
        elif self._failures_reported == limit:
            self.logger.warning(
                f"More than {limit} failures; further failures are counted but not shown"
            )
        self._failures_reported += 1

    def _emit_progress(self, completed: int) -> None:
        elapsed = self.clock() - self._start_time
        throughput = completed / elapsed if elapsed > 0 else 0.0
        avg_latency = self.collector.running_average_latency_ms

        self.logger.info(
            f"Progress: {completed}/{self.config.transaction_count} | "
            f"TPS: {throughput:.2f} | Avg Latency: {avg_latency:.0f}ms"
        )
        if self.progress_callback is not None:
            self.progress_callback(
                ProgressUpdate(
                    completed=completed,
                    total=self.config.transaction_count,
                    elapsed_seconds=elapsed,
                    throughput_tps=throughput,
                    avg_latency_ms=avg_latency,
                )
            )
