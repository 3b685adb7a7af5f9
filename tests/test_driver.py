import asyncio
import itertools
import json
import logging
import time
from decimal import Decimal

import pytest

from txbench.core.driver import BenchmarkDriver, TransactionCounter
from txbench.core.errors import ConfigurationError, GenerationError
from txbench.core.models import RunConfig
from txbench.core.submitters import Submitter
from txbench.core.workload import RecordSchema, ValueDistribution, WorkloadGenerator


def make_config(**overrides):
    values = dict(
        transaction_count=10,
        batch_size=5,
        worker_index=0,
        total_workers=1,
        progress_interval=50,
    )
    values.update(overrides)
    return RunConfig(**values)


def test_counter_hands_out_one_based_indices_up_to_limit():
    counter = TransactionCounter(3)

    assert [counter.claim() for _ in range(5)] == [1, 2, 3, None, None]
    assert counter.issued == 3


@pytest.mark.asyncio
async def test_run_executes_every_transaction(fake_clock, make_submitter):
    submitter = make_submitter(clock=fake_clock, step=0.05)
    driver = BenchmarkDriver(make_config(transaction_count=25), submitter, clock=fake_clock)

    summary = await driver.run()

    assert len(submitter.calls) == 25
    assert summary.total == 25
    assert summary.succeeded + summary.failed == summary.total
    assert summary.mode == "sequential"
    assert summary.batch_size == 5


@pytest.mark.asyncio
async def test_every_third_failure_does_not_abort_run(fake_clock, make_submitter):
    submitter = make_submitter(clock=fake_clock, step=0.01, fail_every=3)
    driver = BenchmarkDriver(make_config(transaction_count=9), submitter, clock=fake_clock)

    summary = await driver.run()

    assert len(submitter.calls) == 9
    assert summary.total == 9
    assert summary.succeeded == 6
    assert summary.failed == 3
    assert len(summary.latencies_ms) == 6
    assert all(latency >= 0 for latency in summary.latencies_ms)


@pytest.mark.asyncio
async def test_failed_attempts_keep_reason_and_no_latency(fake_clock, make_submitter):
    submitter = make_submitter(
        clock=fake_clock,
        step=0.5,
        messages=["timeout", None, "connection refused", "timeout"],
    )
    driver = BenchmarkDriver(make_config(transaction_count=4), submitter, clock=fake_clock)

    summary = await driver.run()

    assert summary.error_histogram == {"timeout": 2, "connection refused": 1}
    assert summary.latencies_ms == pytest.approx((500.0,))
    attempts = driver.collector.attempts
    assert [a.index for a in attempts] == [1, 2, 3, 4]
    assert [a.success for a in attempts] == [False, True, False, False]


@pytest.mark.asyncio
async def test_throughput_uses_whole_run_wall_clock(fake_clock, make_submitter):
    submitter = make_submitter(clock=fake_clock, step=0.1)
    driver = BenchmarkDriver(make_config(transaction_count=100), submitter, clock=fake_clock)

    summary = await driver.run()

    assert summary.duration_seconds == pytest.approx(10.0)
    assert summary.throughput_tps == pytest.approx(10.0)
    assert summary.avg_latency_ms == pytest.approx(100.0)


@pytest.mark.asyncio
async def test_submitter_receives_function_payload_and_timestamp(fake_clock, make_submitter):
    submitter = make_submitter(clock=fake_clock, step=0.01)
    config = make_config(transaction_count=2, batch_size=3, worker_index=1, total_workers=2)
    driver = BenchmarkDriver(config, submitter, clock=fake_clock)

    await driver.run()

    function_name, payload, timestamp = submitter.calls[1]
    records = json.loads(payload)
    assert function_name == "addBatchSensorReadings"
    assert [r["SensorID"] for r in records] == ["sensor-1-2-0", "sensor-1-2-1", "sensor-1-2-2"]
    assert timestamp.isdigit()


@pytest.mark.asyncio
async def test_exception_without_message_is_classified_by_type(fake_clock):
    class SilentTimeout(Submitter):
        async def submit(self, function_name, payload, timestamp):
            raise TimeoutError()

    driver = BenchmarkDriver(make_config(transaction_count=2), SilentTimeout(), clock=fake_clock)

    summary = await driver.run()

    assert summary.error_histogram == {"TimeoutError": 2}


@pytest.mark.asyncio
async def test_invalid_config_fails_before_any_submission(make_submitter):
    submitter = make_submitter()
    config = make_config()
    config.transaction_count = 0
    driver = BenchmarkDriver(config, submitter)

    with pytest.raises(ConfigurationError):
        await driver.run()
    assert submitter.calls == []
    assert driver.collector is None


@pytest.mark.asyncio
async def test_generation_error_aborts_run(fake_clock, make_submitter):
    class BrokenGenerator(WorkloadGenerator):
        def generate_batch(self, worker_index, transaction_index, batch_size, timestamp=None):
            if transaction_index == 3:
                raise GenerationError("cannot build payload")
            return super().generate_batch(worker_index, transaction_index, batch_size, timestamp)

    submitter = make_submitter(clock=fake_clock, step=0.01)
    driver = BenchmarkDriver(
        make_config(transaction_count=10), submitter, generator=BrokenGenerator(), clock=fake_clock
    )

    with pytest.raises(GenerationError):
        await driver.run()
    assert len(submitter.calls) == 2


@pytest.mark.asyncio
async def test_progress_reported_every_interval(fake_clock, make_submitter):
    updates = []
    submitter = make_submitter(clock=fake_clock, step=0.2)
    driver = BenchmarkDriver(
        make_config(transaction_count=12, progress_interval=5),
        submitter,
        progress_callback=updates.append,
        clock=fake_clock,
    )

    await driver.run()

    assert [u.completed for u in updates] == [5, 10]
    assert updates[0].total == 12
    assert updates[0].elapsed_seconds == pytest.approx(1.0)
    assert updates[0].throughput_tps == pytest.approx(5.0)
    assert updates[1].avg_latency_ms == pytest.approx(200.0)


@pytest.mark.asyncio
async def test_failure_details_are_capped(fake_clock, make_submitter, caplog):
    caplog.set_level(logging.INFO, logger="txbench.core.driver")
    submitter = make_submitter(clock=fake_clock, step=0.01, fail_every=1)
    driver = BenchmarkDriver(
        make_config(transaction_count=12, failure_detail_limit=5), submitter, clock=fake_clock
    )

    summary = await driver.run()

    detail_lines = [r for r in caplog.records if "failed: rejected call" in r.getMessage()]
    assert len(detail_lines) == 5
    assert all(r.levelno == logging.ERROR for r in detail_lines)
    assert summary.failed == 12
    assert sum(summary.error_histogram.values()) == 12


@pytest.mark.asyncio
async def test_concurrent_run_bounds_in_flight_submissions(make_submitter):
    submitter = make_submitter(sleep=0.01)
    driver = BenchmarkDriver(make_config(transaction_count=20, concurrency=4), submitter)

    summary = await driver.run()

    assert summary.total == 20
    assert summary.mode == "concurrent"
    assert summary.concurrency == 4
    assert submitter.max_in_flight == 4
    assert sorted(a.index for a in driver.collector.attempts) == list(range(1, 21))


@pytest.mark.asyncio
async def test_concurrent_latency_covers_only_own_submission():
    ticks = itertools.count()

    def tick_clock():
        return next(ticks)

    class SpanRecordingSubmitter(Submitter):
        def __init__(self):
            self.spans = {}
            self.in_flight = 0
            self.max_in_flight = 0

        async def submit(self, function_name, payload, timestamp):
            entered = tick_clock()
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            for _ in range(3):
                await asyncio.sleep(0)
            self.in_flight -= 1
            self.spans[payload] = (entered, tick_clock())

    submitter = SpanRecordingSubmitter()
    driver = BenchmarkDriver(
        make_config(transaction_count=12, concurrency=3), submitter, clock=tick_clock
    )

    await driver.run()

    assert submitter.max_in_flight == 3
    attempts = driver.collector.attempts
    assert len(attempts) == 12
    for attempt in attempts:
        entered, left = submitter.spans[attempt.payload.serialize()]
        # No other worker's clock reading falls between the driver's marks
        # and the submitter's own
        assert attempt.start_time == entered - 1
        assert attempt.end_time == left + 1


@pytest.mark.asyncio
async def test_latency_ignores_wall_clock_steps(monkeypatch, make_submitter):
    stepping_back = itertools.count(1_700_000_000.0, -1.0)
    monkeypatch.setattr(time, "time", lambda: next(stepping_back))
    submitter = make_submitter(sleep=0.001)
    driver = BenchmarkDriver(make_config(transaction_count=5), submitter)

    summary = await driver.run()

    assert summary.succeeded == 5
    assert all(latency >= 0 for latency in summary.latencies_ms)
    assert summary.duration_seconds > 0
    assert all(call[2].isdigit() for call in submitter.calls)


@pytest.mark.asyncio
async def test_unserializable_values_raise_generation_error(fake_clock, make_submitter):
    class DecimalReading(ValueDistribution):
        def sample(self, rng):
            return Decimal("1.5")

    schema = RecordSchema(id_field="SensorID", id_prefix="sensor", fields={"Temp": DecimalReading()})
    submitter = make_submitter(clock=fake_clock, step=0.01)
    driver = BenchmarkDriver(
        make_config(transaction_count=10, concurrency=2),
        submitter,
        generator=WorkloadGenerator(schema=schema),
        clock=fake_clock,
    )

    with pytest.raises(GenerationError, match="Decimal") as excinfo:
        await driver.run()
    assert isinstance(excinfo.value.__cause__, TypeError)
    assert submitter.calls == []


@pytest.mark.asyncio
async def test_failing_distribution_raises_generation_error(fake_clock, make_submitter):
    class BrokenSensor(ValueDistribution):
        def sample(self, rng):
            raise RuntimeError("sensor offline")

    schema = RecordSchema(id_field="SensorID", id_prefix="sensor", fields={"PH": BrokenSensor()})
    submitter = make_submitter(clock=fake_clock, step=0.01)
    driver = BenchmarkDriver(
        make_config(transaction_count=3),
        submitter,
        generator=WorkloadGenerator(schema=schema),
        clock=fake_clock,
    )

    with pytest.raises(GenerationError, match="sensor offline"):
        await driver.run()
    assert submitter.calls == []


@pytest.mark.asyncio
async def test_sequential_run_has_one_submission_in_flight(make_submitter):
    submitter = make_submitter(sleep=0.001)
    driver = BenchmarkDriver(make_config(transaction_count=5), submitter)

    await driver.run()

    assert submitter.max_in_flight == 1


@pytest.mark.asyncio
async def test_timeout_drains_and_summarizes_completed_attempts(fake_clock, make_submitter):
    submitter = make_submitter(clock=fake_clock, step=1.0)
    driver = BenchmarkDriver(
        make_config(transaction_count=10, timeout_seconds=5), submitter, clock=fake_clock
    )

    summary = await driver.run()

    assert len(submitter.calls) == 5
    assert summary.total == 5
    assert summary.succeeded == 5


@pytest.mark.asyncio
async def test_stop_lets_in_flight_attempt_finish(fake_clock):
    class StoppingSubmitter(Submitter):
        def __init__(self):
            self.calls = 0
            self.driver = None

        async def submit(self, function_name, payload, timestamp):
            self.calls += 1
            fake_clock.advance(0.1)
            if self.calls == 3:
                self.driver.stop()

    submitter = StoppingSubmitter()
    driver = BenchmarkDriver(make_config(transaction_count=10), submitter, clock=fake_clock)
    submitter.driver = driver

    summary = await driver.run()

    assert submitter.calls == 3
    assert summary.total == 3
    assert summary.succeeded == 3


@pytest.mark.asyncio
async def test_partial_summary_after_run(fake_clock, make_submitter):
    submitter = make_submitter(clock=fake_clock, step=0.1, fail_every=2)
    driver = BenchmarkDriver(make_config(transaction_count=4), submitter, clock=fake_clock)

    with pytest.raises(RuntimeError):
        driver.partial_summary()

    summary = await driver.run()

    assert driver.partial_summary() == summary
