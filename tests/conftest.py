import asyncio
from typing import List, Optional

import matplotlib
import pytest

from txbench.core.errors import SubmissionFailure
from txbench.core.submitters import Submitter

matplotlib.use("Agg")


class FakeClock:
    """Manually advanced clock, in seconds."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ScriptedSubmitter(Submitter):
    """Records calls, advances a fake clock and fails on a schedule."""

    def __init__(
        self,
        clock: Optional[FakeClock] = None,
        step: float = 0.0,
        fail_every: Optional[int] = None,
        messages: Optional[List[str]] = None,
        sleep: float = 0.0,
    ):
        self.clock = clock
        self.step = step
        self.fail_every = fail_every
        self.messages = messages
        self.sleep = sleep
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False

    async def submit(self, function_name: str, payload: str, timestamp: str) -> None:
        self.calls.append((function_name, payload, timestamp))
        call_number = len(self.calls)

        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.sleep:
                await asyncio.sleep(self.sleep)
            if self.clock is not None:
                self.clock.advance(self.step)
        finally:
            self.in_flight -= 1

        if self.messages is not None:
            message = self.messages[call_number - 1]
            if message is not None:
                raise SubmissionFailure(message)
        elif self.fail_every and call_number % self.fail_every == 0:
            raise SubmissionFailure(f"rejected call {call_number}")

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def make_submitter():
    def factory(**kwargs) -> ScriptedSubmitter:
        return ScriptedSubmitter(**kwargs)

    return factory
