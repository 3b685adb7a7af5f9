"""Submitters: the transport that delivers a transaction to the target."""

import asyncio
import concurrent.futures
import functools
import json
import random
from typing import Any, Callable, Dict, List, Optional, Tuple

import aiohttp

from .errors import SubmissionFailure


class Submitter:
    """
    Delivers one transaction to the system under test.

    `submit()` returns normally on success and raises on failure; the
    exception message becomes the failure reason. Submitters never retry on
    their own behalf unless the caller configures them to.
    """

    async def submit(self, function_name: str, payload: str, timestamp: str) -> None:
        raise NotImplementedError

    def reserve(self, concurrency: int) -> None:
        """Size internal pools so `concurrency` submissions never queue."""

    async def close(self) -> None:
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()


class HttpSubmitter(Submitter):
    """
    Submits transactions as JSON to an HTTP gateway in front of the contract.

    Request body: {"function": <name>, "args": [<payload>, <timestamp>]}.
    """

    # Bodies that report failure even with a 2xx status
    FAILED_STATUSES = {"FAILED", "ERROR"}

    def __init__(
        self,
        url: str,
        api_key: Optional[str] = None,
        timeout_seconds: float = 120,
        connection_limit: int = 10,
    ):
        self.url = url
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self.connection_limit = connection_limit
        self._session: Optional[aiohttp.ClientSession] = None
        self._stale_sessions: List[aiohttp.ClientSession] = []

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
            connector = aiohttp.TCPConnector(
                limit=self.connection_limit, limit_per_host=self.connection_limit
            )
            self._session = aiohttp.ClientSession(timeout=timeout, connector=connector)
        return self._session

    def reserve(self, concurrency: int) -> None:
        # The connector queues requests beyond its limit; that wait would be
        # measured as latency
        if concurrency > self.connection_limit:
            self.connection_limit = concurrency
            if self._session is not None and not self._session.closed:
                self._stale_sessions.append(self._session)
            self._session = None

    async def submit(self, function_name: str, payload: str, timestamp: str) -> None:
        headers = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        body = {"function": function_name, "args": [payload, timestamp]}
        session = self._get_session()
        async with session.post(self.url, json=body, headers=headers) as response:
            response_text = await response.text()

            if response.status < 200 or response.status >= 300:
                raise SubmissionFailure(f"HTTP {response.status}: {response_text[:200]}")

            if response_text:
                try:
                    json_response = json.loads(response_text)
                except (json.JSONDecodeError, ValueError):
                    return
                if isinstance(json_response, dict):
                    status = str(json_response.get("status", "")).upper()
                    if status in self.FAILED_STATUSES:
                        message = json_response.get("message") or json_response.get("error")
                        raise SubmissionFailure(message or f"Transaction {status.lower()}")

    async def close(self) -> None:
        sessions = self._stale_sessions + [self._session]
        self._stale_sessions = []
        self._session = None
        for session in sessions:
            if session is not None and not session.closed:
                await session.close()


class CallableSubmitter(Submitter):
    """
    Adapts a blocking call, such as an SDK client method, to a Submitter.

    The callable receives (function_name, payload, timestamp) and runs in a
    thread pool owned by the submitter, so the loop stays responsive. The pool
    has at least as many threads as the largest reserved concurrency.
    """

    def __init__(self, func: Callable[[str, str, str], Any], max_workers: int = 1):
        if max_workers < 1:
            raise ValueError(f"max_workers must be positive, got {max_workers}")
        self.func = func
        self.max_workers = max_workers
        self._executor: Optional[concurrent.futures.ThreadPoolExecutor] = None

    def _get_executor(self) -> concurrent.futures.ThreadPoolExecutor:
        if self._executor is None:
            self._executor = concurrent.futures.ThreadPoolExecutor(
                max_workers=self.max_workers, thread_name_prefix="txbench-submit"
            )
        return self._executor

    def reserve(self, concurrency: int) -> None:
        if concurrency > self.max_workers:
            self.max_workers = concurrency
            if self._executor is not None:
                self._executor.shutdown(wait=False)
                self._executor = None

    async def submit(self, function_name: str, payload: str, timestamp: str) -> None:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(
            self._get_executor(),
            functools.partial(self.func, function_name, payload, timestamp),
        )

    async def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None


class DryRunSubmitter(Submitter):
    """
    Simulates a target: sleeps for a random latency and fails at a set rate.

    Useful for exercising the harness end to end without a live network.
    """

    def __init__(
        self,
        latency_range_seconds: Tuple[float, float] = (0.005, 0.02),
        failure_rate: float = 0.0,
        failure_message: str = "simulated failure",
        seed: Optional[int] = None,
    ):
        low, high = latency_range_seconds
        if low < 0 or high < low:
            raise ValueError(f"Invalid latency range: {latency_range_seconds}")
        if not 0.0 <= failure_rate <= 1.0:
            raise ValueError(f"failure_rate must be within [0, 1], got {failure_rate}")
        self.latency_range_seconds = latency_range_seconds
        self.failure_rate = failure_rate
        self.failure_message = failure_message
        self._rng = random.Random(seed)
        self.calls: Dict[str, int] = {}

    async def submit(self, function_name: str, payload: str, timestamp: str) -> None:
        self.calls[function_name] = self.calls.get(function_name, 0) + 1
        await asyncio.sleep(self._rng.uniform(*self.latency_range_seconds))
        if self._rng.random() < self.failure_rate:
            raise SubmissionFailure(self.failure_message)
