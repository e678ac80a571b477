"""Shared fixtures: stubbed HTTP, recorded sleeps, registries."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
import pytest

from restmcp.foundation.config import clear_settings_cache
from restmcp.registry import ToolRegistry, default_registry
from restmcp.runtime.retry import ExponentialBackoff, RetryPolicy
from restmcp.runtime.transport import HttpTransport

Handler = Callable[[httpx.Request], httpx.Response]


class StubServer:
    """httpx.MockTransport handler that records requests and replays responses.

    Responses are consumed in order; the last one repeats once the queue
    runs out. An entry may be an exception instance, which is raised.
    """

    def __init__(self, *responses: httpx.Response | Exception | Handler) -> None:
        self._responses = list(responses) or [httpx.Response(200, json={})]
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = min(len(self.requests), len(self._responses)) - 1
        entry = self._responses[index]
        if isinstance(entry, Exception):
            raise entry
        if callable(entry):
            return entry(request)
        return entry

    @property
    def calls(self) -> int:
        return len(self.requests)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def transport(self, **kwargs: Any) -> HttpTransport:
        return HttpTransport(transport=httpx.MockTransport(self), **kwargs)


class SleepRecorder:
    """Stand-in for asyncio.sleep that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch) -> object:
    """Isolate tests from RESTMCP_* variables in the environment."""
    import os

    for key in list(os.environ):
        if key.startswith("RESTMCP_"):
            monkeypatch.delenv(key)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def sleep() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def fast_retry() -> RetryPolicy:
    """Three retries, no waiting."""
    return RetryPolicy(max_retries=3, backoff=ExponentialBackoff(base=0.0))


def make_registry(stub: StubServer, retry_policy: RetryPolicy | None = None) -> ToolRegistry:
    return default_registry(
        transport=stub.transport(user_agent="restmcp-tests"),
        retry_policy=retry_policy or RetryPolicy(max_retries=3, backoff=ExponentialBackoff(base=0.0)),
    )
