"""Retry orchestration for transport outcomes.

Retries transient failures (timeouts, connection errors, 5xx, anything
without a 4xx response) with exponential backoff. Client errors are returned
immediately: repeating an identical request will not fix them.

The default policy retries every method, POST included. Set
`idempotent_only=True` (or RESTMCP_RETRY_IDEMPOTENT_ONLY=true) to keep
non-idempotent requests to a single attempt.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Annotated, Callable

from pydantic import BaseModel, ConfigDict, Field

from .backoff import Backoff, ExponentialBackoff

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from restmcp.foundation.config import RetrySettings
    from restmcp.runtime.transport import TransportOutcome


logger = logging.getLogger("restmcp.retry")

# RFC 9110 §9.2.2
IDEMPOTENT_METHODS: frozenset[str] = frozenset({"GET", "HEAD", "OPTIONS", "PUT", "DELETE"})


class RetryPolicy(BaseModel):
    """Configurable retry policy.

    Attributes:
        max_retries: Retries after the first attempt (0 = single attempt)
        backoff: Delay calculation per retry
        idempotent_only: Only retry methods that are safe to repeat
    """

    model_config = ConfigDict(
        frozen=True,
        arbitrary_types_allowed=True,
        extra="forbid",
        revalidate_instances="never",
    )

    max_retries: Annotated[int, Field(ge=0, le=10)] = 3
    backoff: Backoff = Field(default_factory=ExponentialBackoff, repr=False)
    idempotent_only: bool = False

    @classmethod
    def from_settings(cls, settings: RetrySettings) -> RetryPolicy:
        return cls(
            max_retries=settings.max_retries,
            backoff=ExponentialBackoff(
                base=settings.base_delay,
                max_delay=settings.max_delay,
                multiplier=settings.multiplier,
                jitter=settings.jitter,
            ),
            idempotent_only=settings.idempotent_only,
        )

    def retries_for(self, method: str | None) -> int:
        """Retry budget for a request using `method`."""
        if self.idempotent_only and method is not None and method.upper() not in IDEMPOTENT_METHODS:
            return 0
        return self.max_retries

    def get_delay(self, attempt: int) -> float:
        return self.backoff.delay(attempt)


NO_RETRY = RetryPolicy(max_retries=0)


async def execute_with_retry(
    operation: Callable[[], Awaitable[TransportOutcome]],
    policy: RetryPolicy,
    name: str,
    *,
    method: str | None = None,
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
) -> TransportOutcome:
    """Run `operation` until it succeeds, fails terminally, or retries run out.

    The operation is invoked at most `max_retries + 1` times. Retry `n`
    (0-indexed) waits `policy.get_delay(n)` seconds first.

    Args:
        operation: Zero-argument coroutine factory performing one attempt
        policy: Retry policy
        name: Label for log lines (tool name)
        method: HTTP method, consulted when the policy is idempotent-only
        sleep: Delay function, injectable for tests
    """
    budget = policy.retries_for(method)
    result = await operation()
    attempt = 0

    while result.is_err() and attempt < budget:
        failure = result.unwrap_err()
        if not failure.is_transient:
            break

        delay = policy.get_delay(attempt)
        logger.info(
            f"[{name}] Retry {attempt + 1}/{budget} "
            f"after {delay:.1f}s ({failure.code}: {failure.message})"
        )
        await sleep(delay)
        result = await operation()
        attempt += 1

    return result
