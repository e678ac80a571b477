"""Retry policies and backoff strategies.

Example:
    >>> from restmcp.runtime.retry import RetryPolicy, ExponentialBackoff, execute_with_retry
    >>> policy = RetryPolicy(max_retries=3, backoff=ExponentialBackoff(base=1.0))
    >>> outcome = await execute_with_retry(lambda: transport.execute(descriptor), policy, "rest_api_request")
"""

from .backoff import Backoff, ExponentialBackoff
from .policy import IDEMPOTENT_METHODS, NO_RETRY, RetryPolicy, execute_with_retry

__all__ = [
    "Backoff",
    "ExponentialBackoff",
    "RetryPolicy",
    "NO_RETRY",
    "IDEMPOTENT_METHODS",
    "execute_with_retry",
]
