"""
Bounded retry helper for transient control-plane failures.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

from .errors import RetryBudgetExhausted

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """How many times to try and how long to pause between tries."""
    max_attempts: int = 30
    backoff: float = 1.0
    sleep: Callable[[float], None] = time.sleep


def retry_call(
    func: Callable[[], Any],
    should_retry: Callable[[Exception], bool],
    policy: RetryPolicy,
    description: str,
) -> Any:
    """
    Call func until it succeeds or the retry budget runs out.

    Args:
        func: Zero-argument callable to invoke
        should_retry: Predicate selecting the failures worth retrying
        policy: Attempt budget and backoff
        description: Human-readable name of the operation, used in errors

    Returns:
        Whatever func returns on its first successful call

    Raises:
        RetryBudgetExhausted: If every attempt failed with a retryable error
        Exception: Any failure should_retry rejects, on first occurrence
    """
    for attempt in range(1, policy.max_attempts + 1):
        try:
            return func()
        except Exception as e:
            if not should_retry(e):
                raise
            logger.warning(f"{type(e).__name__}: {e} (attempt {attempt}/{policy.max_attempts})")
        if attempt < policy.max_attempts:
            policy.sleep(policy.backoff)

    raise RetryBudgetExhausted(description, policy.max_attempts)
