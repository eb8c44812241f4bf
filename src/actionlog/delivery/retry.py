"""
Module: delivery/retry.py
Description: Retry policy for log delivery.

Exponential backoff without jitter: after failed attempt n (0-based) the
caller sleeps base_delay * 2 ** n before trying again.
"""

import asyncio
from typing import Awaitable, Callable

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from actionlog.delivery.errors import DeliveryError
from actionlog.utils.logger import get_logger

logger = get_logger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


def _log_failed_attempt(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "Log attempt failed, backing off",
        attempt=retry_state.attempt_number,
        delay_seconds=retry_state.next_action.sleep if retry_state.next_action else None,
        error=str(exc) if exc else None
    )


def backoff_delays(max_retries: int, base_delay: float) -> list:
    """Delays slept between attempts when every attempt fails."""
    return [base_delay * (2 ** n) for n in range(max_retries)]


def build_retrying(
    max_retries: int,
    base_delay: float,
    sleep: SleepFn = asyncio.sleep
) -> AsyncRetrying:
    """
    Build the retry controller for one entry.

    A fresh controller must be built per entry so every entry gets its
    own attempt counter.

    Args:
        max_retries: Retries after the first attempt
        base_delay: Delay in seconds after the first failed attempt
        sleep: Coroutine used to suspend between attempts

    Returns:
        AsyncRetrying that re-raises the last DeliveryError on exhaustion
    """
    return AsyncRetrying(
        stop=stop_after_attempt(max_retries + 1),
        wait=wait_exponential(multiplier=base_delay, min=0, exp_base=2),
        retry=retry_if_exception_type(DeliveryError),
        before_sleep=_log_failed_attempt,
        sleep=sleep,
        reraise=True
    )
