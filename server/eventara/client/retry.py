"""Retry orchestration for assistant requests.

State machine per call::

    Idle → Attempting → Success
                      → RetryWait → Attempting   (5xx / network error)
                      → Failed                   (4xx, timeout, attempts exhausted)

Only 5xx and network failures are retried. A timed-out attempt is cancelled
and reported immediately, because the proxy may still be generating and a
second call would spend another unit of the caller's quota.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Literal, TypeVar

import structlog
from pydantic import BaseModel, Field

from eventara.client.errors import (
    AttemptFailedError,
    SuggestionRejectedError,
    SuggestionsUnavailableError,
    SuggestionTimeoutError,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T")

Outcome = Literal["success", "retryable", "rejected", "timeout"]


class RetryPolicy(BaseModel):
    """Attempts, backoff base and the per-attempt deadline.

    Args:
        max_attempts: Total attempts including the first one.
        base_delay_s: Wait before retry ``i`` (0-indexed) is ``base_delay_s * 2**i``.
        attempt_timeout_s: Deadline for a single attempt.
    """

    model_config = {"frozen": True}

    max_attempts: int = Field(default=3, ge=1)
    base_delay_s: float = Field(default=1.0, ge=0.0)
    attempt_timeout_s: float = Field(default=25.0, gt=0.0)

    def compute_delay(self, attempt_index: int) -> float:
        return self.base_delay_s * (2**attempt_index)


@dataclass
class RetryAttempt:
    attempt_number: int
    started_at: float
    outcome: Outcome
    status_code: int | None = None


async def run_with_retry(
    perform_attempt: Callable[[], Awaitable[T]],
    policy: RetryPolicy | None = None,
    *,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run ``perform_attempt`` under ``policy``.

    Raises:
        SuggestionTimeoutError: an attempt exceeded the deadline (not retried).
        SuggestionRejectedError: the server answered 4xx (not retried).
        SuggestionsUnavailableError: every attempt failed with 5xx or network errors.
    """
    policy = policy or RetryPolicy()
    attempts: list[RetryAttempt] = []
    last_error: AttemptFailedError | None = None

    for index in range(policy.max_attempts):
        attempt = RetryAttempt(attempt_number=index + 1, started_at=time.time(), outcome="success")
        attempts.append(attempt)
        try:
            return await asyncio.wait_for(perform_attempt(), timeout=policy.attempt_timeout_s)
        except TimeoutError as e:
            attempt.outcome = "timeout"
            logger.warning(
                "suggestion_attempt_timed_out",
                attempt=attempt.attempt_number,
                timeout_s=policy.attempt_timeout_s,
            )
            raise SuggestionTimeoutError(attempts) from e
        except AttemptFailedError as e:
            attempt.status_code = e.status_code
            if e.is_client_error:
                attempt.outcome = "rejected"
                logger.info(
                    "suggestion_rejected",
                    attempt=attempt.attempt_number,
                    status=e.status_code,
                    error=e.message,
                )
                raise SuggestionRejectedError(e.message, e.status_code or 400, attempts) from e
            attempt.outcome = "retryable"
            last_error = e

        if index + 1 < policy.max_attempts:
            delay = policy.compute_delay(index)
            logger.warning(
                "suggestion_attempt_failed",
                attempt=attempt.attempt_number,
                status=last_error.status_code,
                error=last_error.message,
                retry_in_s=delay,
            )
            await sleep(delay)

    logger.error(
        "suggestion_attempts_exhausted",
        attempts=len(attempts),
        status=last_error.status_code if last_error else None,
    )
    raise SuggestionsUnavailableError(last_error, attempts) from last_error
