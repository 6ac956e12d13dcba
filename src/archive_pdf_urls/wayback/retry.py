"""Bounded exponential backoff shared by every Wayback Machine request.

A :class:`RetryPolicy` wraps one logical HTTP call (an availability lookup
or a capture submission) in :class:`tenacity.AsyncRetrying`:

- at most ``max_retries + 1`` attempts;
- only :data:`~archive_pdf_urls.core.exceptions.RETRIABLE_ERRORS` are
  retried, anything else propagates after the attempt that raised it;
- the delay before retry *k* is ``min(max_delay, base_delay * 2**(k-1))``
  plus up to ``jitter`` seconds of uniform noise, raised to the server's
  ``Retry-After`` value on HTTP 429;
- when every attempt fails, :class:`RetriesExhaustedError` is raised with
  the final error attached.

Attempts for one call are strictly sequential.  Cancelling the awaiting task
during a backoff sleep stops the sequence before the next request is sent.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
)

from archive_pdf_urls.core.exceptions import (
    RETRIABLE_ERRORS,
    RateLimitedError,
    RetriesExhaustedError,
)

if TYPE_CHECKING:
    from archive_pdf_urls.wayback.models import ClientConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Keeps ``2 ** n`` well inside float range for absurd retry counts.
_MAX_EXPONENT: int = 64


@dataclass(frozen=True)
class RetryPolicy:
    """Retry parameters plus the loop that applies them.

    Attributes:
        max_retries: Additional attempts after the first.
        base_delay: Delay before the first retry, in seconds.
        max_delay: Upper bound for a single delay, in seconds.
        jitter: Maximum uniform jitter added to each delay, in seconds.
        sleep: Awaitable sleep used between attempts.  Tests replace it.
    """

    max_retries: int
    base_delay: float = 1.0
    max_delay: float = 60.0
    jitter: float = 1.0
    sleep: Callable[[float], Awaitable[None]] = field(
        default=asyncio.sleep, repr=False, compare=False
    )

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> RetryPolicy:
        """Derive the policy from a :class:`ClientConfig`."""
        return cls(
            max_retries=config.max_request_retries,
            base_delay=config.backoff_base,
            max_delay=config.backoff_max,
            jitter=config.backoff_jitter,
            sleep=sleep,
        )

    @property
    def max_attempts(self) -> int:
        """Total attempts allowed, first try included."""
        return self.max_retries + 1

    def backoff(self, retry_number: int) -> float:
        """Return the delay before retry *retry_number* (1-based), without jitter."""
        if retry_number < 1:
            return 0.0
        exponent = min(retry_number - 1, _MAX_EXPONENT)
        return min(self.max_delay, self.base_delay * 2**exponent)

    def _wait(self, retry_state: RetryCallState) -> float:
        delay = self.backoff(retry_state.attempt_number)
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        if isinstance(exc, RateLimitedError) and exc.retry_after is not None:
            delay = max(delay, min(exc.retry_after, self.max_delay))
        if self.jitter > 0:
            delay += random.uniform(0, self.jitter)
        return delay

    def _before_sleep(self, description: str) -> Callable[[RetryCallState], None]:
        def log_retry(retry_state: RetryCallState) -> None:
            exc = retry_state.outcome.exception() if retry_state.outcome else None
            sleep_for = retry_state.next_action.sleep if retry_state.next_action else 0.0
            logger.warning(
                "%s failed (attempt %d/%d): %s; retrying in %.1fs",
                description,
                retry_state.attempt_number,
                self.max_attempts,
                exc,
                sleep_for,
            )

        return log_retry

    async def call(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        description: str = "request",
    ) -> T:
        """Run *operation* until it succeeds, fails permanently, or runs out of attempts.

        Args:
            operation: Zero-argument coroutine function performing one attempt.
            description: Short label used in retry log messages.

        Returns:
            Whatever the first successful attempt returned.

        Raises:
            RetriesExhaustedError: Every attempt raised a retriable error.
            ArchiveError: A non-retriable error raised by an attempt.
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self._wait,
            retry=retry_if_exception_type(RETRIABLE_ERRORS),
            sleep=self.sleep,
            before_sleep=self._before_sleep(description),
            reraise=False,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    return await operation()
        except RetryError as exc:
            last_error = exc.last_attempt.exception()
            raise RetriesExhaustedError(
                exc.last_attempt.attempt_number, last_error
            ) from last_error
