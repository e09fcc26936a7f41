"""
Retry with Exponential Backoff

Router API calls are retried only when the failure is transient: a
transport error or an HTTP 5xx. With max_retries=0, the default, every call
is made exactly once and its error propagates unchanged.
"""

import logging
import random
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryConfig:
    """
    Retry budget for a single router API call.

    Attributes:
        max_retries: Extra attempts after the first one
        initial_delay: Seconds before the first retry
        max_delay: Upper bound for any single delay
        multiplier: Growth factor between consecutive delays
        jitter: Random spread as a fraction of the delay (0.1 = +/-10%)
        retryable_exceptions: Types retried when the error does not say
            whether it is transient
    """

    max_retries: int = 0
    initial_delay: float = 0.5
    max_delay: float = 10.0
    multiplier: float = 2.0
    jitter: float = 0.1
    retryable_exceptions: tuple[type[Exception], ...] = (ConnectionError, TimeoutError)

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be non-negative")
        if self.initial_delay <= 0:
            raise ValueError("initial_delay must be positive")
        if self.max_delay < self.initial_delay:
            raise ValueError("max_delay must be at least initial_delay")
        if self.multiplier < 1.0:
            raise ValueError("multiplier must be at least 1.0")
        if not 0.0 <= self.jitter < 1.0:
            raise ValueError("jitter must be in [0, 1)")


class ExponentialBackoff:
    """Delays between attempts: initial_delay * multiplier**n, capped, with jitter."""

    def __init__(self, config: RetryConfig, rng: random.Random | None = None) -> None:
        self.config = config
        self._rng = rng or random.Random()

    def delays(self) -> Iterator[float]:
        """One delay per allowed retry."""
        delay = self.config.initial_delay
        for _ in range(self.config.max_retries):
            spread = delay * self.config.jitter
            yield max(0.0, delay + self._rng.uniform(-spread, spread))
            delay = min(delay * self.config.multiplier, self.config.max_delay)


def is_retryable_exception(error: Exception, config: RetryConfig) -> bool:
    """
    Whether a failed call is worth repeating.

    Errors carrying an ``is_transient`` flag decide for themselves; anything
    else is retried only if it is one of the configured types.
    """
    transient = getattr(error, "is_transient", None)
    if isinstance(transient, bool):
        return transient
    return isinstance(error, config.retryable_exceptions)


def retry_call(
    func: Callable[..., T],
    *args: Any,
    config: RetryConfig | None = None,
    sleep: Callable[[float], None] = time.sleep,
    **kwargs: Any,
) -> T:
    """
    Call func(*args, **kwargs), retrying transient failures.

    Raises:
        The first non-retryable error, or the last error once the retry
        budget is spent
    """
    config = config or RetryConfig()
    name = getattr(func, "__name__", repr(func))
    delays = ExponentialBackoff(config).delays()
    attempt = 1

    while True:
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            delay = next(delays, None) if is_retryable_exception(e, config) else None
            if delay is None:
                if attempt > 1:
                    logger.warning(f"{name} failed after {attempt} attempts: {e}")
                raise
            logger.warning(f"{name} attempt {attempt} failed, retrying in {delay:.2f}s: {e}")
            sleep(delay)
            attempt += 1
        else:
            if attempt > 1:
                logger.info(f"{name} succeeded on attempt {attempt}")
            return result
