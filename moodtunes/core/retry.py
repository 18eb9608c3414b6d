"""Retry logic with bounded attempts and linear or exponential backoff"""

import asyncio
import random
import logging
from typing import Callable, Any, Awaitable, Optional
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class RetryConfig:
    """Configuration for retry behavior"""
    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 60.0
    backoff: str = "linear"  # "linear" or "exponential"
    exponential_base: float = 2.0
    jitter: bool = False


class RetryError(Exception):
    """Exception raised when all retry attempts are exhausted"""

    def __init__(self, attempts: int, last_exception: Exception):
        self.attempts = attempts
        self.last_exception = last_exception
        super().__init__(f"Failed after {attempts} attempts. Last error: {last_exception}")


def calculate_delay(attempt: int, config: RetryConfig) -> float:
    """
    Calculate the wait after a failed attempt.

    Linear backoff waits ``base_delay * attempt`` (1s, 2s, ...); exponential
    backoff waits ``base_delay * exponential_base ** (attempt - 1)``.

    Args:
        attempt: Number of the attempt that just failed (starting from 1)
        config: Retry configuration

    Returns:
        Delay in seconds
    """
    if config.backoff == "exponential":
        delay = config.base_delay * (config.exponential_base ** (attempt - 1))
    else:
        delay = config.base_delay * attempt

    # Cap at max_delay
    delay = min(delay, config.max_delay)

    if config.jitter:
        # Random jitter between 50% and 150% of calculated delay
        jitter_range = delay * 0.5
        delay = delay - jitter_range + (random.random() * jitter_range * 2)

    return max(0, delay)


def _always_retry(error: Exception) -> bool:
    return True


async def retry_async(
    func: Callable[..., Awaitable[Any]],
    *args,
    config: Optional[RetryConfig] = None,
    is_retryable: Callable[[Exception], bool] = _always_retry,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    **kwargs
) -> Any:
    """
    Execute async function with retry logic.

    Attempts run strictly one after another. A failure for which
    ``is_retryable`` returns False is re-raised immediately.

    Args:
        func: Async function to execute
        *args: Function arguments
        config: Retry configuration
        is_retryable: Predicate deciding whether a failure may be retried
        sleep: Awaitable used for the inter-attempt wait
        **kwargs: Function keyword arguments

    Returns:
        Function result

    Raises:
        RetryError: If all attempts fail with retryable errors
    """
    if config is None:
        config = RetryConfig()

    name = getattr(func, "__name__", repr(func))
    last_exception = None

    for attempt in range(1, config.max_attempts + 1):
        try:
            logger.debug(f"Attempt {attempt}/{config.max_attempts} for {name}")
            result = await func(*args, **kwargs)

            if attempt > 1:
                logger.info(f"Function {name} succeeded on attempt {attempt}")

            return result

        except Exception as e:
            if not is_retryable(e):
                logger.error(f"Function {name} failed with non-retryable exception: {e}")
                raise

            last_exception = e

            if attempt == config.max_attempts:
                logger.error(f"Function {name} failed after {attempt} attempts: {e}")
                break

            delay = calculate_delay(attempt, config)
            logger.warning(f"Function {name} failed on attempt {attempt}: {e}. Retrying in {delay:.2f}s")

            await sleep(delay)

    raise RetryError(config.max_attempts, last_exception)
