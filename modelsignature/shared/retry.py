"""
Retry mechanism for calls to the verification authority.
"""

import asyncio
import random
from typing import Any, Awaitable, Callable, Optional, Tuple, Type

from .errors import RequestFailedError
from .logging import get_logger


class RetryConfig:
    """Configuration for retry behavior."""

    def __init__(self,
                 retries: int = 3,
                 base_delay: float = 1.0,
                 max_delay: float = 10.0,
                 exponential_base: float = 2.0,
                 jitter: float = 1.0):
        self.retries = retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.jitter = jitter

    @property
    def max_attempts(self) -> int:
        return self.retries + 1


def calculate_delay(attempt: int, config: RetryConfig) -> float:
    """Delay before the next attempt; ``attempt`` is the 0-based failed attempt."""
    delay = min(config.base_delay * (config.exponential_base ** attempt), config.max_delay)

    if config.jitter:
        delay += random.uniform(0, config.jitter)

    return max(0.0, delay)


async def retry_async(func: Callable[[], Awaitable[Any]],
                      config: RetryConfig,
                      retry_on: Tuple[Type[BaseException], ...] = (Exception,),
                      is_terminal: Optional[Callable[[BaseException], bool]] = None,
                      name: str = "request") -> Any:
    """Run ``func`` up to ``config.max_attempts`` times.

    Exceptions outside ``retry_on``, or for which ``is_terminal`` returns
    True, propagate immediately. When every attempt fails a
    ``RequestFailedError`` is raised with the last error's message.
    """
    logger = get_logger("modelsignature.retry")
    last_exception: Optional[BaseException] = None

    for attempt in range(config.max_attempts):
        try:
            result = await func()

            if attempt > 0:
                logger.info("Retry succeeded", attempt=attempt + 1, operation=name)

            return result

        except retry_on as e:
            if is_terminal is not None and is_terminal(e):
                raise

            last_exception = e

            if attempt == config.max_attempts - 1:
                logger.error(
                    "All retry attempts exhausted",
                    attempts=config.max_attempts,
                    operation=name,
                    error=_message(e)
                )
                break

            delay = calculate_delay(attempt, config)

            logger.warning(
                "Attempt failed, waiting before next attempt",
                attempt=attempt + 1,
                max_attempts=config.max_attempts,
                delay=round(delay, 3),
                operation=name,
                error=_message(e)
            )

            await asyncio.sleep(delay)

    raise RequestFailedError(
        config.max_attempts,
        _message(last_exception) if last_exception is not None else "Unknown error",
        details={"operation": name}
    ) from last_exception


def _message(error: BaseException) -> str:
    return str(error) or type(error).__name__
