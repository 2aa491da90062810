"""
Retry utilities with exponential backoff.

Capability calls fail transiently (rate limits, busy render queues, dropped
connections). Those surface as CapabilityUnavailableError and are retried
here; schema violations are deterministic and propagate on the first attempt.
"""

import asyncio
import functools
import random
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Optional, Tuple, Type, TypeVar

from panelsmith.core.exceptions import CapabilityUnavailableError
from panelsmith.core.logging_config import get_logger

logger = get_logger("core.retry")

T = TypeVar("T")


@dataclass
class RetryConfig:
    """How often and how long to wait between attempts."""
    max_retries: int = 2
    base_delay: float = 2.0
    max_delay: float = 30.0
    exponential_base: float = 2.0
    jitter: bool = True
    jitter_range: Tuple[float, float] = (0.5, 1.5)
    # Explicit wait before each retry; overrides the exponential curve
    fixed_delays: Optional[Tuple[float, ...]] = None
    retryable_exceptions: Tuple[Type[Exception], ...] = (CapabilityUnavailableError,)
    label: str = "capability call"

    @classmethod
    def from_delays(cls, delays: Iterable[float], **kwargs) -> "RetryConfig":
        """Wait exactly ``delays[i]`` before retry ``i + 1``; one retry per delay."""
        delays = tuple(float(d) for d in delays)
        return cls(max_retries=len(delays), fixed_delays=delays, jitter=False, **kwargs)

    @classmethod
    def for_structured_generation(cls, config) -> "RetryConfig":
        """Backoff policy of a StructuredGenerationConfig."""
        return cls(
            max_retries=config.max_retries,
            base_delay=config.retry_base_delay,
            label="structured generation",
        )

    @classmethod
    def for_image_synthesis(cls, config) -> "RetryConfig":
        """Fixed schedule of an ImageSynthesisConfig (the render queue needs time to drain)."""
        return cls.from_delays(config.retry_delays, label="image synthesis")


def calculate_delay(attempt: int, config: RetryConfig) -> float:
    """
    Seconds to wait after failed attempt ``attempt`` (0-indexed).

    The fixed schedule wins when configured; its last entry repeats if the
    attempt runs past it.
    """
    if config.fixed_delays:
        return config.fixed_delays[min(attempt, len(config.fixed_delays) - 1)]

    delay = min(config.base_delay * (config.exponential_base ** attempt), config.max_delay)
    if config.jitter:
        delay *= random.uniform(*config.jitter_range)
    return delay


async def retry_async_call(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    config: Optional[RetryConfig] = None,
    on_retry: Optional[Callable[[Exception, int], None]] = None,
    **kwargs: Any
) -> T:
    """
    Await ``func(*args, **kwargs)``, retrying retryable failures.

    Args:
        func: Coroutine function to call
        config: Retry policy (RetryConfig() if omitted)
        on_retry: Called with (error, attempt) before each wait

    Returns:
        The first successful result

    Raises:
        The last retryable error once attempts are exhausted; any other
        error immediately.
    """
    config = config or RetryConfig()
    attempts = config.max_retries + 1

    for attempt in range(attempts):
        try:
            return await func(*args, **kwargs)
        except config.retryable_exceptions as e:
            if attempt == attempts - 1:
                logger.error(f"{config.label}: giving up after {attempts} attempt(s): {e}")
                raise
            delay = calculate_delay(attempt, config)
            logger.warning(
                f"{config.label}: attempt {attempt + 1}/{attempts} failed ({e}), "
                f"retrying in {delay:.1f}s"
            )
            if on_retry:
                on_retry(e, attempt)
            await asyncio.sleep(delay)


def async_retry(
    config: Optional[RetryConfig] = None,
    on_retry: Optional[Callable[[Exception, int], None]] = None
) -> Callable:
    """
    Decorator form of retry_async_call.

    Example:
        @async_retry(RetryConfig.from_delays([10, 15, 20]))
        async def submit(request):
            ...
    """
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any):
            return await retry_async_call(func, *args, config=config, on_retry=on_retry, **kwargs)
        return wrapper
    return decorator
