import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def with_retries(
    fn: Callable[[], Awaitable[T]],
    label: str,
    max_retries: int = 2,
    delay: float = 2.0,
) -> T:
    """
    Await fn(), retrying up to max_retries extra times with a fixed delay.
    Re-raises the last error once every attempt has failed.
    """
    last_exception: Optional[Exception] = None
    attempts = max_retries + 1

    for attempt in range(1, attempts + 1):
        try:
            return await fn()
        except Exception as e:
            last_exception = e
            logger.warning(f"{label} attempt {attempt}/{attempts} failed: {e}")

        if attempt < attempts:
            await asyncio.sleep(delay)

    raise last_exception or RuntimeError(f"{label}: all attempts failed")
