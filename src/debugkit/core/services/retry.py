"""Retry and polling helpers used by the check suites."""

import time
from collections.abc import Callable
from typing import TypeVar

from loguru import logger

from src.debugkit.runtime.context import get_config

T = TypeVar("T")


def retry_with_backoff(
    fn: Callable[[], T],
    max_retries: int | None = None,
    base_delay_ms: int = 1000,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``fn`` up to ``max_retries`` times with exponential backoff.

    ``max_retries`` defaults to ``testing.retry_count`` (``TEST_RETRY_COUNT``).
    After failed attempt ``k`` (0-based) that is not the last, waits
    ``base_delay_ms * 2**k`` milliseconds. The last error is re-raised.
    """
    if max_retries is None:
        max_retries = get_config().testing.retry_count
    if max_retries < 1:
        raise ValueError("max_retries must be at least 1")

    for attempt in range(max_retries - 1):
        try:
            return fn()
        except Exception as e:
            delay_ms = base_delay_ms * 2**attempt
            logger.debug(
                "Retry {}/{} after {}ms: {}", attempt + 1, max_retries, delay_ms, e
            )
            sleep(delay_ms / 1000)

    return fn()


def wait_for_condition(
    condition: Callable[[], object],
    timeout_ms: int = 30000,
    interval_ms: int = 100,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Poll ``condition`` until it returns something truthy.

    Raises:
        TimeoutError: If the condition is still false after ``timeout_ms``.
    """
    start = clock()
    while (clock() - start) * 1000 < timeout_ms:
        if condition():
            return True
        sleep(interval_ms / 1000)

    raise TimeoutError(f"Condition not met within {timeout_ms}ms")
