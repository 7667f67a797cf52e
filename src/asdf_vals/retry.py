"""Bounded fixed-delay retry."""

import time
from typing import Callable, Tuple, Type, TypeVar

from asdf_vals.log_utils import logger

T = TypeVar("T")


def with_retry(
    operation: Callable[[int], T],
    max_attempts: int,
    delay: float,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    description: str = "Network request",
) -> T:
    """
    Call `operation` until it succeeds or `max_attempts` attempts have failed.

    The operation receives the 1-based attempt index. Failures matching
    `retry_on` are logged and followed by a fixed `delay` pause (no pause after
    the final attempt); any other exception propagates immediately.

    Parameters:
        operation: Callable invoked with the attempt number.
        max_attempts: Total attempts; values below 1 are treated as 1.
        delay: Seconds to sleep between attempts.
        retry_on: Exception types considered transient.
        description: Label used in log messages.

    Returns:
        The value returned by the first successful attempt.

    Raises:
        The exception raised by the last attempt once attempts are exhausted.
    """
    attempts = max(1, int(max_attempts))

    for attempt in range(1, attempts + 1):
        logger.debug(f"Attempt {attempt} of {attempts}: {description}")
        try:
            return operation(attempt)
        except retry_on as exc:
            logger.warning(f"{description} failed (attempt {attempt}/{attempts})")
            logger.debug(f"Attempt {attempt} error: {exc}")
            if attempt >= attempts:
                raise
            logger.info(f"Retrying in {delay:g} seconds...")
            time.sleep(delay)

    # Unreachable: the loop either returns or re-raises.
    raise RuntimeError("with_retry exhausted without a result")
