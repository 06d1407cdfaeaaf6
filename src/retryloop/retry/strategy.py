r"""Delay computation for the waits between attempts.

This module provides the RetryStrategy class that applies the
configured delay strategy and enforces the delay bounds.
"""

from __future__ import annotations

__all__ = ["MAX_WAIT", "RetryStrategy"]

import logging
import math
import threading
from typing import TYPE_CHECKING

from retryloop.backoff.utils import cap_delay

if TYPE_CHECKING:
    from retryloop.core.config import RetryConfig

logger: logging.Logger = logging.getLogger(__name__)

# Longest wait supported by time.sleep and threading waits. Longer or
# non-finite delays are reduced to it.
MAX_WAIT = threading.TIMEOUT_MAX


class RetryStrategy:
    """Strategy for calculating the delay before the next attempt.

    The configured delay strategy is evaluated, then its result is
    clamped to ``[0, max_delay]`` so that custom and jittered strategies
    also honor the cap. The delay never exceeds ``MAX_WAIT``.

    Args:
        config: The retry configuration.

    Example:
        ```pycon
        >>> from retryloop.backoff import ExponentialBackoff
        >>> from retryloop.core.config import RetryConfig
        >>> from retryloop.retry.strategy import RetryStrategy
        >>> strategy = RetryStrategy(
        ...     RetryConfig(delay=1.0, max_delay=3.0, delay_strategy=ExponentialBackoff())
        ... )
        >>> strategy.calculate_delay(2)
        2.0
        >>> strategy.calculate_delay(5)
        3.0

        ```
    """

    def __init__(self, config: RetryConfig) -> None:
        self.config = config

    def calculate_delay(self, attempt: int, error: BaseException | None = None) -> float:
        """Calculate the delay after a failed attempt.

        Args:
            attempt: The index of the failed attempt (1-indexed).
            error: The error raised by the failed attempt.

        Returns:
            The delay in seconds, within ``[0, max_delay]`` and at most
            ``MAX_WAIT``.
        """
        raw = self.config.delay_strategy.calculate(attempt, self.config, error)
        value = MAX_WAIT if math.isnan(raw) else raw
        sleep_time = min(cap_delay(value, self.config.max_delay), MAX_WAIT)
        if sleep_time != raw:
            logger.debug(f"Clamping delay from {raw:.2f}s to {sleep_time:.2f}s")
        logger.debug(f"Waiting {sleep_time:.2f}s before attempt {attempt + 1}")
        return sleep_time
