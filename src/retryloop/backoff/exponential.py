r"""Exponential backoff strategy."""

from __future__ import annotations

__all__ = ["ExponentialBackoff"]

from typing import TYPE_CHECKING

from retryloop.backoff.base import BaseDelayStrategy
from retryloop.backoff.utils import exponential_delay

if TYPE_CHECKING:
    from retryloop.core.config import RetryConfig


class ExponentialBackoff(BaseDelayStrategy):
    """Exponential backoff strategy.

    Calculates delay as: delay * (2 ** (attempt - 1)), capped at
    max_delay if set. The exponent saturates at 62, so very large attempt
    numbers keep the delay pinned instead of overflowing.

    Example:
        ```pycon
        >>> from retryloop.backoff import ExponentialBackoff
        >>> from retryloop.core.config import RetryConfig
        >>> backoff = ExponentialBackoff()
        >>> config = RetryConfig(delay=0.3)
        >>> backoff.calculate(1, config)  # First retry
        0.3
        >>> backoff.calculate(2, config)  # Second retry
        0.6
        >>> backoff.calculate(3, config)  # Third retry
        1.2
        >>> # With max_delay cap
        >>> backoff.calculate(11, RetryConfig(delay=1.0, max_delay=5.0))  # Would be 1024.0
        5.0

        ```
    """

    def calculate(
        self,
        attempt: int,
        config: RetryConfig,
        error: BaseException | None = None,  # noqa: ARG002
    ) -> float:
        return exponential_delay(attempt, config.delay, config.max_delay)
