r"""Linear delay strategy."""

from __future__ import annotations

__all__ = ["LinearDelay"]

from typing import TYPE_CHECKING

from retryloop.backoff.base import BaseDelayStrategy
from retryloop.backoff.utils import cap_delay

if TYPE_CHECKING:
    from retryloop.core.config import RetryConfig


class LinearDelay(BaseDelayStrategy):
    """Linear delay strategy.

    Calculates delay as: delay * attempt, capped at max_delay if set.

    This strategy provides evenly spaced increments, which can be useful
    for dependencies that recover quickly or when predictable timing is
    wanted.

    Example:
        ```pycon
        >>> from retryloop.backoff import LinearDelay
        >>> from retryloop.core.config import RetryConfig
        >>> config = RetryConfig(delay=1.0, max_delay=5.0)
        >>> LinearDelay().calculate(1, config)
        1.0
        >>> LinearDelay().calculate(3, config)
        3.0
        >>> LinearDelay().calculate(10, config)  # Would be 10.0, but capped
        5.0

        ```
    """

    def calculate(
        self,
        attempt: int,
        config: RetryConfig,
        error: BaseException | None = None,  # noqa: ARG002
    ) -> float:
        return cap_delay(config.delay * max(attempt, 1), config.max_delay)
