r"""Fixed delay strategy."""

from __future__ import annotations

__all__ = ["FixedDelay"]

from typing import TYPE_CHECKING

from retryloop.backoff.base import BaseDelayStrategy

if TYPE_CHECKING:
    from retryloop.core.config import RetryConfig


class FixedDelay(BaseDelayStrategy):
    """Fixed delay strategy.

    Returns the configured base delay for every attempt.

    Example:
        ```pycon
        >>> from retryloop.backoff import FixedDelay
        >>> from retryloop.core.config import RetryConfig
        >>> config = RetryConfig(delay=2.5)
        >>> FixedDelay().calculate(1, config)
        2.5
        >>> FixedDelay().calculate(10, config)
        2.5

        ```
    """

    def calculate(
        self,
        attempt: int,  # noqa: ARG002
        config: RetryConfig,
        error: BaseException | None = None,  # noqa: ARG002
    ) -> float:
        return config.delay
