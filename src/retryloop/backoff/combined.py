r"""Strategy summing several delay strategies."""

from __future__ import annotations

__all__ = ["CombinedDelay"]

from typing import TYPE_CHECKING

from retryloop.backoff.base import BaseDelayStrategy

if TYPE_CHECKING:
    from retryloop.core.config import RetryConfig


class CombinedDelay(BaseDelayStrategy):
    """Delay strategy returning the sum of other strategies.

    The default strategy of the retry loop is
    ``CombinedDelay(ExponentialBackoff(), RandomDelay())``, i.e. an
    exponential backoff plus an additive random jitter.

    Args:
        *strategies: The strategies to sum.

    Raises:
        ValueError: If no strategy is given.

    Example:
        ```pycon
        >>> from retryloop.backoff import CombinedDelay, ExponentialBackoff, FixedDelay
        >>> from retryloop.core.config import RetryConfig
        >>> combined = CombinedDelay(ExponentialBackoff(), FixedDelay())
        >>> combined.calculate(3, RetryConfig(delay=1.0))
        5.0

        ```
    """

    def __init__(self, *strategies: BaseDelayStrategy) -> None:
        if not strategies:
            msg = "CombinedDelay requires at least one strategy"
            raise ValueError(msg)
        self.strategies = strategies

    def __repr__(self) -> str:
        args = ", ".join(repr(strategy) for strategy in self.strategies)
        return f"{self.__class__.__qualname__}({args})"

    def calculate(
        self, attempt: int, config: RetryConfig, error: BaseException | None = None
    ) -> float:
        return sum(strategy.calculate(attempt, config, error) for strategy in self.strategies)
