r"""Randomized delay strategies.

Jitter spreads the retries of independent callers over time so that
they do not hit a recovering dependency in lockstep.
"""

from __future__ import annotations

__all__ = ["FullJitterBackoff", "RandomDelay", "RandomJitterBackoff"]

import random
from typing import TYPE_CHECKING

from retryloop.backoff.base import BaseDelayStrategy
from retryloop.backoff.utils import exponential_delay

if TYPE_CHECKING:
    from retryloop.core.config import RetryConfig


class _RandomStrategy(BaseDelayStrategy):
    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng

    def _uniform(self, low: float, high: float) -> float:
        if self._rng is not None:
            return self._rng.uniform(low, high)
        return random.uniform(low, high)  # noqa: S311


class RandomDelay(_RandomStrategy):
    """Random delay strategy.

    Returns a random delay in ``[0, max_jitter]``. It is mostly used as
    an additive term in ``CombinedDelay``.

    Args:
        rng: Optional random generator, mainly for reproducible tests.
            Defaults to the ``random`` module.

    Example:
        ```pycon
        >>> import random
        >>> from retryloop.backoff import RandomDelay
        >>> from retryloop.core.config import RetryConfig
        >>> delay = RandomDelay(rng=random.Random(0)).calculate(1, RetryConfig(max_jitter=1.0))
        >>> 0.0 <= delay <= 1.0
        True

        ```
    """

    def calculate(
        self,
        attempt: int,  # noqa: ARG002
        config: RetryConfig,
        error: BaseException | None = None,  # noqa: ARG002
    ) -> float:
        return self._uniform(0.0, config.max_jitter)


class RandomJitterBackoff(_RandomStrategy):
    """Exponential backoff replaced by a random value above a floor.

    Computes the exponential backoff ``v`` and returns a random delay in
    ``[min(min_jitter, v), v]``.

    Args:
        rng: Optional random generator, mainly for reproducible tests.
            Defaults to the ``random`` module.

    Example:
        ```pycon
        >>> import random
        >>> from retryloop.backoff import RandomJitterBackoff
        >>> from retryloop.core.config import RetryConfig
        >>> config = RetryConfig(delay=1.0, min_jitter=0.5)
        >>> delay = RandomJitterBackoff(rng=random.Random(0)).calculate(3, config)
        >>> 0.5 <= delay <= 4.0
        True

        ```
    """

    def calculate(
        self,
        attempt: int,
        config: RetryConfig,
        error: BaseException | None = None,  # noqa: ARG002
    ) -> float:
        value = exponential_delay(attempt, config.delay, config.max_delay)
        return self._uniform(min(config.min_jitter, value), value)


class FullJitterBackoff(_RandomStrategy):
    """Exponential backoff with full jitter.

    Computes the exponential backoff ``v`` and returns a random delay in
    ``[0, v]``.

    Args:
        rng: Optional random generator, mainly for reproducible tests.
            Defaults to the ``random`` module.

    Example:
        ```pycon
        >>> import random
        >>> from retryloop.backoff import FullJitterBackoff
        >>> from retryloop.core.config import RetryConfig
        >>> delay = FullJitterBackoff(rng=random.Random(0)).calculate(2, RetryConfig(delay=1.0))
        >>> 0.0 <= delay <= 2.0
        True

        ```
    """

    def calculate(
        self,
        attempt: int,
        config: RetryConfig,
        error: BaseException | None = None,  # noqa: ARG002
    ) -> float:
        return self._uniform(0.0, exponential_delay(attempt, config.delay, config.max_delay))
