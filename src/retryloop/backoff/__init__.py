r"""Delay strategies for the waits between attempts.

This package provides fixed, linear, exponential and jittered delay
strategies, a combinator summing strategies, and a wrapper around a
user-supplied delay function.
"""

from __future__ import annotations

__all__ = [
    "BaseDelayStrategy",
    "CombinedDelay",
    "CustomDelay",
    "ExponentialBackoff",
    "FixedDelay",
    "FullJitterBackoff",
    "LinearDelay",
    "RandomDelay",
    "RandomJitterBackoff",
    "default_delay_strategy",
    "get_delay_strategy",
]

from retryloop.backoff.base import BaseDelayStrategy
from retryloop.backoff.combined import CombinedDelay
from retryloop.backoff.custom import CustomDelay
from retryloop.backoff.exponential import ExponentialBackoff
from retryloop.backoff.fixed import FixedDelay
from retryloop.backoff.jitter import FullJitterBackoff, RandomDelay, RandomJitterBackoff
from retryloop.backoff.linear import LinearDelay


def default_delay_strategy() -> BaseDelayStrategy:
    r"""Return the default delay strategy: exponential backoff plus a
    random delay in ``[0, max_jitter]``."""
    return CombinedDelay(ExponentialBackoff(), RandomDelay())


_STRATEGIES = {
    "combined": default_delay_strategy,
    "exponential": ExponentialBackoff,
    "fixed": FixedDelay,
    "full_jitter": FullJitterBackoff,
    "linear": LinearDelay,
    "random": RandomDelay,
    "random_jitter": RandomJitterBackoff,
}


def get_delay_strategy(name: str) -> BaseDelayStrategy:
    r"""Instantiate a delay strategy from its name.

    Args:
        name: One of ``combined``, ``exponential``, ``fixed``,
            ``full_jitter``, ``linear``, ``random`` or ``random_jitter``.

    Returns:
        A new strategy instance.

    Raises:
        ValueError: If the name is unknown.

    Example:
        ```pycon
        >>> from retryloop.backoff import get_delay_strategy
        >>> get_delay_strategy("linear")
        LinearDelay()

        ```
    """
    try:
        factory = _STRATEGIES[name]
    except KeyError:
        msg = f"Unknown delay strategy {name!r}. Valid names are: {sorted(_STRATEGIES)}"
        raise ValueError(msg) from None
    return factory()
