r"""Delay strategy delegating to a user-supplied function."""

from __future__ import annotations

__all__ = ["CustomDelay", "DelayFunc"]

from typing import TYPE_CHECKING, Callable

from retryloop.backoff.base import BaseDelayStrategy

if TYPE_CHECKING:
    from retryloop.core.config import RetryConfig

DelayFunc = Callable[[int, "RetryConfig", "BaseException | None"], float]


class CustomDelay(BaseDelayStrategy):
    """Delay strategy calling a user-supplied function.

    The function receives ``(attempt, config, error)`` and its result is
    used verbatim. The retry loop still clamps it to ``[0, max_delay]``.

    Args:
        func: The delay function. It is validated when the retry
            configuration is built, so ``None`` is accepted here and
            reported as a configuration error later.

    Example:
        ```pycon
        >>> from retryloop.backoff import CustomDelay
        >>> from retryloop.core.config import RetryConfig
        >>> strategy = CustomDelay(lambda attempt, config, error: attempt * 0.25)
        >>> strategy.calculate(4, RetryConfig())
        1.0

        ```
    """

    def __init__(self, func: DelayFunc | None) -> None:
        self.func = func

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}({self.func!r})"

    def calculate(
        self, attempt: int, config: RetryConfig, error: BaseException | None = None
    ) -> float:
        if self.func is None:
            msg = "CustomDelay has no delay function"
            raise TypeError(msg)
        return self.func(attempt, config, error)
