r"""Options configuring the retry loop.

Each option is a function returning a new ``RetryConfig`` from an
existing one. Options are applied left to right by the entry points, so
a later option overrides an earlier one. The exception is
``attempts_for_error``, whose rules accumulate in registration order.
Options never raise: invalid values are reported as a
``RetryConfigError`` when the configuration is built.

Example:
    ```pycon
    >>> from retryloop import options as opt, retry
    >>> calls = []
    >>> def flaky():
    ...     calls.append(1)
    ...     if len(calls) < 3:
    ...         raise ConnectionError("try again")
    ...     return "ok"
    ...
    >>> retry(flaky, opt.attempts(5), opt.delay(0.0), opt.max_jitter(0.0))
    'ok'
    >>> len(calls)
    3

    ```
"""

from __future__ import annotations

__all__ = [
    "attempts",
    "attempts_for_error",
    "cancel_token",
    "custom_delay",
    "delay",
    "delay_strategy",
    "last_error_only",
    "max_delay",
    "max_jitter",
    "min_jitter",
    "on_retry",
    "retry_if",
    "until_succeeded",
    "wrap_cancel_error",
]

from dataclasses import replace
from typing import TYPE_CHECKING, Any

from retryloop.backoff import BaseDelayStrategy, CustomDelay, get_delay_strategy
from retryloop.core.config import ErrorLimit, RetryConfig

if TYPE_CHECKING:
    from collections.abc import Callable

    from retryloop.backoff.custom import DelayFunc
    from retryloop.callbacks import RetryInfo
    from retryloop.cancel import CancelToken

    Option = Callable[[RetryConfig], RetryConfig]


def _set(**changes: Any) -> Option:
    def option(config: RetryConfig) -> RetryConfig:
        return replace(config, **changes)

    return option


def attempts(n: int) -> Option:
    r"""Set the maximum number of invocations of the operation.

    Args:
        n: The ceiling. ``0`` means unlimited: the loop then stops only on
            success, an unrecoverable or rejected error, a per-error
            ceiling, or cancellation.
    """
    return _set(attempts=n)


def until_succeeded() -> Option:
    r"""Retry without a global attempt ceiling."""
    return _set(attempts=0)


def attempts_for_error(n: int, kind: Any) -> Option:
    r"""Add an attempt ceiling for the errors matching ``kind``.

    The rules accumulate and are evaluated in registration order; only
    the first matching rule counts a failure. The matched ceiling
    applies in addition to the global one, and whichever is reached
    first stops the loop.

    Args:
        n: The maximum number of failed attempts matching ``kind``.
            ``0`` stops the loop on the first matching error.
        kind: An exception class, a tuple of classes, an exception
            instance, or a predicate.
    """

    def option(config: RetryConfig) -> RetryConfig:
        limits = (*config.error_limits, ErrorLimit(kind=kind, attempts=n))
        return replace(config, error_limits=limits)

    return option


def delay(seconds: float) -> Option:
    r"""Set the base delay in seconds."""
    return _set(delay=seconds)


def max_delay(seconds: float) -> Option:
    r"""Set the maximum delay in seconds between two attempts. ``0``
    disables the cap."""
    return _set(max_delay=seconds)


def max_jitter(seconds: float) -> Option:
    r"""Set the upper bound in seconds of the additive random delay."""
    return _set(max_jitter=seconds)


def min_jitter(seconds: float) -> Option:
    r"""Set the lower bound in seconds of the randomized backoff."""
    return _set(min_jitter=seconds)


def delay_strategy(strategy: BaseDelayStrategy | DelayFunc | str | None) -> Option:
    r"""Select the delay strategy.

    Args:
        strategy: A strategy instance, a strategy name (see
            ``get_delay_strategy``), or a function
            ``(attempt, config, error) -> float`` used as a custom
            strategy.

    Example:
        ```pycon
        >>> from retryloop import options as opt
        >>> from retryloop.core import build_config
        >>> build_config(opt.delay_strategy("fixed")).delay_strategy
        FixedDelay()

        ```
    """
    selected: Any = strategy
    if isinstance(strategy, str):
        try:
            selected = get_delay_strategy(strategy)
        except ValueError:
            selected = strategy
    elif strategy is not None and not isinstance(strategy, BaseDelayStrategy) and callable(strategy):
        selected = CustomDelay(strategy)
    return _set(delay_strategy=selected)


def custom_delay(func: DelayFunc | None) -> Option:
    r"""Select a custom delay function ``(attempt, config, error) ->
    float``.

    The result is still clamped to ``[0, max_delay]``. A missing function
    is reported when the configuration is built.
    """
    return _set(delay_strategy=CustomDelay(func))


def retry_if(predicate: Callable[[BaseException], bool] | None) -> Option:
    r"""Set the predicate deciding if an error is retryable.

    An error rejected by the predicate stops the loop immediately. The
    predicate receives the original error (unwrapped from
    ``Unrecoverable``); unrecoverable errors always stop the loop
    regardless of the predicate.
    """
    return _set(retry_if=predicate)


def on_retry(callback: Callable[[RetryInfo], Any] | None) -> Option:
    r"""Set the callback invoked with a ``RetryInfo`` before each wait.

    The callback is observational: its exceptions are logged and never
    abort the loop.
    """
    return _set(on_retry=callback)


def cancel_token(token: CancelToken | None) -> Option:
    r"""Set the cancellation token checked before each attempt and
    during each wait."""
    return _set(cancel_token=token)


def wrap_cancel_error(flag: bool = True) -> Option:
    r"""On cancellation, raise the cancellation error combined with the
    last operation error."""
    return _set(wrap_cancel_error=flag)


def last_error_only(flag: bool = True) -> Option:
    r"""Keep no error history and raise the last attempt's error as is."""
    return _set(last_error_only=flag)
