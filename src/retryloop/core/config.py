r"""Configuration dataclass and defaults for the retry loop.

This module provides the default values of the retry policy and the
immutable ``RetryConfig`` record consumed by the retry executors. A
configuration is usually assembled with ``build_config`` from a
sequence of options (see ``retryloop.options``).
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_ATTEMPTS",
    "DEFAULT_DELAY",
    "DEFAULT_MAX_DELAY",
    "DEFAULT_MAX_JITTER",
    "DEFAULT_MIN_JITTER",
    "ErrorLimit",
    "RetryConfig",
    "build_config",
]

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from retryloop.backoff import default_delay_strategy
from retryloop.core.validation import validate_config
from retryloop.exceptions import RetryConfigError, error_matches

if TYPE_CHECKING:
    from collections.abc import Callable

    from retryloop.backoff import BaseDelayStrategy
    from retryloop.callbacks import RetryInfo
    from retryloop.cancel import CancelToken

    Option = Callable[["RetryConfig"], "RetryConfig"]


# Default maximum number of attempts, including the first one
# 0 means unlimited
DEFAULT_ATTEMPTS = 10

# Default base delay in seconds
# With exponential backoff: 1st retry waits 0.1s, 2nd 0.2s, 3rd 0.4s...
DEFAULT_DELAY = 0.1

# Default maximum delay in seconds between two attempts
# 0 means no cap
DEFAULT_MAX_DELAY = 0.0

# Default upper bound in seconds of the additive random jitter
DEFAULT_MAX_JITTER = 0.1

# Default lower bound in seconds of the randomized backoff
DEFAULT_MIN_JITTER = 0.0


@dataclass(frozen=True)
class ErrorLimit:
    """Attempt ceiling for the errors matching a given kind.

    Args:
        kind: An exception class, a tuple of classes, an exception
            instance, or a predicate taking an exception and returning a
            bool.
        attempts: The maximum number of failed attempts matching
            ``kind``. ``0`` stops the loop on the first match.

    Example:
        ```pycon
        >>> from retryloop.core.config import ErrorLimit
        >>> limit = ErrorLimit(kind=TimeoutError, attempts=2)
        >>> limit.matches(TimeoutError())
        True
        >>> limit.matches(KeyError())
        False

        ```
    """

    kind: Any
    attempts: int

    def matches(self, error: BaseException) -> bool:
        """Indicate if an error, or one of its causes, matches the
        kind."""
        return error_matches(error, self.kind)


@dataclass(frozen=True)
class RetryConfig:
    """Immutable configuration of a retry loop.

    Args:
        attempts: Maximum number of invocations of the operation. ``0``
            means unlimited. Must be >= 0.
        error_limits: Per-error attempt ceilings, evaluated in
            registration order; the first matching rule applies.
        delay: Base delay in seconds. Must be >= 0.
        max_delay: Maximum delay in seconds between two attempts. ``0``
            means no cap. Must be >= ``delay`` if set.
        max_jitter: Upper bound in seconds of ``RandomDelay``. Must be >= 0.
        min_jitter: Lower bound in seconds of ``RandomJitterBackoff``.
            Must be >= 0.
        delay_strategy: Strategy computing the delay between attempts.
        retry_if: Optional predicate receiving the error of a failed
            attempt; returning ``False`` stops the loop.
        on_retry: Optional callback invoked with a ``RetryInfo`` before
            each wait. Its exceptions are logged and ignored.
        cancel_token: Optional cancellation token checked before each
            attempt and raced against each wait.
        wrap_cancel_error: If ``True``, a cancellation raises
            ``CancelledWithError`` carrying the last operation error.
        last_error_only: If ``True``, no history is kept and the error of
            the final attempt is raised as is.

    Example:
        ```pycon
        >>> from retryloop.core.config import RetryConfig
        >>> config = RetryConfig()
        >>> config.attempts
        10
        >>> config = RetryConfig(attempts=3, delay=0.5)
        >>> config.delay
        0.5

        ```
    """

    attempts: int = DEFAULT_ATTEMPTS
    error_limits: tuple[ErrorLimit, ...] = ()
    delay: float = DEFAULT_DELAY
    max_delay: float = DEFAULT_MAX_DELAY
    max_jitter: float = DEFAULT_MAX_JITTER
    min_jitter: float = DEFAULT_MIN_JITTER
    delay_strategy: BaseDelayStrategy | None = field(default_factory=default_delay_strategy)
    retry_if: Callable[[BaseException], bool] | None = None
    on_retry: Callable[[RetryInfo], Any] | None = None
    cancel_token: CancelToken | None = None
    wrap_cancel_error: bool = False
    last_error_only: bool = False

    def validate(self) -> RetryConfig:
        """Validate the configuration.

        Returns:
            The configuration itself, to allow chaining.

        Raises:
            RetryConfigError: If any parameter fails validation.
        """
        validate_config(self)
        return self


def build_config(*options: Option, base: RetryConfig | None = None) -> RetryConfig:
    r"""Build a validated configuration from a sequence of options.

    Options are applied left to right, so later options override earlier
    ones, except ``attempts_for_error`` whose rules accumulate.

    Args:
        *options: The options, i.e. functions mapping a configuration to
            a new configuration.
        base: Optional configuration the options are applied to.
            Defaults to ``RetryConfig()``.

    Returns:
        The validated configuration.

    Raises:
        RetryConfigError: If an option is not callable or the resulting
            configuration is invalid.

    Example:
        ```pycon
        >>> from retryloop import options as opt
        >>> from retryloop.core.config import build_config
        >>> config = build_config(opt.attempts(3), opt.delay(1.0), opt.attempts(5))
        >>> config.attempts
        5

        ```
    """
    config = base if base is not None else RetryConfig()
    for option in options:
        if not callable(option):
            msg = f"Invalid retry option {option!r}: options must be callable"
            raise RetryConfigError(msg)
        config = option(config)
        if not isinstance(config, RetryConfig):
            msg = f"Retry option {option!r} returned {config!r} instead of a RetryConfig"
            raise RetryConfigError(msg)
    return config.validate()
