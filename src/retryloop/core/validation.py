r"""Parameter validation for the retry configuration.

This module provides the validation functions run before the first
attempt, so that an invalid configuration is reported as a
``RetryConfigError`` and never reaches the retry loop.
"""

from __future__ import annotations

__all__ = ["validate_attempts", "validate_config", "validate_delays", "validate_error_kind"]

from typing import TYPE_CHECKING, Any

from retryloop.backoff import BaseDelayStrategy, CustomDelay
from retryloop.cancel import CancelToken
from retryloop.exceptions import RetryConfigError

if TYPE_CHECKING:
    from retryloop.core.config import RetryConfig


def validate_attempts(attempts: int, name: str = "attempts") -> None:
    """Validate an attempt ceiling.

    Args:
        attempts: The ceiling. Must be an int >= 0.
        name: The parameter name used in the error message.

    Raises:
        RetryConfigError: If the ceiling is not an int or is negative.

    Example:
        ```pycon
        >>> from retryloop.core.validation import validate_attempts
        >>> validate_attempts(3)
        >>> validate_attempts(0)
        >>> validate_attempts(-1)  # doctest: +SKIP
        Traceback (most recent call last):
        ...
        retryloop.exceptions.RetryConfigError: attempts must be >= 0, got -1

        ```
    """
    if isinstance(attempts, bool) or not isinstance(attempts, int):
        msg = f"{name} must be an int, got {attempts!r}"
        raise RetryConfigError(msg)
    if attempts < 0:
        msg = f"{name} must be >= 0, got {attempts}"
        raise RetryConfigError(msg)


def validate_error_kind(kind: Any) -> None:
    """Validate the error kind of a per-error attempt ceiling.

    Args:
        kind: An exception class, a non-empty tuple of exception
            classes, an exception instance, or a predicate taking an
            exception and returning a bool.

    Raises:
        RetryConfigError: If the kind is none of these.

    Example:
        ```pycon
        >>> from retryloop.core.validation import validate_error_kind
        >>> validate_error_kind(TimeoutError)
        >>> validate_error_kind((KeyError, IndexError))
        >>> validate_error_kind(lambda exc: "quota" in str(exc))

        ```
    """
    if isinstance(kind, type):
        valid = issubclass(kind, BaseException)
    elif isinstance(kind, tuple):
        valid = bool(kind) and all(
            isinstance(item, type) and issubclass(item, BaseException) for item in kind
        )
    else:
        valid = isinstance(kind, BaseException) or callable(kind)
    if not valid:
        msg = (
            "error kind must be an exception class, a tuple of exception classes, "
            f"an exception instance or a predicate, got {kind!r}"
        )
        raise RetryConfigError(msg)


def validate_delays(
    delay: float,
    max_delay: float = 0.0,
    max_jitter: float = 0.0,
    min_jitter: float = 0.0,
) -> None:
    """Validate the delay parameters.

    Args:
        delay: Base delay in seconds. Must be >= 0.
        max_delay: Maximum delay in seconds. Must be >= 0, and >= delay
            unless it is 0 (no cap).
        max_jitter: Upper bound of the random delay. Must be >= 0.
        min_jitter: Lower bound of the randomized backoff. Must be >= 0.

    Raises:
        RetryConfigError: If any parameter is negative or if max_delay is
            set below delay.

    Example:
        ```pycon
        >>> from retryloop.core.validation import validate_delays
        >>> validate_delays(delay=0.1, max_delay=5.0)
        >>> validate_delays(delay=1.0, max_delay=0.0)

        ```
    """
    for name, value in (
        ("delay", delay),
        ("max_delay", max_delay),
        ("max_jitter", max_jitter),
        ("min_jitter", min_jitter),
    ):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            msg = f"{name} must be a number, got {value!r}"
            raise RetryConfigError(msg)
        if value < 0:
            msg = f"{name} must be >= 0, got {value}"
            raise RetryConfigError(msg)
    if max_delay != 0 and max_delay < delay:
        msg = f"max_delay must be >= delay ({delay}) or 0, got {max_delay}"
        raise RetryConfigError(msg)


def validate_config(config: RetryConfig) -> None:
    """Validate a retry configuration.

    Args:
        config: The configuration to validate.

    Raises:
        RetryConfigError: If any parameter fails validation.
    """
    validate_attempts(config.attempts)
    for limit in config.error_limits:
        validate_error_kind(limit.kind)
        validate_attempts(limit.attempts, name=f"attempts for {limit.kind!r}")
    validate_delays(
        delay=config.delay,
        max_delay=config.max_delay,
        max_jitter=config.max_jitter,
        min_jitter=config.min_jitter,
    )

    strategy = config.delay_strategy
    if strategy is None:
        msg = "delay_strategy is required"
        raise RetryConfigError(msg)
    if not isinstance(strategy, BaseDelayStrategy):
        msg = f"delay_strategy must be a BaseDelayStrategy, got {strategy!r}"
        raise RetryConfigError(msg)
    if isinstance(strategy, CustomDelay) and not callable(strategy.func):
        msg = f"custom delay function must be callable, got {strategy.func!r}"
        raise RetryConfigError(msg)

    if config.retry_if is not None and not callable(config.retry_if):
        msg = f"retry_if must be callable, got {config.retry_if!r}"
        raise RetryConfigError(msg)
    if config.on_retry is not None and not callable(config.on_retry):
        msg = f"on_retry must be callable, got {config.on_retry!r}"
        raise RetryConfigError(msg)
    if config.cancel_token is not None and not isinstance(config.cancel_token, CancelToken):
        msg = f"cancel_token must be a CancelToken, got {config.cancel_token!r}"
        raise RetryConfigError(msg)
