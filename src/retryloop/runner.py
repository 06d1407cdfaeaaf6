r"""Entry points of the retry loop.

This module provides the ``retry`` and ``retry_async`` functions, the
``Retrier`` class holding base options shared by many calls, and the
``retryable`` decorator.

Example:
    ```pycon
    >>> from retryloop import Retrier, options as opt
    >>> retrier = Retrier(opt.attempts(3), opt.delay(0.0), opt.max_jitter(0.0))
    >>> retrier.do(lambda: "done")
    'done'

    ```
"""

from __future__ import annotations

__all__ = ["Retrier", "retry", "retry_async", "retryable"]

import functools
import inspect
import logging
from typing import TYPE_CHECKING, Any, TypeVar

from retryloop.core.config import RetryConfig, build_config
from retryloop.retry import AsyncRetryExecutor, RetryExecutor

if TYPE_CHECKING:
    from collections.abc import Callable

    from retryloop.core.config import Option

T = TypeVar("T")

logger: logging.Logger = logging.getLogger(__name__)


def retry(operation: Callable[..., T], *options: Option) -> T:
    r"""Invoke an operation until it succeeds or the retry loop stops.

    Args:
        operation: The fallible operation. It is invoked without
            arguments, or with ``token=`` if it declares a ``token``
            parameter.
        *options: The options configuring the loop, applied left to
            right (see ``retryloop.options``).

    Returns:
        The result of the first successful attempt.

    Raises:
        RetryConfigError: If an option is invalid or the operation is
            not callable. Raised before any attempt.
        RetryError: If the attempt budget is exhausted, the error is
            unrecoverable, or ``retry_if`` rejects it.
        OperationCancelled: If the cancellation token fires.

    Example:
        ```pycon
        >>> from retryloop import RetryError, options as opt, retry
        >>> def always_fail():
        ...     raise ConnectionError("unreachable")
        ...
        >>> try:
        ...     retry(always_fail, opt.attempts(2), opt.delay(0.0), opt.max_jitter(0.0))
        ... except RetryError as exc:
        ...     print(exc)
        ...
        All 2 attempts fail:
        #1: ConnectionError: unreachable
        #2: ConnectionError: unreachable

        ```
    """
    return RetryExecutor(build_config(*options)).execute(operation)


async def retry_async(operation: Callable[..., Any], *options: Option) -> Any:
    r"""Await an async operation until it succeeds or the retry loop
    stops.

    Args:
        operation: The async operation.
        *options: The options configuring the loop.

    Returns:
        The result of the first successful attempt.

    Raises:
        RetryConfigError: If an option is invalid or the operation is
            not callable.
        RetryError: If the loop stops without success.
        OperationCancelled: If the cancellation token fires.
    """
    return await AsyncRetryExecutor(build_config(*options)).execute(operation)


class Retrier:
    r"""Reusable retry policy built from base options.

    The base options are applied first, then the options given to each
    call, so a call can override the base policy. Every call runs its
    own loop with its own history and budget; a ``Retrier`` can be
    shared between threads and tasks.

    Args:
        *options: The base options.

    Raises:
        RetryConfigError: If the base options are invalid.

    Example:
        ```pycon
        >>> from retryloop import Retrier, options as opt
        >>> retrier = Retrier(opt.attempts(5))
        >>> retrier.config.attempts
        5
        >>> retrier.do(lambda: 1, opt.attempts(1))
        1

        ```
    """

    def __init__(self, *options: Option) -> None:
        self.options = options
        self.config: RetryConfig = build_config(*options)

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(config={self.config!r})"

    def do(self, operation: Callable[..., T], *options: Option) -> T:
        """Invoke an operation with the base options and overrides.

        Args:
            operation: The fallible operation.
            *options: Options overriding the base options for this call.

        Returns:
            The result of the first successful attempt.
        """
        return RetryExecutor(self._config(options)).execute(operation)

    async def do_async(self, operation: Callable[..., Any], *options: Option) -> Any:
        """Await an async operation with the base options and overrides.

        Args:
            operation: The async operation.
            *options: Options overriding the base options for this call.

        Returns:
            The result of the first successful attempt.
        """
        return await AsyncRetryExecutor(self._config(options)).execute(operation)

    def __call__(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Decorate a function so that each call is retried."""
        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                return await self.do_async(functools.partial(func, *args, **kwargs))

            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            return self.do(functools.partial(func, *args, **kwargs))

        return wrapper

    def _config(self, options: tuple[Option, ...]) -> RetryConfig:
        if not options:
            return self.config
        return build_config(*options, base=self.config)


def retryable(*options: Option) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    r"""Decorator retrying each call of a sync or async function.

    Args:
        *options: The options configuring the loop.

    Returns:
        The decorator.

    Example:
        ```pycon
        >>> from retryloop import options as opt, retryable
        >>> @retryable(opt.attempts(3), opt.delay(0.0), opt.max_jitter(0.0))
        ... def add(a, b):
        ...     return a + b
        ...
        >>> add(1, 2)
        3

        ```
    """
    return Retrier(*options)
