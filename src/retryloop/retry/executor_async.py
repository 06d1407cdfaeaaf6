r"""Asynchronous retry executor.

This module provides the AsyncRetryExecutor class, the coroutine
counterpart of RetryExecutor. Waits between attempts use the event loop
and resolve as soon as the cancellation token fires.
"""

from __future__ import annotations

__all__ = ["AsyncRetryExecutor"]

import asyncio
import inspect
import logging
from contextlib import suppress
from typing import TYPE_CHECKING, Any

from retryloop.decision import Decision
from retryloop.exceptions import RetryConfigError, unwrap
from retryloop.retry.budget import AttemptBudget
from retryloop.retry.decider import ErrorClassifier
from retryloop.retry.executor_core import (
    create_cancel_error,
    create_final_error,
    operation_kwargs,
)
from retryloop.retry.history import ErrorHistory
from retryloop.retry.manager import CallbackManager
from retryloop.retry.strategy import RetryStrategy

if TYPE_CHECKING:
    from collections.abc import Callable

    from retryloop.cancel import CancelToken
    from retryloop.core.config import RetryConfig

logger: logging.Logger = logging.getLogger(__name__)


class AsyncRetryExecutor:
    """Executes an async operation with automatic retry logic.

    The retry loop is the same as RetryExecutor's. The operation may be
    a coroutine function or any callable returning an awaitable (or a
    plain value). Callbacks are invoked synchronously and should be fast.

    Cancelling the task running ``execute`` propagates
    ``asyncio.CancelledError`` unchanged; it is never retried.

    Args:
        config: The retry configuration. It is validated here.

    Raises:
        RetryConfigError: If the configuration is invalid.

    Example:
        ```pycon
        >>> import asyncio
        >>> from retryloop.core.config import RetryConfig
        >>> from retryloop.retry import AsyncRetryExecutor
        >>> async def fetch():
        ...     return 42
        ...
        >>> executor = AsyncRetryExecutor(RetryConfig(attempts=3))
        >>> asyncio.run(executor.execute(fetch))
        42

        ```
    """

    def __init__(self, config: RetryConfig) -> None:
        self.config = config.validate()
        self.strategy: RetryStrategy = RetryStrategy(config)
        self.classifier: ErrorClassifier = ErrorClassifier(config.retry_if)
        self.callbacks: CallbackManager = CallbackManager(config.on_retry)

    async def execute(self, operation: Callable[..., Any]) -> Any:
        """Invoke the operation until it succeeds or the loop stops.

        Args:
            operation: The async operation. If it declares a ``token``
                parameter, it receives the cancellation token.

        Returns:
            The result of the first successful attempt.

        Raises:
            RetryConfigError: If the operation is not callable.
            RetryError: If the loop stops without success.
            OperationCancelled: If the cancellation token fires.
            Exception: The last error itself if ``last_error_only`` is set.
        """
        if not callable(operation):
            msg = f"operation must be callable, got {operation!r}"
            raise RetryConfigError(msg)

        config = self.config
        kwargs: dict[str, Any] = operation_kwargs(operation, config.cancel_token)
        history = ErrorHistory(last_error_only=config.last_error_only)
        budget = AttemptBudget(config.attempts, config.error_limits)
        attempt = 0

        while True:
            self._check_cancelled(history)

            attempt += 1
            failure: BaseException | None = None
            try:
                result = operation(**kwargs)
                if inspect.isawaitable(result):
                    result = await result
            except Exception as exc:
                error = unwrap(exc)
                history.add(error)
                logger.debug(f"Attempt {attempt} failed: {error!r}")

                decision = self.classifier.classify(exc)
                if decision is Decision.CONTINUE and not budget.permits(attempt, error):
                    decision = Decision.STOP_BUDGET
                if decision.stops:
                    if config.last_error_only and exc is error:
                        raise
                    failure = create_final_error(history, decision, attempt, config.last_error_only)
            else:
                return result
            if failure is not None:
                raise failure

            sleep_time = self.strategy.calculate_delay(attempt, error)
            self.callbacks.on_retry(attempt, error, sleep_time, config.attempts)
            if await self._wait(sleep_time):
                self._check_cancelled(history)

    def _check_cancelled(self, history: ErrorHistory) -> None:
        token = self.config.cancel_token
        if token is None:
            return
        cancellation = token.error()
        if cancellation is not None:
            raise create_cancel_error(cancellation, history, self.config.wrap_cancel_error)

    async def _wait(self, sleep_time: float) -> bool:
        """Sleep before the next attempt without blocking the event loop.

        Returns:
            ``True`` if the cancellation token fired during the wait.
        """
        token = self.config.cancel_token
        if token is None:
            await asyncio.sleep(sleep_time)
            return False
        return await _wait_token(token, sleep_time)


async def _wait_token(token: CancelToken, sleep_time: float) -> bool:
    """Race a timed wait against the cancellation of ``token``."""
    if token.cancelled:
        return True
    loop = asyncio.get_running_loop()
    woken: asyncio.Future[None] = loop.create_future()

    def _resolve() -> None:
        if not woken.done():
            woken.set_result(None)

    def _wake() -> None:
        # The token may fire after this wait ended and the loop closed.
        if loop.is_closed():
            return
        with suppress(RuntimeError):
            loop.call_soon_threadsafe(_resolve)

    remove = token.add_callback(_wake)
    try:
        await asyncio.wait_for(woken, timeout=token.remaining(sleep_time))
    except asyncio.TimeoutError:
        pass
    finally:
        remove()
    return token.cancelled
