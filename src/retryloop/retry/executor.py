r"""Synchronous retry executor.

This module provides the RetryExecutor class that invokes an operation
until it succeeds, the attempt budget is exhausted, the error is not
retryable, or the cancellation token fires.
"""

from __future__ import annotations

__all__ = ["RetryExecutor"]

import logging
import time
from typing import TYPE_CHECKING, Any, TypeVar

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

    from retryloop.core.config import RetryConfig

T = TypeVar("T")

logger: logging.Logger = logging.getLogger(__name__)


class RetryExecutor:
    """Executes an operation with automatic retry logic.

    The executor owns the retry loop and delegates to:

    - ErrorClassifier: decides whether an error may be retried
    - AttemptBudget: enforces the global and per-error ceilings
    - RetryStrategy: computes the delay between attempts
    - CallbackManager: invokes the on_retry callback

    The executor itself holds only the immutable configuration; each
    call to ``execute`` creates its own history and budget, so one
    executor can be shared by concurrent callers.

    Args:
        config: The retry configuration. It is validated here.

    Raises:
        RetryConfigError: If the configuration is invalid.

    Example:
        ```pycon
        >>> from retryloop.core.config import RetryConfig
        >>> from retryloop.retry import RetryExecutor
        >>> executor = RetryExecutor(RetryConfig(attempts=3, delay=0.0, max_jitter=0.0))
        >>> executor.execute(lambda: 42)
        42

        ```
    """

    def __init__(self, config: RetryConfig) -> None:
        self.config = config.validate()
        self.strategy: RetryStrategy = RetryStrategy(config)
        self.classifier: ErrorClassifier = ErrorClassifier(config.retry_if)
        self.callbacks: CallbackManager = CallbackManager(config.on_retry)

    def execute(self, operation: Callable[..., T]) -> T:
        """Invoke the operation until it succeeds or the loop stops.

        Cancellation is checked before each attempt and races against
        each wait. It never interrupts an attempt in progress.

        Args:
            operation: The operation. If it declares a ``token``
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
        token = config.cancel_token
        kwargs: dict[str, Any] = operation_kwargs(operation, token)
        history = ErrorHistory(last_error_only=config.last_error_only)
        budget = AttemptBudget(config.attempts, config.error_limits)
        attempt = 0

        while True:
            self._check_cancelled(history)

            attempt += 1
            failure: BaseException | None = None
            try:
                return operation(**kwargs)
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
            if failure is not None:
                raise failure

            sleep_time = self.strategy.calculate_delay(attempt, error)
            self.callbacks.on_retry(attempt, error, sleep_time, config.attempts)
            if self._wait(sleep_time):
                self._check_cancelled(history)

    def _check_cancelled(self, history: ErrorHistory) -> None:
        token = self.config.cancel_token
        if token is None:
            return
        cancellation = token.error()
        if cancellation is not None:
            raise create_cancel_error(cancellation, history, self.config.wrap_cancel_error)

    def _wait(self, sleep_time: float) -> bool:
        """Sleep before the next attempt.

        Returns:
            ``True`` if the cancellation token fired during the wait.
        """
        token = self.config.cancel_token
        if token is None:
            if sleep_time > 0:
                time.sleep(sleep_time)
            return False
        return token.wait(sleep_time)
