r"""Callback manager for the retry lifecycle.

This module provides the CallbackManager class that invokes the
user-defined on_retry callback without letting its failures escape.
"""

from __future__ import annotations

__all__ = ["CallbackManager"]

import logging
from typing import TYPE_CHECKING, Any

from retryloop.callbacks import RetryInfo

if TYPE_CHECKING:
    from collections.abc import Callable

logger: logging.Logger = logging.getLogger(__name__)


class CallbackManager:
    """Manages callback invocations during the retry lifecycle.

    Callbacks are observational: an exception raised by a callback is
    logged at WARNING level and never aborts the retry loop.

    Attributes:
        on_retry_callback: Optional callback invoked before each wait.
    """

    def __init__(self, on_retry: Callable[[RetryInfo], Any] | None = None) -> None:
        self.on_retry_callback = on_retry

    def on_retry(self, attempt: int, error: BaseException, wait_time: float, max_attempts: int) -> None:
        """Invoke the on_retry callback.

        Args:
            attempt: The index of the failed attempt (1-indexed).
            error: The error raised by the failed attempt.
            wait_time: The delay before the next attempt.
            max_attempts: The global attempt ceiling.
        """
        if self.on_retry_callback is None:
            return
        info = RetryInfo(
            attempt=attempt,
            error=error,
            wait_time=wait_time,
            max_attempts=max_attempts,
        )
        try:
            self.on_retry_callback(info)
        except Exception:
            logger.warning(f"on_retry callback failed on attempt {attempt}", exc_info=True)
