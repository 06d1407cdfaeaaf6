r"""Cooperative cancellation for the retry loop.

A ``CancelToken`` is consulted by the retry loop before each attempt
and races against each wait between attempts. Cancelling the token from
another thread wakes a sleeping loop immediately, and the token can
also carry a deadline.

Example:
    ```pycon
    >>> from retryloop.cancel import CancelToken
    >>> token = CancelToken()
    >>> token.cancelled
    False
    >>> token.cancel("shutting down")
    >>> token.cancelled
    True
    >>> token.error()
    OperationCancelled('operation cancelled: shutting down')

    ```
"""

from __future__ import annotations

__all__ = ["CancelToken"]

import logging
import threading
import time
from typing import TYPE_CHECKING

from retryloop.exceptions import DeadlineExceeded, OperationCancelled

if TYPE_CHECKING:
    from collections.abc import Callable

logger: logging.Logger = logging.getLogger(__name__)


class CancelToken:
    r"""Thread-safe cancellation handle with an optional deadline.

    The token may be shared between concurrent retry loops. It never
    holds per-loop state.

    Args:
        timeout: Optional number of seconds after which the token is
            considered cancelled with a ``DeadlineExceeded`` error.
            Must be >= 0 if provided.

    Raises:
        ValueError: If ``timeout`` is negative.

    Example:
        ```pycon
        >>> from retryloop.cancel import CancelToken
        >>> token = CancelToken(timeout=0.0)
        >>> token.cancelled
        True
        >>> token.error()
        DeadlineExceeded('deadline exceeded')

        ```
    """

    def __init__(self, timeout: float | None = None) -> None:
        if timeout is not None and timeout < 0:
            msg = f"timeout must be >= 0, got {timeout}"
            raise ValueError(msg)
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._reason: BaseException | str | None = None
        self._callbacks: list[Callable[[], None]] = []
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(cancelled={self.cancelled})"

    @property
    def cancelled(self) -> bool:
        """Indicate if the token was cancelled or its deadline passed."""
        return self._event.is_set() or self._deadline_passed()

    @property
    def deadline(self) -> float | None:
        """The deadline as a ``time.monotonic`` timestamp, if any."""
        return self._deadline

    def cancel(self, reason: BaseException | str | None = None) -> None:
        r"""Cancel the token.

        Only the first cancellation is taken into account; later calls
        are no-ops.

        Args:
            reason: Optional cancellation reason.
        """
        with self._lock:
            if self._event.is_set():
                return
            self._reason = reason
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
        logger.debug(f"Cancel token cancelled (reason={reason!r})")
        for callback in callbacks:
            callback()

    def error(self) -> OperationCancelled | None:
        r"""Return a new cancellation error, or ``None`` if the token is
        still active.

        An explicit cancellation takes precedence over an expired
        deadline.
        """
        if self._event.is_set():
            return OperationCancelled(self._reason)
        if self._deadline_passed():
            return DeadlineExceeded()
        return None

    def remaining(self, seconds: float) -> float:
        r"""Bound a wait duration by the time left before the deadline.

        Args:
            seconds: The requested wait duration.

        Returns:
            The duration to wait, never negative.
        """
        if self._deadline is None:
            return max(0.0, seconds)
        return max(0.0, min(seconds, self._deadline - time.monotonic()))

    def wait(self, seconds: float) -> bool:
        r"""Wait for ``seconds`` unless the token is cancelled first.

        The wait returns as soon as the token is cancelled, without
        polling. It is bounded by ``threading.TIMEOUT_MAX``.

        Args:
            seconds: The wait duration.

        Returns:
            ``True`` if the token was cancelled when the wait ended,
            otherwise ``False``.
        """
        if self._event.wait(min(self.remaining(seconds), threading.TIMEOUT_MAX)):
            return True
        return self.cancelled

    def add_callback(self, callback: Callable[[], None]) -> Callable[[], None]:
        r"""Register a function called once when the token is cancelled.

        The function is called immediately if the token is already
        cancelled. Deadlines do not trigger callbacks; waiters bound
        their wait with ``remaining`` instead.

        Args:
            callback: A function without arguments. It may be called from
                the thread that cancels the token.

        Returns:
            A function that unregisters the callback.
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return lambda: self._remove_callback(callback)
        callback()
        return lambda: None

    def _remove_callback(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def _deadline_passed(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline
