r"""Callback data structures for observability.

The ``on_retry`` callback lets callers hook into the retry loop for
logging, metrics or alerting. It is invoked after each failed attempt
that will be retried, before the wait.

Example:
    ```pycon
    >>> from retryloop import options as opt, retry
    >>> from retryloop.callbacks import RetryInfo
    >>> def log_retry(info: RetryInfo) -> None:
    ...     print(f"Attempt {info.attempt} failed: {info.error!r}")
    ...
    >>> retry(lambda: 1, opt.on_retry(log_retry))
    1

    ```
"""

from __future__ import annotations

__all__ = ["RetryInfo"]

from dataclasses import dataclass


@dataclass(frozen=True)
class RetryInfo:
    """Information passed to the on_retry callback.

    Attributes:
        attempt: The index of the attempt that failed (1-indexed).
        error: The error raised by the failed attempt, unwrapped.
        wait_time: The delay in seconds before the next attempt.
        max_attempts: The global attempt ceiling (``0`` means unlimited).
    """

    attempt: int
    error: BaseException
    wait_time: float
    max_attempts: int
