r"""retryloop - Retry execution engine with backoff, jitter and
cancellation.

This package repeatedly invokes a fallible operation until it succeeds,
an attempt budget is exhausted, the operation marks its error as
unrecoverable, or a cancellation token fires. It is meant to be
embedded in larger services (HTTP clients, database drivers...) so that
they do not re-implement backoff, jitter, cancellation races or error
aggregation.

Key Features:
    - Global and per-error attempt ceilings
    - Fixed, linear, exponential and jittered delay strategies, and custom ones
    - Unrecoverable errors and custom retry predicates
    - Bounded error history exposed by the aggregate ``RetryError``
    - Cancellation tokens with deadlines, raced against every wait
    - Full async support
    - Helpers for httpx-based operations (``retryloop.http``)

Example:
    ```pycon
    >>> from retryloop import options as opt, retry, unrecoverable
    >>> attempts = []
    >>> def operation():
    ...     attempts.append(1)
    ...     if len(attempts) < 3:
    ...         raise TimeoutError("slow dependency")
    ...     return "ok"
    ...
    >>> retry(operation, opt.attempts(3), opt.delay(0.0), opt.max_jitter(0.0))
    'ok'

    ```
"""

from __future__ import annotations

__all__ = [
    "CancelToken",
    "CancelledWithError",
    "DeadlineExceeded",
    "Decision",
    "OperationCancelled",
    "Retrier",
    "RetryConfig",
    "RetryConfigError",
    "RetryError",
    "RetryInfo",
    "Unrecoverable",
    "__version__",
    "build_config",
    "is_recoverable",
    "options",
    "retry",
    "retry_async",
    "retryable",
    "unrecoverable",
]

from importlib.metadata import PackageNotFoundError, version

from retryloop import options
from retryloop.callbacks import RetryInfo
from retryloop.cancel import CancelToken
from retryloop.core.config import RetryConfig, build_config
from retryloop.decision import Decision
from retryloop.exceptions import (
    CancelledWithError,
    DeadlineExceeded,
    OperationCancelled,
    RetryConfigError,
    RetryError,
    Unrecoverable,
    is_recoverable,
    unrecoverable,
)
from retryloop.runner import Retrier, retry, retry_async, retryable

try:
    __version__ = version(__name__)
except PackageNotFoundError:  # pragma: no cover
    # Package is not installed, fallback if needed
    __version__ = "0.0.0"
