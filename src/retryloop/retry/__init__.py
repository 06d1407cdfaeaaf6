r"""Retry package implementing the retry loop by composition.

This package provides the retry executors and the components they are
composed of.

Public API:
    - RetryExecutor: Synchronous retry executor
    - AsyncRetryExecutor: Asynchronous retry executor
    - ErrorClassifier: Logic for deciding whether an error stops the loop
    - AttemptBudget: Global and per-error attempt ceilings
    - ErrorHistory: Bounded record of the errors raised by the operation
    - RetryStrategy: Delay computation between attempts
    - CallbackManager: Manager for callback invocations
"""

from __future__ import annotations

__all__ = [
    "AsyncRetryExecutor",
    "AttemptBudget",
    "CallbackManager",
    "Decision",
    "ErrorClassifier",
    "ErrorHistory",
    "RetryExecutor",
    "RetryStrategy",
]

from retryloop.decision import Decision
from retryloop.retry.budget import AttemptBudget
from retryloop.retry.decider import ErrorClassifier
from retryloop.retry.executor import RetryExecutor
from retryloop.retry.executor_async import AsyncRetryExecutor
from retryloop.retry.history import ErrorHistory
from retryloop.retry.manager import CallbackManager
from retryloop.retry.strategy import RetryStrategy
