r"""Shared core logic for retry executors.

This module provides helper functions used by both the synchronous and
asynchronous retry executors to call the operation, build the final
error, and build the cancellation error.
"""

from __future__ import annotations

__all__ = [
    "accepts_token",
    "create_cancel_error",
    "create_final_error",
    "operation_kwargs",
]

import functools
import inspect
import logging
from typing import TYPE_CHECKING, Any

from retryloop.cancel import CancelToken
from retryloop.exceptions import CancelledWithError, RetryError

if TYPE_CHECKING:
    from collections.abc import Callable

    from retryloop.decision import Decision
    from retryloop.exceptions import OperationCancelled
    from retryloop.retry.history import ErrorHistory

logger: logging.Logger = logging.getLogger(__name__)

TOKEN_PARAMETER = "token"


def accepts_token(operation: Callable[..., Any]) -> bool:
    """Indicate if an operation declares a ``token`` parameter.

    Args:
        operation: The operation.

    Returns:
        ``True`` if the operation signature has an explicit parameter
        named ``token``.

    Example:
        ```pycon
        >>> from retryloop.retry.executor_core import accepts_token
        >>> accepts_token(lambda: None)
        False
        >>> accepts_token(lambda token: None)
        True

        ```
    """
    try:
        parameters = inspect.signature(operation).parameters
    except (TypeError, ValueError):
        return False
    parameter = parameters.get(TOKEN_PARAMETER)
    return parameter is not None and parameter.kind in (
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
        inspect.Parameter.KEYWORD_ONLY,
    )


def operation_kwargs(operation: Callable[..., Any], token: CancelToken | None) -> dict[str, Any]:
    """Return the keyword arguments used to invoke the operation.

    An operation declaring a ``token`` parameter receives the configured
    cancellation token, or a token that is never cancelled. A ``token``
    already bound by a ``functools.partial`` is left untouched.
    """
    if not accepts_token(operation):
        return {}
    if isinstance(operation, functools.partial) and TOKEN_PARAMETER in operation.keywords:
        return {}
    return {TOKEN_PARAMETER: token if token is not None else CancelToken()}


def create_final_error(
    history: ErrorHistory,
    decision: Decision,
    attempt: int,
    last_error_only: bool,
) -> BaseException:
    """Create the error raised when the loop stops without success.

    Args:
        history: The error history of the loop.
        decision: Why the loop stopped.
        attempt: The number of invocations of the operation.
        last_error_only: If ``True``, the last error is returned as is.

    Returns:
        The last error, or a ``RetryError`` aggregating the history.
    """
    logger.debug(f"Retry loop stopped after {attempt} attempts ({decision.value})")
    if last_error_only and history.last is not None:
        return history.last
    return RetryError(
        history.errors,
        attempts=attempt,
        decision=decision,
        last_error=history.last,
        dropped=history.dropped,
    )


def create_cancel_error(
    cancellation: OperationCancelled,
    history: ErrorHistory,
    wrap_cancel_error: bool,
) -> OperationCancelled:
    """Create the error raised when the loop is cancelled.

    Args:
        cancellation: The error reported by the cancellation token.
        history: The error history of the loop.
        wrap_cancel_error: If ``True``, the last operation error is
            combined with the cancellation error.

    Returns:
        The cancellation error.
    """
    logger.debug(f"Retry loop cancelled: {cancellation}")
    if wrap_cancel_error and history.last is not None:
        return CancelledWithError(cancellation, history.last)
    return cancellation
