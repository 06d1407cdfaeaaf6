r"""Classification of the errors raised by the operation.

This module provides the ``ErrorClassifier`` that decides whether a
failed attempt may be followed by another one, independently of the
attempt budget.
"""

from __future__ import annotations

__all__ = ["Decision", "ErrorClassifier"]

import logging
from typing import TYPE_CHECKING

from retryloop.decision import Decision
from retryloop.exceptions import Unrecoverable

if TYPE_CHECKING:
    from collections.abc import Callable

logger: logging.Logger = logging.getLogger(__name__)


class ErrorClassifier:
    """Decides whether an error stops the retry loop.

    The checks run in order and short-circuit:

    1. An ``Unrecoverable`` error stops the loop (``STOP_UNRECOVERABLE``).
    2. An error rejected by ``retry_if`` stops the loop
       (``STOP_REJECTED``).
    3. Any other error may be retried (``CONTINUE``), subject to the
       attempt budget.

    Args:
        retry_if: Optional predicate receiving the original error and
            returning ``True`` if it is retryable.

    Example:
        ```pycon
        >>> from retryloop.exceptions import unrecoverable
        >>> from retryloop.retry.decider import ErrorClassifier
        >>> classifier = ErrorClassifier(retry_if=lambda exc: not isinstance(exc, KeyError))
        >>> classifier.classify(ValueError())
        <Decision.CONTINUE: 'continue'>
        >>> classifier.classify(KeyError())
        <Decision.STOP_REJECTED: 'stop_rejected'>
        >>> classifier.classify(unrecoverable(ValueError()))
        <Decision.STOP_UNRECOVERABLE: 'stop_unrecoverable'>

        ```
    """

    def __init__(self, retry_if: Callable[[BaseException], bool] | None = None) -> None:
        self.retry_if = retry_if

    def classify(self, error: BaseException) -> Decision:
        """Classify the error raised by a failed attempt.

        Args:
            error: The error, possibly wrapped in ``Unrecoverable``.

        Returns:
            The decision for this error.
        """
        if isinstance(error, Unrecoverable):
            logger.debug(f"Unrecoverable error: {error.error!r}")
            return Decision.STOP_UNRECOVERABLE
        if self.retry_if is not None and not self.retry_if(error):
            logger.debug(f"Error rejected by retry_if: {error!r}")
            return Decision.STOP_REJECTED
        return Decision.CONTINUE
