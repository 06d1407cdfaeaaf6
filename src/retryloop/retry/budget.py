r"""Attempt accounting for the retry loop."""

from __future__ import annotations

__all__ = ["AttemptBudget"]

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from retryloop.core.config import ErrorLimit

logger: logging.Logger = logging.getLogger(__name__)


class AttemptBudget:
    """Tracks the attempts made, globally and per matched error kind.

    Args:
        attempts: The global attempt ceiling. ``0`` means unlimited.
        error_limits: The per-error ceilings, in registration order.

    Example:
        ```pycon
        >>> from retryloop.core.config import ErrorLimit
        >>> from retryloop.retry.budget import AttemptBudget
        >>> budget = AttemptBudget(attempts=0, error_limits=[ErrorLimit(KeyError, 2)])
        >>> budget.permits(1, ValueError())
        True
        >>> budget.permits(2, KeyError())
        True
        >>> budget.permits(3, KeyError())
        False

        ```
    """

    def __init__(self, attempts: int, error_limits: Sequence[ErrorLimit] = ()) -> None:
        self.attempts = attempts
        self.error_limits = tuple(error_limits)
        self._counts = [0] * len(self.error_limits)

    @property
    def unlimited(self) -> bool:
        return self.attempts == 0

    def remaining(self, attempt: int) -> int | None:
        """Return the number of attempts left after ``attempt``, or
        ``None`` if the global ceiling is unlimited."""
        if self.unlimited:
            return None
        return max(0, self.attempts - attempt)

    def permits(self, attempt: int, error: BaseException) -> bool:
        """Record a failed attempt and indicate if another one is
        permitted.

        The failure is counted against the first per-error rule matching
        ``error``, if any. Another attempt is permitted only if neither
        that rule's ceiling nor the global ceiling is reached.

        Args:
            attempt: The index of the failed attempt (1-indexed).
            error: The error raised by the failed attempt.

        Returns:
            ``True`` if the operation may be invoked again.
        """
        for index, limit in enumerate(self.error_limits):
            if limit.matches(error):
                self._counts[index] += 1
                if self._counts[index] >= limit.attempts:
                    logger.debug(
                        f"Attempt ceiling for {limit.kind!r} reached "
                        f"({self._counts[index]}/{limit.attempts})"
                    )
                    return False
                break
        if not self.unlimited and attempt >= self.attempts:
            logger.debug(f"Attempt ceiling reached ({attempt}/{self.attempts})")
            return False
        return True
