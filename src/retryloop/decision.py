r"""Outcome of evaluating a failed attempt."""

from __future__ import annotations

__all__ = ["Decision"]

from enum import Enum


class Decision(Enum):
    """Outcome of evaluating a failed attempt.

    Attributes:
        CONTINUE: The operation may be invoked again.
        STOP_UNRECOVERABLE: The error was marked as unrecoverable.
        STOP_BUDGET: The global or a per-error attempt ceiling is reached.
        STOP_REJECTED: The custom retry predicate rejected the error.
    """

    CONTINUE = "continue"
    STOP_UNRECOVERABLE = "stop_unrecoverable"
    STOP_BUDGET = "stop_budget"
    STOP_REJECTED = "stop_rejected"

    @property
    def stops(self) -> bool:
        """Indicate if the decision ends the retry loop."""
        return self is not Decision.CONTINUE
