r"""Bounded history of the errors raised by the operation."""

from __future__ import annotations

__all__ = ["MAX_ERROR_HISTORY", "ErrorHistory"]

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

# Maximum number of errors kept by one retry loop. Errors past this
# count are not recorded; the earliest ones are kept.
MAX_ERROR_HISTORY = 1000


class ErrorHistory:
    """Append-only, fixed-capacity record of errors.

    Once the capacity is reached, new errors are refused and counted in
    ``dropped``; recorded errors are never evicted. The most recent
    error is always available as ``last``, even when it was not
    recorded.

    Args:
        capacity: The maximum number of recorded errors. Must be >= 1.
        last_error_only: If ``True``, only the most recent error is kept.

    Example:
        ```pycon
        >>> from retryloop.retry.history import ErrorHistory
        >>> history = ErrorHistory(capacity=2)
        >>> for exc in (ValueError(1), ValueError(2), ValueError(3)):
        ...     history.add(exc)
        ...
        >>> history.errors
        (ValueError(1), ValueError(2))
        >>> history.dropped
        1
        >>> history.last
        ValueError(3)

        ```
    """

    def __init__(self, capacity: int = MAX_ERROR_HISTORY, last_error_only: bool = False) -> None:
        if capacity < 1:
            msg = f"capacity must be >= 1, got {capacity}"
            raise ValueError(msg)
        self.capacity = capacity
        self.last_error_only = last_error_only
        self._errors: list[BaseException] = []
        self.dropped = 0
        self.last: BaseException | None = None

    def __len__(self) -> int:
        return len(self._errors)

    def __iter__(self) -> Iterator[BaseException]:
        return iter(self._errors)

    @property
    def errors(self) -> tuple[BaseException, ...]:
        """The recorded errors, oldest first."""
        return tuple(self._errors)

    @property
    def is_full(self) -> bool:
        return len(self._errors) >= self.capacity

    def add(self, error: BaseException) -> None:
        """Record an error.

        Args:
            error: The error to record.
        """
        self.last = error
        if self.last_error_only:
            self._errors[:] = [error]
        elif self.is_full:
            self.dropped += 1
        else:
            self._errors.append(error)
