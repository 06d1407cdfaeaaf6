r"""Exceptions raised by the retry loop.

This module defines the error taxonomy of the library: configuration
errors, the unrecoverable marker used by operations to stop the loop,
the aggregate error raised when the loop gives up, and the cancellation
errors raised when a cancellation token fires.
"""

from __future__ import annotations

__all__ = [
    "CancelledWithError",
    "DeadlineExceeded",
    "OperationCancelled",
    "RetryConfigError",
    "RetryError",
    "Unrecoverable",
    "error_matches",
    "is_recoverable",
    "iter_causes",
    "unrecoverable",
    "unwrap",
]

from typing import TYPE_CHECKING, Any, TypeVar

from retryloop.decision import Decision

if TYPE_CHECKING:
    from collections.abc import Iterator

E = TypeVar("E", bound=BaseException)

ErrorKind = Any


class RetryConfigError(ValueError):
    """Exception raised when the retry configuration is invalid.

    Example:
        ```pycon
        >>> from retryloop.exceptions import RetryConfigError
        >>> raise RetryConfigError("attempts must be >= 0, got -1")
        Traceback (most recent call last):
            ...
        retryloop.exceptions.RetryConfigError: attempts must be >= 0, got -1

        ```
    """


class Unrecoverable(Exception):
    """Marker wrapping an error that must not be retried.

    Raising an ``Unrecoverable`` from an operation stops the retry loop
    immediately, whatever attempt budget is left. The wrapped error is
    available as ``error`` and is also set as ``__cause__``.

    Args:
        error: The original error.

    Example:
        ```pycon
        >>> from retryloop.exceptions import Unrecoverable
        >>> exc = Unrecoverable(KeyError("missing"))
        >>> exc.error
        KeyError('missing')

        ```
    """

    def __init__(self, error: BaseException) -> None:
        super().__init__(str(error))
        self.error = error
        self.__cause__ = error

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}({self.error!r})"

    def __reduce__(self) -> tuple[Any, ...]:
        return (self.__class__, (self.error,))


def unrecoverable(error: BaseException) -> Unrecoverable:
    r"""Wrap an error so that the retry loop stops on it.

    Args:
        error: The error to wrap.

    Returns:
        The wrapper. Wrapping an already wrapped error returns it unchanged.

    Example:
        ```pycon
        >>> from retryloop.exceptions import unrecoverable
        >>> unrecoverable(ValueError("bad input"))
        Unrecoverable(ValueError('bad input'))

        ```
    """
    if isinstance(error, Unrecoverable):
        return error
    return Unrecoverable(error)


def is_recoverable(error: BaseException) -> bool:
    r"""Indicate if an error may be retried.

    Example:
        ```pycon
        >>> from retryloop.exceptions import is_recoverable, unrecoverable
        >>> is_recoverable(ValueError())
        True
        >>> is_recoverable(unrecoverable(ValueError()))
        False

        ```
    """
    return not isinstance(error, Unrecoverable)


def iter_causes(error: BaseException) -> Iterator[BaseException]:
    r"""Iterate over an error and its chain of explicit causes.

    The chain is followed through ``__cause__`` and stops on cycles.

    Args:
        error: The outermost error.

    Yields:
        The error itself, then each cause in turn.
    """
    seen: set[int] = set()
    current: BaseException | None = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__


def error_matches(error: BaseException, kind: ErrorKind) -> bool:
    r"""Indicate if an error, or one of its causes, matches a kind.

    Args:
        error: The error to test.
        kind: An exception class, a tuple of classes, an exception
            instance (matched by identity or equality), or a predicate
            taking an exception and returning a bool.

    Returns:
        ``True`` if any error in the cause chain matches.

    Example:
        ```pycon
        >>> from retryloop.exceptions import error_matches
        >>> error_matches(KeyError("a"), LookupError)
        True
        >>> error_matches(KeyError("a"), lambda exc: isinstance(exc, OSError))
        False

        ```
    """
    return any(_matches_one(candidate, kind) for candidate in iter_causes(error))


def _matches_one(error: BaseException, kind: ErrorKind) -> bool:
    if isinstance(kind, type) and issubclass(kind, BaseException):
        return isinstance(error, kind)
    if isinstance(kind, tuple):
        return isinstance(error, kind)
    if isinstance(kind, BaseException):
        return error is kind or error == kind
    return bool(kind(error))


def _find(errors: tuple[BaseException, ...], kind: type[E]) -> E | None:
    for error in errors:
        for candidate in iter_causes(error):
            if isinstance(candidate, kind):
                return candidate
    return None


class RetryError(Exception):
    r"""Aggregate error raised when the retry loop stops without success.

    The error keeps the bounded history of errors raised by the
    operation, in attempt order. ``contains`` and ``find`` look through
    every recorded error and its cause chain, not only the last one.

    Args:
        errors: The recorded errors, oldest first.
        attempts: The number of times the operation was invoked.
        decision: Why the loop stopped.
        last_error: The error of the final attempt. Defaults to the
            last recorded error.
        dropped: The number of errors that were not recorded because
            the history was full.

    Example:
        ```pycon
        >>> from retryloop.exceptions import RetryError
        >>> exc = RetryError([ValueError("a"), KeyError("b")], attempts=2)
        >>> exc.contains(KeyError)
        True
        >>> print(exc)
        All 2 attempts fail:
        #1: ValueError: a
        #2: KeyError: 'b'

        ```
    """

    def __init__(
        self,
        errors: list[BaseException] | tuple[BaseException, ...],
        attempts: int,
        decision: Decision | None = None,
        last_error: BaseException | None = None,
        dropped: int = 0,
    ) -> None:
        self.errors = tuple(errors)
        self.attempts = attempts
        self.decision = decision
        self.last_error = last_error if last_error is not None else self.last_recorded
        self.dropped = dropped
        super().__init__(self._format())
        if self.last_error is not None:
            self.__cause__ = self.last_error

    def __reduce__(self) -> tuple[Any, ...]:
        return (
            self.__class__,
            (self.errors, self.attempts, self.decision, self.last_error, self.dropped),
        )

    @property
    def last_recorded(self) -> BaseException | None:
        return self.errors[-1] if self.errors else None

    def contains(self, kind: ErrorKind) -> bool:
        r"""Indicate if any recorded error matches ``kind``.

        Args:
            kind: An exception class, a tuple of classes, an exception
                instance, or a predicate.

        Returns:
            ``True`` if any recorded error, or one of its causes, matches.
        """
        return any(error_matches(error, kind) for error in self.errors)

    def find(self, kind: type[E]) -> E | None:
        r"""Return the first recorded error that is an instance of
        ``kind``.

        Args:
            kind: The exception class to extract.

        Returns:
            The first matching error, searching each recorded error and
            its causes in attempt order, or ``None``.
        """
        return _find(self.errors, kind)

    def __iter__(self) -> Iterator[BaseException]:
        return iter(self.errors)

    def __len__(self) -> int:
        return len(self.errors)

    def _format(self) -> str:
        if self.decision is Decision.STOP_UNRECOVERABLE:
            header = f"Unrecoverable error on attempt {self.attempts}:"
        elif self.decision is Decision.STOP_REJECTED:
            header = f"Non-retryable error on attempt {self.attempts}:"
        else:
            header = f"All {self.attempts} attempts fail:"
        lines = [header]
        lines.extend(
            f"#{index}: {_describe(error)}" for index, error in enumerate(self.errors, start=1)
        )
        if self.dropped:
            lines.append(f"({self.dropped} more errors not recorded)")
        return "\n".join(lines)


class OperationCancelled(Exception):
    r"""Exception raised when the retry loop is cancelled.

    Args:
        reason: Optional cancellation reason. It can be a message or an
            exception, in which case it is also set as ``__cause__``.
    """

    def __init__(self, reason: BaseException | str | None = None) -> None:
        self.reason = reason
        super().__init__(self._message())
        if isinstance(reason, BaseException):
            self.__cause__ = reason

    def __reduce__(self) -> tuple[Any, ...]:
        return (self.__class__, (self.reason,))

    def _message(self) -> str:
        if self.reason is None:
            return "operation cancelled"
        return f"operation cancelled: {self.reason}"


class DeadlineExceeded(OperationCancelled):
    r"""Exception raised when the deadline of a cancellation token
    expires."""

    def _message(self) -> str:
        return "deadline exceeded"


class CancelledWithError(OperationCancelled):
    r"""Cancellation error combined with the last operation error.

    Raised instead of a plain ``OperationCancelled`` when the loop is
    configured to wrap the cancellation error with the last error, so
    that the proximate cause of the failure is not lost.

    Args:
        cancellation: The cancellation error.
        last_error: The error raised by the last attempt.
    """

    def __init__(self, cancellation: OperationCancelled, last_error: BaseException) -> None:
        self.cancellation = cancellation
        self.last_error = last_error
        super().__init__(cancellation.reason)
        self.__cause__ = last_error

    def __reduce__(self) -> tuple[Any, ...]:
        return (self.__class__, (self.cancellation, self.last_error))

    def _message(self) -> str:
        return f"{self.cancellation}; last error: {_describe(self.last_error)}"

    def contains(self, kind: ErrorKind) -> bool:
        """Indicate if the cancellation or the last error matches
        ``kind``."""
        return error_matches(self.cancellation, kind) or error_matches(self.last_error, kind)

    def find(self, kind: type[E]) -> E | None:
        """Return the cancellation or the last error if it is an
        instance of ``kind``."""
        return _find((self.cancellation, self.last_error), kind)


def _describe(error: BaseException) -> str:
    return f"{type(error).__name__}: {error}"


def unwrap(error: BaseException) -> BaseException:
    r"""Return the original error of an ``Unrecoverable`` wrapper, or the
    error itself."""
    if isinstance(error, Unrecoverable):
        return error.error
    return error

