r"""Unit tests for the exceptions."""

from __future__ import annotations

import pickle

import pytest

from retryloop.decision import Decision
from retryloop.exceptions import (
    CancelledWithError,
    DeadlineExceeded,
    OperationCancelled,
    RetryError,
    Unrecoverable,
    error_matches,
    is_recoverable,
    iter_causes,
    unrecoverable,
    unwrap,
)


class QuotaError(Exception):
    def __init__(self, remaining: int) -> None:
        super().__init__(f"quota exhausted, {remaining} remaining")
        self.remaining = remaining


def chained(outer: Exception, inner: Exception) -> Exception:
    outer.__cause__ = inner
    return outer


###################################
#     Tests for Unrecoverable     #
###################################


def test_unrecoverable_wraps_error() -> None:
    error = KeyError("missing")
    exc = unrecoverable(error)
    assert isinstance(exc, Unrecoverable)
    assert exc.error is error
    assert exc.__cause__ is error
    assert unwrap(exc) is error


def test_unrecoverable_idempotent() -> None:
    exc = unrecoverable(ValueError())
    assert unrecoverable(exc) is exc


def test_unrecoverable_repr() -> None:
    assert repr(unrecoverable(ValueError("x"))) == "Unrecoverable(ValueError('x'))"


def test_is_recoverable() -> None:
    assert is_recoverable(ValueError())
    assert not is_recoverable(unrecoverable(ValueError()))


def test_unwrap_plain_error() -> None:
    error = ValueError()
    assert unwrap(error) is error


##################################
#     Tests for error chains     #
##################################


def test_iter_causes() -> None:
    inner = KeyError("a")
    middle = chained(RuntimeError("b"), inner)
    outer = chained(ValueError("c"), middle)
    assert list(iter_causes(outer)) == [outer, middle, inner]


def test_iter_causes_cycle() -> None:
    first, second = ValueError("a"), ValueError("b")
    first.__cause__ = second
    second.__cause__ = first
    assert list(iter_causes(first)) == [first, second]


def test_error_matches_cause() -> None:
    error = chained(RuntimeError("outer"), TimeoutError("inner"))
    assert error_matches(error, TimeoutError)
    assert not error_matches(error, KeyError)


def test_error_matches_predicate_exception_propagates() -> None:
    def predicate(exc: BaseException) -> bool:
        raise RuntimeError("broken predicate")

    with pytest.raises(RuntimeError, match=r"broken predicate"):
        error_matches(ValueError(), predicate)


################################
#     Tests for RetryError     #
################################


def test_retry_error_attributes() -> None:
    errors = [ValueError("a"), KeyError("b")]
    exc = RetryError(errors, attempts=2, decision=Decision.STOP_BUDGET)
    assert exc.errors == tuple(errors)
    assert exc.attempts == 2
    assert exc.decision is Decision.STOP_BUDGET
    assert exc.last_error is errors[-1]
    assert exc.__cause__ is errors[-1]
    assert exc.dropped == 0
    assert len(exc) == 2
    assert list(exc) == errors


def test_retry_error_message() -> None:
    exc = RetryError([ValueError("a"), KeyError("b")], attempts=2)
    assert str(exc) == "All 2 attempts fail:\n#1: ValueError: a\n#2: KeyError: 'b'"


def test_retry_error_message_unrecoverable() -> None:
    exc = RetryError([ValueError("a")], attempts=1, decision=Decision.STOP_UNRECOVERABLE)
    assert str(exc).startswith("Unrecoverable error on attempt 1:")


def test_retry_error_message_rejected() -> None:
    exc = RetryError([ValueError("a")], attempts=3, decision=Decision.STOP_REJECTED)
    assert str(exc).startswith("Non-retryable error on attempt 3:")


def test_retry_error_message_dropped() -> None:
    exc = RetryError([ValueError("a")], attempts=5, dropped=4)
    assert str(exc).endswith("(4 more errors not recorded)")


def test_retry_error_explicit_last_error() -> None:
    last = TimeoutError("dropped")
    exc = RetryError([ValueError("a")], attempts=2, last_error=last, dropped=1)
    assert exc.last_error is last
    assert exc.last_recorded is exc.errors[0]


def test_retry_error_empty() -> None:
    exc = RetryError([], attempts=0)
    assert exc.last_error is None
    assert exc.__cause__ is None
    assert not exc.contains(Exception)


def test_retry_error_contains_any_entry() -> None:
    exc = RetryError([TimeoutError(), KeyError("a"), TimeoutError()], attempts=3)
    assert exc.contains(KeyError)
    assert exc.contains(LookupError)
    assert exc.contains(OSError)
    assert not exc.contains(ZeroDivisionError)


def test_retry_error_contains_instance() -> None:
    sentinel = ValueError("sentinel")
    exc = RetryError([KeyError(), sentinel, KeyError()], attempts=3)
    assert exc.contains(sentinel)


def test_retry_error_contains_cause() -> None:
    exc = RetryError([chained(RuntimeError("wrapped"), QuotaError(3))], attempts=1)
    assert exc.contains(QuotaError)


def test_retry_error_find() -> None:
    quota = QuotaError(remaining=0)
    exc = RetryError([TimeoutError(), chained(RuntimeError(), quota), QuotaError(5)], attempts=3)
    found = exc.find(QuotaError)
    assert found is quota
    assert found.remaining == 0
    assert exc.find(KeyError) is None


#########################################
#     Tests for cancellation errors     #
#########################################


def test_operation_cancelled_message() -> None:
    assert str(OperationCancelled()) == "operation cancelled"
    assert str(OperationCancelled("shutdown")) == "operation cancelled: shutdown"


def test_operation_cancelled_exception_reason() -> None:
    reason = RuntimeError("stop")
    exc = OperationCancelled(reason)
    assert exc.reason is reason
    assert exc.__cause__ is reason


def test_deadline_exceeded() -> None:
    exc = DeadlineExceeded()
    assert isinstance(exc, OperationCancelled)
    assert str(exc) == "deadline exceeded"


def test_cancelled_with_error() -> None:
    cancellation = OperationCancelled("shutdown")
    last = ConnectionError("refused")
    exc = CancelledWithError(cancellation, last)
    assert isinstance(exc, OperationCancelled)
    assert exc.cancellation is cancellation
    assert exc.last_error is last
    assert exc.__cause__ is last
    assert exc.reason == "shutdown"
    assert str(exc) == "operation cancelled: shutdown; last error: ConnectionError: refused"


def test_cancelled_with_error_contains() -> None:
    exc = CancelledWithError(DeadlineExceeded(), chained(RuntimeError(), QuotaError(1)))
    assert exc.contains(DeadlineExceeded)
    assert exc.contains(QuotaError)
    assert not exc.contains(KeyError)
    assert isinstance(exc.find(QuotaError), QuotaError)
    assert isinstance(exc.find(DeadlineExceeded), DeadlineExceeded)


##############################
#     Tests for pickling     #
##############################


def test_unrecoverable_pickle() -> None:
    exc = pickle.loads(pickle.dumps(unrecoverable(ValueError("bad"))))
    assert isinstance(exc, Unrecoverable)
    assert isinstance(exc.error, ValueError)
    assert exc.error.args == ("bad",)


def test_retry_error_pickle() -> None:
    original = RetryError(
        [ValueError("a"), KeyError("b")],
        attempts=5,
        decision=Decision.STOP_BUDGET,
        last_error=TimeoutError("c"),
        dropped=3,
    )
    exc = pickle.loads(pickle.dumps(original))
    assert str(exc) == str(original)
    assert exc.attempts == 5
    assert exc.decision is Decision.STOP_BUDGET
    assert exc.dropped == 3
    assert isinstance(exc.last_error, TimeoutError)
    assert exc.contains(KeyError)


@pytest.mark.parametrize("exc", [OperationCancelled("shutdown"), DeadlineExceeded()])
def test_operation_cancelled_pickle(exc: OperationCancelled) -> None:
    loaded = pickle.loads(pickle.dumps(exc))
    assert type(loaded) is type(exc)
    assert str(loaded) == str(exc)
    assert loaded.reason == exc.reason


def test_cancelled_with_error_pickle() -> None:
    original = CancelledWithError(OperationCancelled("shutdown"), ConnectionError("refused"))
    exc = pickle.loads(pickle.dumps(original))
    assert str(exc) == str(original)
    assert exc.reason == "shutdown"
    assert isinstance(exc.last_error, ConnectionError)
