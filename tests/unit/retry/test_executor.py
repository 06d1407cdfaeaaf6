r"""Unit tests for the synchronous retry executor."""

from __future__ import annotations

import threading
import time
from dataclasses import replace
from unittest.mock import Mock, call

import pytest

from retryloop.backoff import CustomDelay, ExponentialBackoff, FixedDelay
from retryloop.callbacks import RetryInfo
from retryloop.cancel import CancelToken
from retryloop.core.config import ErrorLimit, RetryConfig
from retryloop.decision import Decision
from retryloop.exceptions import (
    CancelledWithError,
    DeadlineExceeded,
    OperationCancelled,
    RetryConfigError,
    RetryError,
    unrecoverable,
)
from retryloop.retry import RetryExecutor
from retryloop.retry.strategy import MAX_WAIT


class NetworkError(Exception):
    pass


def no_delay(**kwargs: object) -> RetryConfig:
    return RetryConfig(delay=0.0, max_jitter=0.0, **kwargs)


def test_retry_executor_creation(no_delay_config: RetryConfig) -> None:
    """Test RetryExecutor initialization."""
    executor = RetryExecutor(no_delay_config)
    assert executor.config is no_delay_config
    assert executor.strategy is not None
    assert executor.classifier is not None
    assert executor.callbacks is not None


def test_retry_executor_invalid_config() -> None:
    with pytest.raises(RetryConfigError, match=r"attempts must be >= 0"):
        RetryExecutor(RetryConfig(attempts=-1))


def test_retry_executor_operation_not_callable(no_delay_config: RetryConfig) -> None:
    with pytest.raises(RetryConfigError, match=r"operation must be callable"):
        RetryExecutor(no_delay_config).execute(42)


def test_retry_executor_success(no_delay_config: RetryConfig) -> None:
    """Test successful operation without retries."""
    operation = Mock(return_value="ok")
    assert RetryExecutor(no_delay_config).execute(operation) == "ok"
    operation.assert_called_once_with()


def test_retry_executor_success_after_failures(no_delay_config: RetryConfig) -> None:
    operation = Mock(side_effect=[NetworkError("a"), NetworkError("b"), "ok"])
    assert RetryExecutor(no_delay_config).execute(operation) == "ok"
    assert operation.call_count == 3


@pytest.mark.parametrize("attempts", [1, 2, 5, 10])
def test_retry_executor_exact_attempts(attempts: int) -> None:
    """Test that N attempts invoke a failing operation exactly N
    times."""
    operation = Mock(side_effect=NetworkError("down"))
    with pytest.raises(RetryError) as exc_info:
        RetryExecutor(no_delay(attempts=attempts)).execute(operation)
    assert operation.call_count == attempts
    assert exc_info.value.attempts == attempts
    assert len(exc_info.value.errors) == attempts
    assert exc_info.value.decision is Decision.STOP_BUDGET


def test_retry_executor_retry_error_content() -> None:
    errors = [NetworkError("a"), TimeoutError("b"), KeyError("c")]
    operation = Mock(side_effect=errors)
    with pytest.raises(RetryError) as exc_info:
        RetryExecutor(no_delay(attempts=3)).execute(operation)
    assert exc_info.value.errors == tuple(errors)
    assert exc_info.value.last_error is errors[-1]
    assert exc_info.value.__cause__ is errors[-1]
    assert exc_info.value.contains(NetworkError)
    assert exc_info.value.find(TimeoutError) is errors[1]


def test_retry_executor_unlimited_until_success() -> None:
    operation = Mock(side_effect=[NetworkError()] * 50 + ["ok"])
    assert RetryExecutor(no_delay(attempts=0)).execute(operation) == "ok"
    assert operation.call_count == 51


def test_retry_executor_unrecoverable() -> None:
    """Test that an unrecoverable error on attempt 2 stops the loop."""
    original = ValueError("bad input")
    operation = Mock(side_effect=[NetworkError(), unrecoverable(original), "ok"])
    with pytest.raises(RetryError) as exc_info:
        RetryExecutor(no_delay(attempts=10)).execute(operation)
    assert operation.call_count == 2
    assert exc_info.value.decision is Decision.STOP_UNRECOVERABLE
    assert exc_info.value.last_error is original
    assert exc_info.value.errors[-1] is original


def test_retry_executor_unrecoverable_unlimited() -> None:
    operation = Mock(side_effect=unrecoverable(ValueError()))
    with pytest.raises(RetryError):
        RetryExecutor(no_delay(attempts=0)).execute(operation)
    operation.assert_called_once_with()


def test_retry_executor_retry_if_rejects() -> None:
    operation = Mock(side_effect=[NetworkError(), KeyError("missing")])
    config = no_delay(attempts=10, retry_if=lambda exc: isinstance(exc, NetworkError))
    with pytest.raises(RetryError) as exc_info:
        RetryExecutor(config).execute(operation)
    assert operation.call_count == 2
    assert exc_info.value.decision is Decision.STOP_REJECTED


def test_retry_executor_retry_if_receives_unwrapped_error() -> None:
    retry_if = Mock(return_value=True)
    error = NetworkError()
    operation = Mock(side_effect=[error, "ok"])
    RetryExecutor(no_delay(retry_if=retry_if)).execute(operation)
    retry_if.assert_called_once_with(error)


def test_retry_executor_error_limit() -> None:
    """Test that a per-error ceiling stops at its Mth matching
    failure."""
    operation = Mock(side_effect=NetworkError())
    config = no_delay(attempts=10, error_limits=(ErrorLimit(NetworkError, 3),))
    with pytest.raises(RetryError) as exc_info:
        RetryExecutor(config).execute(operation)
    assert operation.call_count == 3
    assert exc_info.value.decision is Decision.STOP_BUDGET


def test_retry_executor_error_limit_zero() -> None:
    operation = Mock(side_effect=NetworkError())
    config = no_delay(attempts=0, error_limits=(ErrorLimit(NetworkError, 0),))
    with pytest.raises(RetryError):
        RetryExecutor(config).execute(operation)
    operation.assert_called_once_with()


def test_retry_executor_error_limit_other_errors() -> None:
    operation = Mock(side_effect=[TimeoutError(), TimeoutError(), NetworkError(), "ok"])
    config = no_delay(attempts=10, error_limits=(ErrorLimit(NetworkError, 2),))
    assert RetryExecutor(config).execute(operation) == "ok"
    assert operation.call_count == 4


def test_retry_executor_history_bounded() -> None:
    """Test that the history keeps at most 1000 errors."""
    operation = Mock(side_effect=NetworkError())
    with pytest.raises(RetryError) as exc_info:
        RetryExecutor(no_delay(attempts=2000)).execute(operation)
    assert operation.call_count == 2000
    assert len(exc_info.value.errors) == 1000
    assert exc_info.value.dropped == 1000
    assert exc_info.value.attempts == 2000


def test_retry_executor_last_error_only() -> None:
    errors = [NetworkError("a"), TimeoutError("b")]
    operation = Mock(side_effect=errors)
    with pytest.raises(TimeoutError) as exc_info:
        RetryExecutor(no_delay(attempts=2, last_error_only=True)).execute(operation)
    assert exc_info.value is errors[-1]


def test_retry_executor_last_error_only_unrecoverable() -> None:
    original = ValueError("bad input")
    operation = Mock(side_effect=unrecoverable(original))
    with pytest.raises(ValueError, match=r"bad input") as exc_info:
        RetryExecutor(no_delay(attempts=5, last_error_only=True)).execute(operation)
    assert exc_info.value is original


def test_retry_executor_base_exception_not_retried() -> None:
    operation = Mock(side_effect=KeyboardInterrupt)
    with pytest.raises(KeyboardInterrupt):
        RetryExecutor(no_delay(attempts=5)).execute(operation)
    operation.assert_called_once_with()


############################################
#     Tests for the waits and on_retry     #
############################################


def test_retry_executor_sleeps_between_attempts(mock_sleep: Mock) -> None:
    operation = Mock(side_effect=NetworkError())
    config = RetryConfig(attempts=3, delay=0.5, delay_strategy=FixedDelay())
    with pytest.raises(RetryError):
        RetryExecutor(config).execute(operation)
    assert mock_sleep.call_args_list == [call(0.5), call(0.5)]


def test_retry_executor_huge_delay(mock_sleep: Mock) -> None:
    """Test that a delay past the platform limit is reduced to it."""
    operation = Mock(side_effect=[NetworkError(), "ok"])
    config = RetryConfig(attempts=2, delay=1e12, delay_strategy=FixedDelay())
    assert RetryExecutor(config).execute(operation) == "ok"
    mock_sleep.assert_called_once_with(MAX_WAIT)


def test_retry_executor_infinite_custom_delay(mock_sleep: Mock) -> None:
    operation = Mock(side_effect=[NetworkError(), "ok"])
    config = RetryConfig(attempts=2, delay_strategy=CustomDelay(lambda *_: float("inf")))
    assert RetryExecutor(config).execute(operation) == "ok"
    mock_sleep.assert_called_once_with(MAX_WAIT)


def test_retry_executor_exponential_waits(mock_sleep: Mock) -> None:
    operation = Mock(side_effect=NetworkError())
    config = RetryConfig(attempts=5, delay=0.5, delay_strategy=ExponentialBackoff())
    with pytest.raises(RetryError):
        RetryExecutor(config).execute(operation)
    assert mock_sleep.call_args_list == [call(0.5), call(1.0), call(2.0), call(4.0)]


def test_retry_executor_on_retry(mock_callback: Mock, mock_sleep: Mock) -> None:
    errors = [NetworkError("a"), NetworkError("b")]
    operation = Mock(side_effect=[*errors, "ok"])
    config = RetryConfig(
        attempts=3, delay=0.5, delay_strategy=FixedDelay(), on_retry=mock_callback
    )
    assert RetryExecutor(config).execute(operation) == "ok"
    assert mock_callback.call_args_list == [
        call(RetryInfo(attempt=1, error=errors[0], wait_time=0.5, max_attempts=3)),
        call(RetryInfo(attempt=2, error=errors[1], wait_time=0.5, max_attempts=3)),
    ]


def test_retry_executor_on_retry_not_called_on_stop(mock_callback: Mock) -> None:
    """Test that on_retry is not invoked when the loop stops."""
    operation = Mock(side_effect=NetworkError())
    with pytest.raises(RetryError):
        RetryExecutor(no_delay(attempts=3, on_retry=mock_callback)).execute(operation)
    assert mock_callback.call_count == 2


@pytest.mark.parametrize(
    "config",
    [
        no_delay(attempts=1),
        no_delay(attempts=0, error_limits=(ErrorLimit(NetworkError, 0),)),
        no_delay(attempts=5, retry_if=lambda exc: False),
    ],
)
def test_retry_executor_on_retry_not_called_on_first_stop(
    config: RetryConfig, mock_callback: Mock
) -> None:
    operation = Mock(side_effect=NetworkError())
    with pytest.raises(RetryError):
        RetryExecutor(replace(config, on_retry=mock_callback)).execute(operation)
    mock_callback.assert_not_called()


def test_retry_executor_on_retry_not_called_on_unrecoverable(mock_callback: Mock) -> None:
    operation = Mock(side_effect=unrecoverable(NetworkError()))
    with pytest.raises(RetryError):
        RetryExecutor(no_delay(attempts=5, on_retry=mock_callback)).execute(operation)
    mock_callback.assert_not_called()


def test_retry_executor_on_retry_failure_does_not_abort() -> None:
    callback = Mock(side_effect=RuntimeError("callback bug"))
    operation = Mock(side_effect=[NetworkError(), "ok"])
    assert RetryExecutor(no_delay(attempts=3, on_retry=callback)).execute(operation) == "ok"
    callback.assert_called_once()


##################################
#     Tests for cancellation     #
##################################


def test_retry_executor_cancelled_before_first_attempt() -> None:
    token = CancelToken()
    token.cancel("shutdown")
    operation = Mock(return_value="ok")
    with pytest.raises(OperationCancelled, match=r"operation cancelled: shutdown"):
        RetryExecutor(no_delay(cancel_token=token)).execute(operation)
    operation.assert_not_called()


def test_retry_executor_cancelled_during_wait() -> None:
    """Test that cancelling during the 3rd wait ends the loop early."""
    token = CancelToken()
    timer = threading.Timer(0.05, token.cancel)

    def on_retry(info: RetryInfo) -> None:
        if info.attempt == 3:
            timer.start()

    operation = Mock(side_effect=NetworkError())
    config = RetryConfig(
        attempts=10,
        delay_strategy=CustomDelay(lambda attempt, config, error: 0.0 if attempt < 3 else 30.0),
        on_retry=on_retry,
        cancel_token=token,
    )
    start = time.monotonic()
    try:
        with pytest.raises(OperationCancelled):
            RetryExecutor(config).execute(operation)
    finally:
        timer.cancel()
    assert operation.call_count == 3
    assert time.monotonic() - start < 10.0


def test_retry_executor_cancelled_from_on_retry() -> None:
    token = CancelToken()
    operation = Mock(side_effect=NetworkError())
    config = RetryConfig(
        attempts=10,
        delay=30.0,
        delay_strategy=FixedDelay(),
        on_retry=lambda info: token.cancel("stop"),
        cancel_token=token,
    )
    with pytest.raises(OperationCancelled, match=r"stop"):
        RetryExecutor(config).execute(operation)
    operation.assert_called_once_with()


def test_retry_executor_wrap_cancel_error() -> None:
    token = CancelToken()
    error = NetworkError("refused")
    operation = Mock(side_effect=error)
    config = no_delay(
        attempts=10,
        on_retry=lambda info: token.cancel(),
        cancel_token=token,
        wrap_cancel_error=True,
    )
    with pytest.raises(CancelledWithError) as exc_info:
        RetryExecutor(config).execute(operation)
    assert exc_info.value.last_error is error
    assert exc_info.value.contains(NetworkError)
    assert exc_info.value.contains(OperationCancelled)


def test_retry_executor_wrap_cancel_error_without_attempt() -> None:
    token = CancelToken()
    token.cancel()
    config = no_delay(cancel_token=token, wrap_cancel_error=True)
    with pytest.raises(OperationCancelled) as exc_info:
        RetryExecutor(config).execute(Mock())
    assert type(exc_info.value) is OperationCancelled


def test_retry_executor_deadline() -> None:
    token = CancelToken(timeout=0.05)
    operation = Mock(side_effect=NetworkError())
    config = RetryConfig(attempts=0, delay=30.0, delay_strategy=FixedDelay(), cancel_token=token)
    start = time.monotonic()
    with pytest.raises(DeadlineExceeded):
        RetryExecutor(config).execute(operation)
    operation.assert_called_once_with()
    assert time.monotonic() - start < 10.0


def test_retry_executor_passes_token() -> None:
    token = CancelToken()
    received: list[CancelToken] = []

    def operation(token: CancelToken) -> str:
        received.append(token)
        return "ok"

    assert RetryExecutor(no_delay(cancel_token=token)).execute(operation) == "ok"
    assert received == [token]


def test_retry_executor_passes_fresh_token(no_delay_config: RetryConfig) -> None:
    def operation(token: CancelToken) -> bool:
        return token.cancelled

    assert RetryExecutor(no_delay_config).execute(operation) is False


def test_retry_executor_reusable() -> None:
    """Test that each execution has its own budget and history."""
    executor = RetryExecutor(no_delay(attempts=2))
    for _ in range(3):
        operation = Mock(side_effect=NetworkError())
        with pytest.raises(RetryError) as exc_info:
            executor.execute(operation)
        assert operation.call_count == 2
        assert len(exc_info.value.errors) == 2
