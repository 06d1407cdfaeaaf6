r"""Abstract base class for delay strategies."""

from __future__ import annotations

__all__ = ["BaseDelayStrategy"]

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from retryloop.core.config import RetryConfig


class BaseDelayStrategy(ABC):
    """Abstract base class for delay strategies.

    A delay strategy determines how long to wait before invoking the
    operation again, based on the attempt number and the retry
    configuration (base delay, max delay and jitter bounds).
    """

    @abstractmethod
    def calculate(
        self, attempt: int, config: RetryConfig, error: BaseException | None = None
    ) -> float:
        """Calculate the delay after a failed attempt.

        Args:
            attempt: The index of the attempt that just failed (1-indexed).
                For example, attempt=1 is the delay before the second
                invocation.
            config: The retry configuration.
            error: The error raised by the failed attempt, if any.

        Returns:
            The delay in seconds before the next attempt.
        """

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}()"
