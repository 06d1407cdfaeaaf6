r"""Core configuration and validation of the retry loop."""

from __future__ import annotations

__all__ = [
    "DEFAULT_ATTEMPTS",
    "DEFAULT_DELAY",
    "DEFAULT_MAX_DELAY",
    "DEFAULT_MAX_JITTER",
    "DEFAULT_MIN_JITTER",
    "ErrorLimit",
    "RetryConfig",
    "build_config",
    "validate_attempts",
    "validate_config",
    "validate_delays",
    "validate_error_kind",
]

from retryloop.core.config import (
    DEFAULT_ATTEMPTS,
    DEFAULT_DELAY,
    DEFAULT_MAX_DELAY,
    DEFAULT_MAX_JITTER,
    DEFAULT_MIN_JITTER,
    ErrorLimit,
    RetryConfig,
    build_config,
)
from retryloop.core.validation import (
    validate_attempts,
    validate_config,
    validate_delays,
    validate_error_kind,
)
