r"""Helpers shared by the delay strategies."""

from __future__ import annotations

__all__ = ["MAX_BACKOFF_EXPONENT", "cap_delay", "exponential_delay"]

# Largest exponent used by exponential backoff. Past this point the
# multiplier stays at 2**62 instead of growing without bound.
MAX_BACKOFF_EXPONENT = 62


def cap_delay(delay: float, max_delay: float) -> float:
    r"""Clamp a delay to ``[0, max_delay]``.

    Args:
        delay: The delay in seconds.
        max_delay: The cap in seconds. ``0`` means no cap.

    Returns:
        The clamped delay.

    Example:
        ```pycon
        >>> from retryloop.backoff.utils import cap_delay
        >>> cap_delay(12.0, 5.0)
        5.0
        >>> cap_delay(12.0, 0.0)
        12.0
        >>> cap_delay(-1.0, 5.0)
        0.0

        ```
    """
    if max_delay > 0:
        delay = min(delay, max_delay)
    return max(0.0, delay)


def exponential_delay(attempt: int, base_delay: float, max_delay: float) -> float:
    r"""Compute ``base_delay * 2 ** (attempt - 1)`` with a saturating
    exponent.

    Args:
        attempt: The index of the failed attempt (1-indexed).
        base_delay: The base delay in seconds.
        max_delay: The cap in seconds. ``0`` means no cap.

    Returns:
        The capped exponential delay.

    Example:
        ```pycon
        >>> from retryloop.backoff.utils import exponential_delay
        >>> exponential_delay(1, 0.5, 0.0)
        0.5
        >>> exponential_delay(3, 0.5, 0.0)
        2.0
        >>> exponential_delay(10_000, 0.5, 30.0)
        30.0

        ```
    """
    exponent = min(max(attempt - 1, 0), MAX_BACKOFF_EXPONENT)
    return cap_delay(base_delay * (1 << exponent), max_delay)
