r"""Helpers to retry operations built on httpx.

The retry loop itself performs no I/O. This module only inspects the
errors raised by httpx-based operations: it provides a ``retry_if``
predicate for transient HTTP failures and a delay strategy honoring the
``Retry-After`` header of HTTP error responses.

Example:
    ```pycon
    >>> import httpx
    >>> from retryloop import options as opt, retry
    >>> from retryloop.http import RetryAfterDelay, http_retry_if
    >>> def fetch():
    ...     with httpx.Client() as client:
    ...         response = client.get("https://api.example.com/data")
    ...         response.raise_for_status()
    ...         return response.json()
    ...
    >>> retry(
    ...     fetch,
    ...     opt.attempts(5),
    ...     opt.retry_if(http_retry_if()),
    ...     opt.delay_strategy(RetryAfterDelay()),
    ... )  # doctest: +SKIP

    ```
"""

from __future__ import annotations

__all__ = ["RETRY_STATUS_CODES", "RetryAfterDelay", "http_retry_if", "parse_retry_after"]

import logging
from contextlib import suppress
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import TYPE_CHECKING

import httpx

from retryloop.backoff import BaseDelayStrategy, ExponentialBackoff

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from retryloop.core.config import RetryConfig

logger: logging.Logger = logging.getLogger(__name__)

# HTTP status codes worth retrying
# 429: Too Many Requests - Rate limiting
# 500: Internal Server Error - Temporary server issue
# 502: Bad Gateway - Upstream server error
# 503: Service Unavailable - Server overloaded or down
# 504: Gateway Timeout - Upstream server timeout
RETRY_STATUS_CODES = (429, 500, 502, 503, 504)


def http_retry_if(
    status_forcelist: Iterable[int] = RETRY_STATUS_CODES,
) -> Callable[[BaseException], bool]:
    r"""Build a ``retry_if`` predicate for httpx errors.

    The predicate returns:

    - for ``httpx.HTTPStatusError``: whether the status code is in
      ``status_forcelist``
    - for ``httpx.TimeoutException`` and ``httpx.TransportError``:
      ``True``
    - for other httpx errors (decoding errors, too many redirects...):
      ``False``
    - for any other error: ``True``, the default of the retry loop

    Args:
        status_forcelist: The HTTP status codes that are retried.

    Returns:
        The predicate.

    Example:
        ```pycon
        >>> import httpx
        >>> from retryloop.http import http_retry_if
        >>> predicate = http_retry_if()
        >>> request = httpx.Request("GET", "https://example.com")
        >>> response = httpx.Response(503, request=request)
        >>> predicate(httpx.HTTPStatusError("unavailable", request=request, response=response))
        True
        >>> predicate(httpx.ConnectTimeout("timed out"))
        True

        ```
    """
    statuses = frozenset(status_forcelist)

    def predicate(error: BaseException) -> bool:
        if isinstance(error, httpx.HTTPStatusError):
            retryable = error.response.status_code in statuses
            logger.debug(
                f"HTTP status {error.response.status_code} is "
                f"{'retryable' if retryable else 'not retryable'}"
            )
            return retryable
        if isinstance(error, (httpx.TimeoutException, httpx.TransportError)):
            return True
        return not isinstance(error, httpx.HTTPError)

    return predicate


def parse_retry_after(retry_after_header: str | None) -> float | None:
    r"""Parse the value of a Retry-After header.

    The header is either a number of seconds (e.g. ``"120"``) or an
    HTTP-date (e.g. ``"Wed, 21 Oct 2015 07:28:00 GMT"``). Dates in the
    past give ``0.0``.

    Args:
        retry_after_header: The header value, or ``None`` if absent.

    Returns:
        The number of seconds to wait, or ``None`` if the header is
        absent or cannot be parsed.

    Example:
        ```pycon
        >>> from retryloop.http import parse_retry_after
        >>> parse_retry_after("120")
        120.0
        >>> parse_retry_after(None) is None
        True
        >>> parse_retry_after("soon") is None
        True

        ```
    """
    if retry_after_header is None:
        return None
    with suppress(ValueError):
        return max(0.0, float(retry_after_header))
    try:
        retry_date = parsedate_to_datetime(retry_after_header)
    except (ValueError, TypeError, OverflowError):
        logger.debug(f"Failed to parse Retry-After header: {retry_after_header!r}")
        return None
    if retry_date.tzinfo is None:
        retry_date = retry_date.replace(tzinfo=timezone.utc)
    return max(0.0, (retry_date - datetime.now(timezone.utc)).total_seconds())


class RetryAfterDelay(BaseDelayStrategy):
    """Delay strategy honoring the Retry-After header.

    If the failed attempt raised an ``httpx.HTTPStatusError`` whose
    response carries a valid ``Retry-After`` header, the header value is
    used. Otherwise the fallback strategy is used. The retry loop still
    caps the result at ``max_delay``.

    Args:
        fallback: The strategy used without a usable header. Defaults to
            ``ExponentialBackoff()``.

    Example:
        ```pycon
        >>> import httpx
        >>> from retryloop.core.config import RetryConfig
        >>> from retryloop.http import RetryAfterDelay
        >>> request = httpx.Request("GET", "https://example.com")
        >>> response = httpx.Response(429, headers={"Retry-After": "3"}, request=request)
        >>> error = httpx.HTTPStatusError("slow down", request=request, response=response)
        >>> RetryAfterDelay().calculate(1, RetryConfig(), error)
        3.0
        >>> RetryAfterDelay().calculate(2, RetryConfig(delay=1.0), KeyError())
        2.0

        ```
    """

    def __init__(self, fallback: BaseDelayStrategy | None = None) -> None:
        self.fallback = fallback if fallback is not None else ExponentialBackoff()

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(fallback={self.fallback!r})"

    def calculate(
        self, attempt: int, config: RetryConfig, error: BaseException | None = None
    ) -> float:
        if isinstance(error, httpx.HTTPStatusError):
            retry_after = parse_retry_after(error.response.headers.get("Retry-After"))
            if retry_after is not None:
                logger.debug(f"Using Retry-After header value: {retry_after:.2f}s")
                return retry_after
        return self.fallback.calculate(attempt, config, error)
