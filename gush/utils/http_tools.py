# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
HTTP plumbing shared by the hosting-provider adapters.

Requests are issued exactly once: rate limiting is detected and reported
through ``RateLimitError`` instead of being waited out.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Optional, Tuple

import requests

from gush.adapter.exceptions import (
    AdapterError,
    ConflictError,
    NotFoundError,
    RateLimitError,
    TransportError,
    UnauthorizedError,
)
from gush.constants import DEFAULT_REQUEST_TIMEOUT, RATE_LIMIT_MIN_REMAINING

logger = logging.getLogger(__name__)


@dataclass
class RateLimitInfo:
    """Represents API rate limit information extracted from response headers."""

    limit: int  # Maximum requests allowed per window
    remaining: int  # Requests remaining in current window
    reset_timestamp: int  # Unix timestamp when the rate limit resets
    used: int  # Requests used in current window

    @property
    def is_exceeded(self) -> bool:
        return self.remaining == 0

    @property
    def seconds_until_reset(self) -> int:
        current_time = int(time.time())
        return max(0, self.reset_timestamp - current_time)

    def __str__(self) -> str:
        return f"RateLimit(remaining={self.remaining}/{self.limit}, resets_in={self.seconds_until_reset}s)"


def parse_rate_limit_headers(response: requests.Response) -> Optional[RateLimitInfo]:
    """
    Parse rate limit information from response headers.

    GitHub sends ``X-RateLimit-*`` and GitLab ``RateLimit-*``; both are accepted.

    Args:
        response: The HTTP response from the provider API

    Returns:
        RateLimitInfo object if headers are present, None otherwise
    """
    headers = response.headers

    def _header(name: str) -> Any:
        return headers.get(f'X-{name}', headers.get(name, 0))

    try:
        limit = int(_header('RateLimit-Limit'))
        remaining = int(_header('RateLimit-Remaining'))
        reset_timestamp = int(_header('RateLimit-Reset'))
        used = int(_header('RateLimit-Used') or headers.get('RateLimit-Observed', 0))

        if limit == 0 and reset_timestamp == 0:
            return None

        return RateLimitInfo(limit=limit, remaining=remaining, reset_timestamp=reset_timestamp, used=used)
    except (ValueError, TypeError) as e:
        logger.debug(f"Could not parse rate limit headers: {e}")
        return None


def is_rate_limited(response: requests.Response) -> Tuple[bool, Optional[int]]:
    """
    Check if a response indicates rate limiting and how long until it resets.

    Args:
        response: The HTTP response from the provider API

    Returns:
        Tuple of (is_rate_limited, seconds_until_reset)
    """
    if response.status_code not in (403, 429):
        return (False, None)

    rate_limit_info = parse_rate_limit_headers(response)
    if rate_limit_info and rate_limit_info.is_exceeded:
        return (True, rate_limit_info.seconds_until_reset)

    if response.status_code == 429:
        retry_after = response.headers.get('Retry-After')
        try:
            return (True, int(retry_after) if retry_after else 60)
        except ValueError:
            return (True, 60)

    if 'rate limit' in (response.text or '').lower():
        return (True, 60)

    return (False, None)


def check_preemptive_rate_limit(response: requests.Response) -> None:
    """Log a warning when the remaining request budget is running low."""
    rate_limit_info = parse_rate_limit_headers(response)

    if rate_limit_info:
        if rate_limit_info.remaining <= RATE_LIMIT_MIN_REMAINING:
            logger.warning(
                f"Approaching API rate limit: {rate_limit_info.remaining} requests remaining, "
                f"resets in {rate_limit_info.seconds_until_reset}s"
            )
        elif rate_limit_info.remaining <= rate_limit_info.limit * 0.1:
            logger.info(f"API rate limit status: {rate_limit_info.remaining}/{rate_limit_info.limit} remaining")


def extract_error_message(response: requests.Response) -> str:
    """Pull the provider's own error text out of a failed response."""
    try:
        data = response.json()
    except ValueError:
        return (response.text or '').strip()[:200] or response.reason or 'unknown error'

    if isinstance(data, dict):
        # GitHub: message/errors, GitLab: message/error, Bitbucket: error.message
        error = data.get('error')
        if isinstance(error, dict):
            return str(error.get('message') or error)
        message = data.get('message') or error
        errors = data.get('errors')
        if errors and isinstance(errors, list):
            details = '; '.join(str(e.get('message', e)) if isinstance(e, dict) else str(e) for e in errors)
            return f"{message}: {details}" if message else details
        if message:
            return str(message)
    return str(data)


def raise_for_response(response: requests.Response, context: str = "") -> None:
    """
    Translate an unsuccessful response into the matching ``AdapterError``.

    Args:
        response: The HTTP response from the provider API
        context: Short description of the operation for the error message

    Raises:
        RateLimitError, UnauthorizedError, NotFoundError, ConflictError,
        TransportError or AdapterError depending on the status code.
    """
    status = response.status_code
    if status < 400:
        check_preemptive_rate_limit(response)
        return

    prefix = f"{context} failed" if context else "Request failed"
    message = f"{prefix} ({status}): {extract_error_message(response)}"

    rate_limited, wait_seconds = is_rate_limited(response)
    if rate_limited:
        raise RateLimitError(
            f"{prefix}: API rate limit exceeded, resets in {wait_seconds}s",
            seconds_until_reset=wait_seconds or 0,
            status_code=status,
        )
    if status in (401, 403):
        raise UnauthorizedError(message, status_code=status)
    if status == 404:
        raise NotFoundError(message, status_code=status)
    if status in (405, 409, 422):
        raise ConflictError(message, status_code=status)
    if status >= 500:
        raise TransportError(message, status_code=status)
    raise AdapterError(message, status_code=status)


def send_request(
    session: requests.Session,
    method: str,
    url: str,
    context: str = "",
    timeout: int = DEFAULT_REQUEST_TIMEOUT,
    **kwargs: Any,
) -> requests.Response:
    """
    Issue a single HTTP request and raise ``AdapterError`` on any failure.

    Args:
        session: The adapter's session (carries auth headers)
        method: HTTP method
        url: Absolute URL
        context: Short description of the operation for log and error messages
        timeout: Request timeout in seconds

    Returns:
        requests.Response: The successful response
    """
    logger.debug(f"{method} {url}")
    try:
        response = session.request(method, url, timeout=timeout, **kwargs)
    except requests.exceptions.RequestException as e:
        raise TransportError(f"{context or method + ' ' + url} failed: {e}") from e

    raise_for_response(response, context)
    return response


def json_or_none(response: requests.Response) -> Any:
    """Decode a JSON body, tolerating empty 204-style responses."""
    if response.status_code == 204 or not response.content:
        return None
    try:
        return response.json()
    except ValueError as e:
        raise TransportError(f"Invalid JSON in response from {response.url}: {e}") from e
