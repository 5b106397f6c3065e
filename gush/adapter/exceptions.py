# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Adapter failure kinds.

Every adapter surfaces failures as ``AdapterError``; the subclasses only
narrow the cause so callers can branch when they care.
"""

from typing import Optional


class AdapterError(Exception):
    """Raised when a hosting provider rejects or cannot complete an operation."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        return self.message


class UnauthorizedError(AdapterError):
    """Credentials missing, invalid, or lacking permission."""


class NotFoundError(AdapterError):
    """The repository, pull request or release does not exist (anymore)."""


class ConflictError(AdapterError):
    """The provider refused the change, eg. a merge conflict or an already closed PR."""


class UnsupportedOperationError(AdapterError):
    """The provider has no support for the requested capability."""


class TransportError(AdapterError):
    """Connection failure, timeout, or a server-side error."""


class RateLimitError(TransportError):
    """The provider's API rate limit is exhausted."""

    def __init__(self, message: str, seconds_until_reset: int = 0, status_code: Optional[int] = None):
        super().__init__(message, status_code=status_code)
        self.seconds_until_reset = seconds_until_reset
