"""Exceptions raised by fb-app-events."""

from typing import Optional


class FacebookAppEventsError(Exception):
    """Base class for all fb-app-events errors."""


class ValidationError(FacebookAppEventsError, ValueError):
    """Raised for malformed credentials or event fields."""


class NotInitializedError(FacebookAppEventsError, RuntimeError):
    """Raised when the default sender is used before one is bound."""


class TransportError(FacebookAppEventsError):
    """A network or HTTP failure while delivering a batch.

    Never surfaces to callers of ``send_events``; the sender logs and drops it.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ResolutionFailure(FacebookAppEventsError):
    """A platform consent or advertising-id query failed."""
