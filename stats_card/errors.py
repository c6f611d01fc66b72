"""Error taxonomy for the stats card service.

Every failure on the full-fetch path is surfaced as a StatsCardError
subclass carrying the HTTP status the router should answer with and a
short user-facing message for the error card.
"""

from __future__ import annotations


class StatsCardError(Exception):
    """Base exception for stats card failures."""
    status_code = 500
    user_message = "Failed to generate LeetCode stats card"

    def __init__(self, message: str, user_message: str | None = None):
        super().__init__(message)
        self.message = message
        if user_message:
            self.user_message = user_message


class InvalidRequest(StatsCardError):
    """Raised when the request itself is unusable (e.g. blank username)."""
    status_code = 400
    user_message = "Username is required"


class SubjectNotFound(StatsCardError):
    """Raised when the user does not exist upstream."""
    status_code = 404
    user_message = "Username not found on LeetCode"


class UpstreamUnavailable(StatsCardError):
    """Raised on transport failures and non-success HTTP statuses."""
    status_code = 503
    user_message = "LeetCode service is temporarily unavailable"


class UpstreamProtocolError(StatsCardError):
    """Raised when a well-formed response carries a GraphQL error array."""
    status_code = 503
    user_message = "LeetCode service is temporarily unavailable"


class UnknownError(StatsCardError):
    status_code = 500


def classify(exc: BaseException) -> StatsCardError:
    """Map any exception onto the taxonomy. Typed errors pass through."""
    if isinstance(exc, StatsCardError):
        return exc
    return UnknownError(str(exc) or exc.__class__.__name__)


def friendly_message(err: StatsCardError) -> str:
    return err.user_message
