"""Error taxonomy for server time estimation.

Each error carries the user-facing message and the HTTP status the API
answers with. Messages never contain internal detail.
"""

from typing import Optional


URL_REQUIRED = "URL is required"
INVALID_URL = "Invalid URL format"
MISSING_DATE_HEADER = "Server did not return a Date header"
FETCH_FAILED = "Failed to fetch server time"


class EstimationError(Exception):
    """Base class for every failure of a sync attempt."""

    status_code = 500
    default_message = FETCH_FAILED

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(EstimationError):
    """Empty or unparseable target address. User-correctable."""

    status_code = 400
    default_message = INVALID_URL


class UpstreamUnreachable(EstimationError):
    """DNS failure, refused connection, timeout or similar transport error."""

    status_code = 500
    default_message = FETCH_FAILED


class UpstreamProtocolError(EstimationError):
    """Target answered but gave no usable Date header."""

    status_code = 400
    default_message = MISSING_DATE_HEADER


class InternalError(EstimationError):
    """Unexpected exception while estimating."""

    status_code = 500
    default_message = FETCH_FAILED
