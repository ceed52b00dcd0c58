"""Error taxonomy for remote operations.

Every failure of a remote call surfaces as one of these. The controller
records the message on the originating request and as the current error.
"""


class FlowError(Exception):
    """Base class for errors raised by remote operations."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class RateLimitedError(FlowError):
    """The upstream text-generation quota is exhausted."""


class QueryValidationError(FlowError):
    """A save was attempted with an empty prompt or response."""


class NotFoundError(FlowError):
    """The saved query does not exist."""


class InvalidIdError(FlowError):
    """The saved query id is malformed."""


class RemoteError(FlowError):
    """Catch-all transport or server failure."""
