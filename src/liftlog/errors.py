"""Exception types shared across liftlog."""


class LiftLogError(Exception):
    """Base class for liftlog errors."""

    pass


class ValidationError(LiftLogError):
    """Raised when input fails validation, before any storage request."""

    pass


class GatewayError(LiftLogError):
    """Raised when the persistence gateway rejects or fails a request."""

    pass


class SessionStateError(LiftLogError):
    """Raised on an invalid workout session transition."""

    pass


class SessionCompletionError(LiftLogError):
    """Raised when finishing a workout fails part-way.

    ``logs_saved`` tells the caller which step failed: when False nothing
    was written and the whole completion can be retried; when True the set
    logs are stored and only the status update should be retried.
    """

    def __init__(self, message: str, logs_saved: bool):
        super().__init__(message)
        self.logs_saved = logs_saved
