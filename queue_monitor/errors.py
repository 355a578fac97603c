class MonitorError(Exception):
    """Base class for everything the monitor raises on purpose."""


class BackendError(MonitorError):
    """The backend answered with an ``error`` payload or could not be reached."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.message = message
        self.path = path


class TransportError(BackendError):
    """Network-level failure or an unreadable response."""


class NotFoundError(BackendError):
    """A single job, chain or group lookup came back with ``error``."""


class MalformedRecordError(MonitorError):
    """A backend object is missing a field the monitor cannot default."""

    def __init__(self, message: str, raw: object = None):
        super().__init__(message)
        self.raw = raw


class StaleResponseError(MonitorError):
    """A newer request for the same view was issued while this one was in flight."""
