"""
Tracking exceptions.

Raised by RunTracker and its collaborators. Routes translate these
into HTTP status codes.
"""


class TrackingError(Exception):
    """Base tracking error."""
    pass


class PermissionDenied(TrackingError):
    """Location access was not granted; the session was not started."""
    pass


class SubscriptionError(TrackingError):
    """The location provider failed to begin or continue streaming."""
    pass


class PersistenceError(TrackingError):
    """The backing store rejected a run. The in-memory summary is kept."""
    pass
