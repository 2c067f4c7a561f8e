"""
Domain errors raised by the service layer.

The HTTP layer maps each class to a status code in ``campushub.main``;
services never raise ``HTTPException`` themselves.
"""


class CampusHubError(Exception):
    """Base class for all domain errors."""

    status_code = 500
    retryable = False

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFound(CampusHubError):
    """A referenced event, user or row does not exist."""

    status_code = 404


class InvalidArgument(CampusHubError):
    """A value is outside its accepted domain, e.g. an unknown RSVP status."""

    status_code = 400


class PermissionDenied(CampusHubError):
    status_code = 403


class CapacityExceeded(CampusHubError):
    """The event has no free spot left for another 'going' RSVP."""

    status_code = 409

    def __init__(self, event_id, capacity: int):
        super().__init__(f"Event is at full capacity ({capacity} attendees)")
        self.event_id = event_id
        self.capacity = capacity


class ConflictRetryable(CampusHubError):
    """
    Lock or transaction contention on an (event, user) key.

    Safe to retry with the same arguments; surfaced as a transient failure
    once retries are exhausted.
    """

    status_code = 503
    retryable = True
