# eventhub/core/exceptions.py
"""
Typed failures raised by the admission and matchmaking services.

None of these are retried by the services themselves; routers translate
them into HTTP responses. Database connectivity problems are NOT mapped
here: SQLAlchemy's own errors propagate untouched so callers never confuse
an unreachable store with a full resource.
"""

from typing import Optional


class AdmissionError(Exception):
    """Base class for registration and matchmaking failures."""

    code = "ADMISSION_ERROR"
    status_code = 400

    def __init__(self, message: str, resource=None):
        self.message = message
        self.resource = resource
        super().__init__(message)

    def to_dict(self) -> dict:
        payload = {"detail": self.message, "code": self.code}
        if self.resource is not None:
            payload["resourceType"] = self.resource.kind
            payload["resourceId"] = self.resource.id
        return payload


class ResourceFull(AdmissionError):
    """Capacity exhausted. The caller has to pick a different resource."""

    code = "RESOURCE_FULL"
    status_code = 409


class AlreadyRegistered(AdmissionError):
    code = "ALREADY_REGISTERED"
    status_code = 409


class NotFound(AdmissionError):
    code = "NOT_FOUND"
    status_code = 404


class CrossEventMismatch(AdmissionError):
    """A session was submitted under an event it does not belong to."""

    code = "CROSS_EVENT_MISMATCH"
    status_code = 400


class TimeConflict(AdmissionError):
    """The session overlaps another session the actor holds in the same event."""

    code = "TIME_CONFLICT"
    status_code = 409


class DuplicateSelection(AdmissionError):
    code = "DUPLICATE_SELECTION"
    status_code = 400


class InconsistentState(AdmissionError):
    """
    A compensating release failed after a multi-resource registration was
    aborted. Capacity counters may be too high and need manual reconciliation.
    """

    code = "INCONSISTENT_STATE"
    status_code = 500

    def __init__(self, message: str, resource=None, stranded: Optional[list] = None):
        super().__init__(message, resource=resource)
        self.stranded = stranded or []

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload["stranded"] = [
            {"resourceType": ref.kind, "resourceId": ref.id} for ref in self.stranded
        ]
        return payload
