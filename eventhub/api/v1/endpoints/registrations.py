#eventhub/api/v1/endpoints/registrations.py
from typing import List
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from eventhub.api import deps
from eventhub.crud import crud_registration
from eventhub.schemas.registration import (
    Registration,
    RegistrationCreate,
    ReleaseSummary,
)
from eventhub.services.admission import AdmissionController, ResourceRef
from eventhub.utils.validators import (
    validate_actor_id,
    validate_event_id,
    validate_session_id,
    validate_session_ids,
)

router = APIRouter(tags=["Registrations"])


@router.post(
    "/events/{eventId}/registrations",
    response_model=List[Registration],
    status_code=status.HTTP_201_CREATED,
)
def create_registration(
    eventId: str,
    registration_in: RegistrationCreate,
    admission: AdmissionController = Depends(deps.get_admission_controller),
):
    """
    Register an actor for an event and, optionally, some of its sessions.

    The registration is all-or-nothing: when the event or any selected
    session is full the response is a 409 naming that resource and no seat
    is kept.
    """
    validate_event_id(eventId)
    validate_actor_id(registration_in.actor_id)
    validate_session_ids(registration_in.session_ids)

    return admission.reserve_many(
        eventId,
        registration_in.session_ids,
        registration_in.actor_id,
        registration_in.actor_role,
    )


@router.delete(
    "/events/{eventId}/registrations/{actorId}",
    response_model=ReleaseSummary,
)
def cancel_event_registration(
    eventId: str,
    actorId: str,
    admission: AdmissionController = Depends(deps.get_admission_controller),
):
    """
    Refund path: cancel the actor's event registration and all of their
    session registrations within the event. Safe to retry.
    """
    validate_event_id(eventId)
    validate_actor_id(actorId)
    released = admission.release_all(eventId, actorId)
    return ReleaseSummary(event_id=eventId, actor_id=actorId, released=released)


@router.delete(
    "/sessions/{sessionId}/registrations/{actorId}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def cancel_session_registration(
    sessionId: str,
    actorId: str,
    admission: AdmissionController = Depends(deps.get_admission_controller),
):
    """Give up a session seat. Cancelling twice is not an error."""
    validate_session_id(sessionId)
    validate_actor_id(actorId)
    admission.release(ResourceRef.session(sessionId), actorId)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/actors/{actorId}/registrations", response_model=List[Registration])
def list_actor_registrations(
    actorId: str,
    eventId: str | None = None,
    db: Session = Depends(deps.get_db),
):
    """Active registrations of an actor, the event registration first."""
    validate_actor_id(actorId)
    return crud_registration.registration.get_active_by_actor(
        db, actor_id=actorId, event_id=eventId
    )
