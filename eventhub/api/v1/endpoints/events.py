#eventhub/api/v1/endpoints/events.py
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from eventhub.api import deps
from eventhub.crud import crud_capacity, crud_event, crud_session
from eventhub.schemas.event import (
    CapacityUpdate,
    Event,
    EventCreate,
    EventSeats,
    SeatInfo,
    SessionSeats,
)
from eventhub.schemas.session import (
    ProgramRoom,
    ProgramRoomCreate,
    Session as SessionSchema,
    SessionCreate,
    SessionRetired,
)
from eventhub.services.admission import AdmissionController
from eventhub.utils.validators import validate_event_id, validate_session_id

router = APIRouter(tags=["Events"])


def _get_event_or_404(db: Session, event_id: str):
    validate_event_id(event_id)
    event = crud_event.event.get_active(db, event_id=event_id)
    if not event:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Event not found"
        )
    return event


@router.post("/events", response_model=Event, status_code=status.HTTP_201_CREATED)
def create_event(event_in: EventCreate, db: Session = Depends(deps.get_db)):
    """
    Create an event. `capacity` 0 leaves it unbounded.
    """
    return crud_event.event.create(db, obj_in=event_in)


@router.post(
    "/events/{eventId}/rooms",
    response_model=ProgramRoom,
    status_code=status.HTTP_201_CREATED,
)
def create_room(
    eventId: str, room_in: ProgramRoomCreate, db: Session = Depends(deps.get_db)
):
    _get_event_or_404(db, eventId)
    return crud_session.program_room.create_for_event(
        db, obj_in=room_in, event_id=eventId
    )


@router.post(
    "/events/{eventId}/sessions",
    response_model=SessionSchema,
    status_code=status.HTTP_201_CREATED,
)
def create_session(
    eventId: str, session_in: SessionCreate, db: Session = Depends(deps.get_db)
):
    """
    Create a session. Without an explicit capacity it inherits its room's.
    """
    _get_event_or_404(db, eventId)
    if session_in.room_id:
        room = crud_session.session.get_room(db, room_id=session_in.room_id)
        if not room or room.event_id != eventId:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Room does not belong to this event",
            )
    return crud_session.session.create_with_event(
        db, obj_in=session_in, event_id=eventId
    )


@router.patch("/events/{eventId}/capacity", response_model=Event)
def update_event_capacity(
    eventId: str, capacity_in: CapacityUpdate, db: Session = Depends(deps.get_db)
):
    """
    Change the event capacity. It cannot drop below the seats already taken.
    """
    _get_event_or_404(db, eventId)
    updated = crud_capacity.event_capacity.update_capacity(
        db, eventId, capacity_in.capacity
    )
    if updated is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Capacity cannot be lower than the number of registrations",
        )
    return crud_event.event.get(db, eventId)


@router.patch("/sessions/{sessionId}/capacity", response_model=SessionSchema)
def update_session_capacity(
    sessionId: str, capacity_in: CapacityUpdate, db: Session = Depends(deps.get_db)
):
    validate_session_id(sessionId)
    session_obj = crud_session.session.get(db, sessionId)
    if not session_obj or session_obj.is_archived:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Session not found"
        )
    updated = crud_capacity.session_capacity.update_capacity(
        db, sessionId, capacity_in.capacity
    )
    if updated is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Capacity cannot be lower than the number of registrations",
        )
    return crud_session.session.get(db, sessionId)


@router.delete("/sessions/{sessionId}", response_model=SessionRetired)
def delete_session(
    sessionId: str,
    admission: AdmissionController = Depends(deps.get_admission_controller),
):
    """
    Archive a session. Every live registration on it is cancelled in the
    same transaction and its seats are dropped.
    """
    validate_session_id(sessionId)
    cancelled = admission.retire_session(sessionId)
    return SessionRetired(session_id=sessionId, cancelled_registrations=cancelled)


@router.get("/events/{eventId}/seats", response_model=EventSeats)
def get_event_seats(eventId: str, db: Session = Depends(deps.get_db)):
    """
    Seats per session: capacity, taken and remaining (null when unbounded).
    """
    event = _get_event_or_404(db, eventId)
    sessions = crud_session.session.get_multi_by_event(db, event_id=eventId)
    return EventSeats(
        event_id=event.id,
        seats=SeatInfo(**crud_capacity.event_capacity.seat_info(event)),
        sessions=[
            SessionSeats(
                session_id=s.id,
                title=s.title,
                room_name=s.room.name if s.room else None,
                seats=SeatInfo(**crud_capacity.session_capacity.seat_info(s)),
            )
            for s in sessions
        ],
    )
