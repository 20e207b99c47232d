# eventhub/services/admission.py
"""
Admission control for capacity-bounded resources (events and sessions).

Seats are taken with a single conditional UPDATE per resource, so concurrent
request handlers, in this process or any other, can never push
`reserved_count` past `capacity`. A registration spanning an event and
several sessions is made all-or-nothing by releasing every seat granted so
far when a later one is refused.

The controller performs no retries and holds no locks. SQLAlchemy errors
(lost connection, timeouts) propagate as they are; they are never reported
as a full resource.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventhub.constants.registration import ResourceKind
from eventhub.core.exceptions import (
    AlreadyRegistered,
    CrossEventMismatch,
    DuplicateSelection,
    InconsistentState,
    NotFound,
    ResourceFull,
    TimeConflict,
)
from eventhub.crud import crud_capacity, crud_registration
from eventhub.models.registration import Registration
from eventhub.utils import kafka_helpers

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResourceRef:
    kind: str
    id: str

    @classmethod
    def event(cls, event_id: str) -> "ResourceRef":
        return cls(ResourceKind.EVENT, event_id)

    @classmethod
    def session(cls, session_id: str) -> "ResourceRef":
        return cls(ResourceKind.SESSION, session_id)

    def __str__(self) -> str:
        return f"{self.kind} {self.id}"


@dataclass
class Reservation:
    resource: ResourceRef
    registration: Registration
    reserved_count: int


_CAPACITY = {
    ResourceKind.EVENT: crud_capacity.event_capacity,
    ResourceKind.SESSION: crud_capacity.session_capacity,
}


def _utc(value: datetime) -> datetime:
    # SQLite hands timezone-aware columns back naive
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def sessions_overlap(a, b) -> bool:
    """Half-open overlap of two sessions; a session without times never overlaps."""
    if None in (a.start_time, a.end_time, b.start_time, b.end_time):
        return False
    return not (
        _utc(a.end_time) <= _utc(b.start_time) or _utc(a.start_time) >= _utc(b.end_time)
    )


class AdmissionController:
    def __init__(self, db: Session):
        self.db = db

    def _capacity(self, resource: ResourceRef):
        return _CAPACITY[resource.kind]

    def _load(self, resource: ResourceRef):
        obj = self._capacity(resource).get(self.db, resource.id)
        # Archived resources are gone as far as admission is concerned
        if obj is None or obj.is_archived:
            raise NotFound(f"{resource.kind.capitalize()} {resource.id} not found", resource)
        return obj

    def _event_id_of(self, resource: ResourceRef, obj) -> str:
        return obj.id if resource.kind == ResourceKind.EVENT else obj.event_id

    def reserve(
        self, resource: ResourceRef, actor_id: str, actor_role: str
    ) -> Reservation:
        """
        Take one seat on `resource` for `actor_id` and record the registration.

        Raises NotFound, AlreadyRegistered or ResourceFull; none of them leave
        a seat taken.
        """
        obj = self._load(resource)
        event_id = self._event_id_of(resource, obj)
        db = self.db

        existing = crud_registration.registration.get_active(
            db, resource_type=resource.kind, resource_id=resource.id, actor_id=actor_id
        )
        if existing:
            raise AlreadyRegistered(
                f"Actor {actor_id} is already registered for {resource}", resource
            )

        new_count = self._capacity(resource).increment_if_available(db, resource.id)
        if new_count is None:
            logger.info(
                f"Reservation rejected for actor {actor_id} - {resource} is full",
                extra={"actor_id": actor_id, "resource_id": resource.id},
            )
            raise ResourceFull(f"{resource.kind.capitalize()} is full", resource)

        try:
            registration = crud_registration.registration.create_active(
                db,
                resource_type=resource.kind,
                resource_id=resource.id,
                event_id=event_id,
                actor_id=actor_id,
                actor_role=actor_role,
            )
        except IntegrityError as exc:
            # Lost a race with a concurrent registration of the same actor.
            self._give_back_seat(resource, actor_id, cause=exc)
            raise AlreadyRegistered(
                f"Actor {actor_id} is already registered for {resource}", resource
            ) from exc
        except Exception as exc:
            self._give_back_seat(resource, actor_id, cause=exc)
            raise

        logger.info(
            f"Reserved {resource} for actor {actor_id} ({new_count} taken)",
            extra={"actor_id": actor_id, "resource_id": resource.id},
        )
        return Reservation(resource=resource, registration=registration, reserved_count=new_count)

    def _give_back_seat(self, resource: ResourceRef, actor_id: str, cause: Exception) -> None:
        try:
            self._capacity(resource).decrement(self.db, resource.id)
        except Exception as exc:
            self.db.rollback()
            logger.error(
                f"Failed to give back seat on {resource} for actor {actor_id}: {exc}",
                exc_info=True,
                extra={"actor_id": actor_id, "resource_id": resource.id},
            )
            raise InconsistentState(
                f"Seat on {resource} could not be released after a failed registration",
                resource,
                stranded=[resource],
            ) from cause

    def _check_time_conflicts(self, event_id: str, selected: list, actor_id: str) -> None:
        """Raise TimeConflict if the selection overlaps itself or the actor's booked sessions."""
        for i, first in enumerate(selected):
            for second in selected[i + 1:]:
                if sessions_overlap(first, second):
                    raise TimeConflict(
                        f"Session {second.id} overlaps session {first.id}",
                        ResourceRef.session(second.id),
                    )

        held_ids = [
            reg.resource_id
            for reg in crud_registration.registration.get_active_by_actor(
                self.db, actor_id=actor_id, event_id=event_id
            )
            if reg.resource_type == ResourceKind.SESSION
        ]
        held = crud_capacity.session_capacity.get_many(self.db, held_ids)
        for candidate in selected:
            for booked in held:
                if booked.id != candidate.id and sessions_overlap(candidate, booked):
                    raise TimeConflict(
                        f"Session {candidate.id} overlaps session {booked.id} "
                        f"already booked by actor {actor_id}",
                        ResourceRef.session(candidate.id),
                    )

    def reserve_many(
        self,
        event_id: str,
        session_ids: List[str],
        actor_id: str,
        actor_role: str,
    ) -> List[Registration]:
        """
        Register an actor for an event and a list of its sessions, all or nothing.

        The event is reserved first, then the sessions in the given order. If
        any of them is refused, every seat granted by this call is handed back
        before the original error is raised. If handing a seat back fails,
        InconsistentState is raised instead.
        """
        if len(set(session_ids)) != len(session_ids):
            raise DuplicateSelection("The same session was selected more than once")

        event_ref = ResourceRef.event(event_id)
        self._load(event_ref)

        sessions = {
            s.id: s
            for s in crud_capacity.session_capacity.get_many(self.db, session_ids)
        }
        for session_id in session_ids:
            session_ref = ResourceRef.session(session_id)
            session_obj = sessions.get(session_id)
            if session_obj is None or session_obj.is_archived:
                raise NotFound(f"Session {session_id} not found", session_ref)
            if session_obj.event_id != event_id:
                raise CrossEventMismatch(
                    f"Session {session_id} does not belong to event {event_id}",
                    session_ref,
                )
        self._check_time_conflicts(
            event_id, [sessions[session_id] for session_id in session_ids], actor_id
        )

        granted: List[Reservation] = []
        try:
            granted.append(self.reserve(event_ref, actor_id, actor_role))
            for session_id in session_ids:
                granted.append(
                    self.reserve(ResourceRef.session(session_id), actor_id, actor_role)
                )
        except Exception as exc:
            if granted:
                logger.warning(
                    f"Registration of actor {actor_id} for event {event_id} aborted: "
                    f"{exc}; releasing {len(granted)} seat(s)",
                    extra={"actor_id": actor_id, "event_id": event_id},
                )
            try:
                self._compensate(granted, actor_id, cause=exc)
            except InconsistentState as failure:
                if isinstance(exc, InconsistentState):
                    failure.stranded = exc.stranded + failure.stranded
                raise
            raise

        registrations = [reservation.registration for reservation in granted]
        for reg in registrations:
            kafka_helpers.publish_registration_event(
                kafka_helpers.REGISTRATION_CREATED, reg
            )
        return registrations

    def _compensate(
        self,
        granted: List[Reservation],
        actor_id: str,
        cause: Optional[Exception] = None,
    ) -> None:
        """Undo reservations newest first: drop the registration row, then the seat."""
        remaining = list(granted)
        while remaining:
            reservation = remaining[-1]
            try:
                crud_registration.registration.delete(
                    self.db, reservation.registration.id, commit=False
                )
                self._capacity(reservation.resource).decrement(
                    self.db, reservation.resource.id, commit=False
                )
                self.db.commit()
            except Exception as exc:
                self.db.rollback()
                stranded = [r.resource for r in remaining]
                logger.error(
                    f"Compensation failed for actor {actor_id}; "
                    f"{len(stranded)} seat(s) need manual reconciliation: {exc}",
                    exc_info=True,
                    extra={
                        "actor_id": actor_id,
                        "stranded": [str(ref) for ref in stranded],
                    },
                )
                raise InconsistentState(
                    "Registration was aborted but some seats could not be released",
                    reservation.resource,
                    stranded=stranded,
                ) from (cause or exc)
            remaining.pop()

    def release(self, resource: ResourceRef, actor_id: str) -> Optional[Registration]:
        """
        Cancel the actor's registration on `resource` and give the seat back.

        Idempotent: a missing or already-cancelled registration is a no-op
        and returns None; otherwise the cancelled registration is returned.
        """
        db = self.db
        try:
            cancelled_id = crud_registration.registration.cancel_active(
                db, resource_type=resource.kind, resource_id=resource.id, actor_id=actor_id
            )
            if cancelled_id is None:
                db.rollback()
                logger.info(f"No active registration for actor {actor_id} on {resource}")
                return None
            self._capacity(resource).decrement(db, resource.id, commit=False)
            # Status flip and seat release commit together
            db.commit()
        except Exception as e:
            logger.error(
                f"Failed to release {resource} for actor {actor_id}: {str(e)}",
                exc_info=True,
                extra={"actor_id": actor_id, "resource_id": resource.id},
            )
            db.rollback()
            raise

        logger.info(f"Released {resource} for actor {actor_id}")
        registration = crud_registration.registration.get(db, cancelled_id)
        kafka_helpers.publish_registration_event(
            kafka_helpers.REGISTRATION_CANCELLED, registration
        )
        return registration

    def release_all(self, event_id: str, actor_id: str) -> int:
        """
        Refund path: release the event seat and every session seat the actor
        holds within the event. Returns how many registrations were cancelled.
        """
        active = crud_registration.registration.get_active_by_actor(
            self.db, actor_id=actor_id, event_id=event_id
        )
        released = 0
        # Sessions first so the event seat is the last one given back
        for reg in sorted(active, key=lambda r: r.resource_type == ResourceKind.EVENT):
            ref = ResourceRef(reg.resource_type, reg.resource_id)
            if self.release(ref, actor_id) is not None:
                released += 1
        return released

    def retire_session(self, session_id: str) -> int:
        """
        Archive a session and cancel every live registration on it.

        Both happen in one transaction. Returns how many registrations were
        cancelled. Raises NotFound when the session is missing or already
        archived.
        """
        resource = ResourceRef.session(session_id)
        self._load(resource)
        db = self.db
        try:
            archived = crud_capacity.session_capacity.archive(db, session_id)
            cancelled_ids = crud_registration.registration.cancel_all_for_resource(
                db, resource_type=ResourceKind.SESSION, resource_id=session_id
            )
            if archived:
                db.commit()
            else:
                db.rollback()
        except Exception as e:
            logger.error(
                f"Failed to archive session {session_id}: {str(e)}",
                exc_info=True,
                extra={"resource_id": session_id},
            )
            db.rollback()
            raise

        if not archived:
            # Lost a race with a concurrent archive
            raise NotFound(f"Session {session_id} not found", resource)

        logger.info(
            f"Archived session {session_id}; cancelled {len(cancelled_ids)} registration(s)",
            extra={"resource_id": session_id},
        )
        for registration_id in cancelled_ids:
            kafka_helpers.publish_registration_event(
                kafka_helpers.REGISTRATION_CANCELLED,
                crud_registration.registration.get(db, registration_id),
            )
        return len(cancelled_ids)
