import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock
from sqlalchemy.orm import Session

from eventhub.constants.registration import RegistrationStatus, ResourceKind
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
from eventhub.services import admission as admission_module
from eventhub.services.admission import AdmissionController, ResourceRef
from tests.utils.event import create_random_event, create_random_session


def actor_id(n: int) -> str:
    return f"act_{n:012d}"


def _reserved(db: Session, obj) -> int:
    db.refresh(obj)
    return obj.reserved_count


def _active_rows(db: Session, actor: str):
    return crud_registration.registration.get_active_by_actor(db, actor_id=actor)


# --- reserve -----------------------------------------------------------------


def test_reserve_never_exceeds_capacity(db: Session) -> None:
    event = create_random_event(db, capacity=3)
    controller = AdmissionController(db)

    admitted, refused = 0, 0
    for n in range(8):
        try:
            controller.reserve(ResourceRef.event(event.id), actor_id(n), "attendee")
            admitted += 1
        except ResourceFull as exc:
            assert exc.resource == ResourceRef.event(event.id)
            refused += 1

    assert admitted == 3
    assert refused == 5
    assert _reserved(db, event) == 3
    assert crud_registration.registration.count_active_by_resource(
        db, resource_type=ResourceKind.EVENT, resource_id=event.id
    ) == 3


def test_reserve_twice_raises_already_registered(db: Session) -> None:
    event = create_random_event(db, capacity=10)
    controller = AdmissionController(db)

    reservation = controller.reserve(ResourceRef.event(event.id), actor_id(1), "attendee")
    assert reservation.reserved_count == 1
    assert reservation.registration.status == RegistrationStatus.REGISTERED

    with pytest.raises(AlreadyRegistered):
        controller.reserve(ResourceRef.event(event.id), actor_id(1), "attendee")
    assert _reserved(db, event) == 1


def test_reserve_unknown_resource_raises_not_found(db: Session) -> None:
    controller = AdmissionController(db)
    with pytest.raises(NotFound):
        controller.reserve(ResourceRef.session("ses_000000000000"), actor_id(1), "attendee")


def test_reserve_unbounded_session(db: Session) -> None:
    event = create_random_event(db)
    session = create_random_session(db, event.id, capacity=0)
    controller = AdmissionController(db)

    for n in range(5):
        controller.reserve(ResourceRef.session(session.id), actor_id(n), "attendee")
    assert _reserved(db, session) == 5


def test_lost_insert_race_gives_the_seat_back(db: Session, monkeypatch) -> None:
    """
    The duplicate check passed but the unique index rejects the insert
    (another request registered the same actor in between).
    """
    event = create_random_event(db, capacity=5)
    controller = AdmissionController(db)
    controller.reserve(ResourceRef.event(event.id), actor_id(1), "attendee")

    monkeypatch.setattr(
        crud_registration.registration, "get_active", lambda *a, **kw: None
    )
    with pytest.raises(AlreadyRegistered):
        controller.reserve(ResourceRef.event(event.id), actor_id(1), "attendee")

    assert _reserved(db, event) == 1


def test_insert_failure_releases_the_seat_and_propagates(db: Session, monkeypatch) -> None:
    event = create_random_event(db, capacity=5)
    controller = AdmissionController(db)

    monkeypatch.setattr(
        crud_registration.registration,
        "create_active",
        MagicMock(side_effect=RuntimeError("connection reset")),
    )
    with pytest.raises(RuntimeError):
        controller.reserve(ResourceRef.event(event.id), actor_id(1), "attendee")

    assert _reserved(db, event) == 0


# --- reserve_many --------------------------------------------------------------


def test_reserve_many_is_all_or_nothing(db: Session) -> None:
    event = create_random_event(db, capacity=10)
    s1 = create_random_session(db, event.id, capacity=5, title="Open")
    s2 = create_random_session(db, event.id, capacity=1, title="Tiny")
    controller = AdmissionController(db)

    # Someone else takes the only seat of s2
    controller.reserve(ResourceRef.session(s2.id), actor_id(99), "attendee")

    with pytest.raises(ResourceFull) as exc_info:
        controller.reserve_many(event.id, [s1.id, s2.id], actor_id(1), "attendee")

    assert exc_info.value.resource == ResourceRef.session(s2.id)
    assert _reserved(db, event) == 0
    assert _reserved(db, s1) == 0
    assert _reserved(db, s2) == 1
    assert _active_rows(db, actor_id(1)) == []


def test_reserve_many_success_returns_event_then_sessions(db: Session) -> None:
    event = create_random_event(db, capacity=10)
    s1 = create_random_session(db, event.id, capacity=5)
    s2 = create_random_session(db, event.id, capacity=5)
    controller = AdmissionController(db)

    registrations = controller.reserve_many(event.id, [s2.id, s1.id], actor_id(1), "speaker")

    assert [(r.resource_type, r.resource_id) for r in registrations] == [
        (ResourceKind.EVENT, event.id),
        (ResourceKind.SESSION, s2.id),
        (ResourceKind.SESSION, s1.id),
    ]
    assert all(r.actor_role == "speaker" for r in registrations)
    assert _reserved(db, event) == 1
    assert _reserved(db, s1) == 1
    assert _reserved(db, s2) == 1


def test_reserve_many_already_registered_for_event_keeps_existing_seat(db: Session) -> None:
    event = create_random_event(db, capacity=10)
    s1 = create_random_session(db, event.id, capacity=5)
    controller = AdmissionController(db)
    controller.reserve(ResourceRef.event(event.id), actor_id(1), "attendee")

    with pytest.raises(AlreadyRegistered):
        controller.reserve_many(event.id, [s1.id], actor_id(1), "attendee")

    assert _reserved(db, event) == 1
    assert _reserved(db, s1) == 0


def test_reserve_many_rejects_duplicates_before_reserving(db: Session) -> None:
    event = create_random_event(db, capacity=10)
    s1 = create_random_session(db, event.id, capacity=5)
    controller = AdmissionController(db)

    with pytest.raises(DuplicateSelection):
        controller.reserve_many(event.id, [s1.id, s1.id], actor_id(1), "attendee")

    assert _reserved(db, event) == 0
    assert _reserved(db, s1) == 0


def test_reserve_many_rejects_session_of_another_event(db: Session) -> None:
    event = create_random_event(db, capacity=10)
    other = create_random_event(db, capacity=10)
    foreign = create_random_session(db, other.id, capacity=5)
    controller = AdmissionController(db)

    with pytest.raises(CrossEventMismatch) as exc_info:
        controller.reserve_many(event.id, [foreign.id], actor_id(1), "attendee")

    assert exc_info.value.resource == ResourceRef.session(foreign.id)
    assert _reserved(db, event) == 0
    assert _reserved(db, foreign) == 0


def test_reserve_many_unknown_session_raises_not_found(db: Session) -> None:
    event = create_random_event(db, capacity=10)
    controller = AdmissionController(db)

    with pytest.raises(NotFound):
        controller.reserve_many(event.id, ["ses_000000000000"], actor_id(1), "attendee")
    assert _reserved(db, event) == 0


def test_reserve_many_publishes_one_event_per_registration(db: Session, monkeypatch) -> None:
    event = create_random_event(db)
    s1 = create_random_session(db, event.id)
    publish = MagicMock(return_value=True)
    monkeypatch.setattr(
        admission_module.kafka_helpers, "publish_registration_event", publish
    )

    AdmissionController(db).reserve_many(event.id, [s1.id], actor_id(1), "attendee")

    assert publish.call_count == 2
    assert {c.args[0] for c in publish.call_args_list} == {"REGISTRATION_CREATED"}


def test_failed_compensation_raises_inconsistent_state(db: Session, monkeypatch) -> None:
    event = create_random_event(db, capacity=10)
    s1 = create_random_session(db, event.id, capacity=5)
    s2 = create_random_session(db, event.id, capacity=1)
    controller = AdmissionController(db)
    controller.reserve(ResourceRef.session(s2.id), actor_id(99), "attendee")


    def broken_delete(db_, registration_id, *, commit=True):
        raise RuntimeError("database went away")

    monkeypatch.setattr(crud_registration.registration, "delete", broken_delete)

    with pytest.raises(InconsistentState) as exc_info:
        controller.reserve_many(event.id, [s1.id, s2.id], actor_id(1), "attendee")

    stranded = exc_info.value.stranded
    assert ResourceRef.event(event.id) in stranded
    assert ResourceRef.session(s1.id) in stranded
    assert exc_info.value.to_dict()["code"] == "INCONSISTENT_STATE"
    assert isinstance(exc_info.value.__cause__, ResourceFull)



# --- release -----------------------------------------------------------------


def test_release_is_idempotent(db: Session) -> None:
    event = create_random_event(db)
    session = create_random_session(db, event.id, capacity=2)
    controller = AdmissionController(db)
    reservation = controller.reserve(ResourceRef.session(session.id), actor_id(1), "attendee")
    registration_id = reservation.registration.id

    cancelled = controller.release(ResourceRef.session(session.id), actor_id(1))
    assert cancelled.id == registration_id
    assert cancelled.status == RegistrationStatus.CANCELLED
    assert controller.release(ResourceRef.session(session.id), actor_id(1)) is None
    assert _reserved(db, session) == 0

    row = db.get(Registration, registration_id)
    assert row.cancelled_at is not None


def test_release_without_registration_leaves_counter(db: Session) -> None:
    event = create_random_event(db, capacity=2)
    controller = AdmissionController(db)
    controller.reserve(ResourceRef.event(event.id), actor_id(1), "attendee")

    assert controller.release(ResourceRef.event(event.id), actor_id(2)) is None
    assert _reserved(db, event) == 1


def test_release_frees_a_seat_for_someone_else(db: Session) -> None:
    event = create_random_event(db, capacity=1)
    controller = AdmissionController(db)
    controller.reserve(ResourceRef.event(event.id), actor_id(1), "attendee")

    with pytest.raises(ResourceFull):
        controller.reserve(ResourceRef.event(event.id), actor_id(2), "attendee")

    controller.release(ResourceRef.event(event.id), actor_id(1))
    controller.reserve(ResourceRef.event(event.id), actor_id(2), "attendee")
    assert _reserved(db, event) == 1


def test_release_all_refunds_event_and_sessions(db: Session) -> None:
    event = create_random_event(db, capacity=5)
    s1 = create_random_session(db, event.id, capacity=5)
    s2 = create_random_session(db, event.id, capacity=5)
    controller = AdmissionController(db)
    controller.reserve_many(event.id, [s1.id, s2.id], actor_id(1), "attendee")

    assert controller.release_all(event.id, actor_id(1)) == 3
    assert controller.release_all(event.id, actor_id(1)) == 0
    assert _reserved(db, event) == 0
    assert _reserved(db, s1) == 0
    assert _reserved(db, s2) == 0
    assert _active_rows(db, actor_id(1)) == []


def test_capacity_crud_is_chosen_by_resource_kind(db: Session) -> None:
    controller = AdmissionController(db)
    assert controller._capacity(ResourceRef.event("evt_x")) is crud_capacity.event_capacity
    assert controller._capacity(ResourceRef.session("ses_x")) is crud_capacity.session_capacity


# --- time conflicts ----------------------------------------------------------

MORNING = datetime(2030, 5, 1, 9, 0, tzinfo=timezone.utc)


def _slot(db: Session, event_id: str, start_hour: float, hours: float = 1, **kwargs):
    start = MORNING + timedelta(hours=start_hour)
    return create_random_session(
        db, event_id, start_time=start, end_time=start + timedelta(hours=hours), **kwargs
    )


def test_overlapping_selection_is_refused_before_any_seat(db: Session) -> None:
    event = create_random_event(db, capacity=5)
    keynote = _slot(db, event.id, 0, hours=2, capacity=5)
    workshop = _slot(db, event.id, 1, capacity=5)
    controller = AdmissionController(db)

    with pytest.raises(TimeConflict) as exc_info:
        controller.reserve_many(event.id, [keynote.id, workshop.id], actor_id(1), "attendee")

    assert exc_info.value.resource == ResourceRef.session(workshop.id)
    assert _reserved(db, event) == 0
    assert _reserved(db, keynote) == 0
    assert _reserved(db, workshop) == 0
    assert _active_rows(db, actor_id(1)) == []


def test_overlap_with_an_already_booked_session_is_refused(db: Session) -> None:
    event = create_random_event(db, capacity=5)
    other_event = create_random_event(db, capacity=5)
    keynote = _slot(db, event.id, 0, capacity=5)
    clash = _slot(db, event.id, 0.5, capacity=5)
    controller = AdmissionController(db)
    controller.reserve_many(event.id, [keynote.id], actor_id(1), "attendee")
    controller.release(ResourceRef.event(event.id), actor_id(1))

    with pytest.raises(TimeConflict):
        controller.reserve_many(event.id, [clash.id], actor_id(1), "attendee")
    assert _reserved(db, clash) == 0

    # Another actor is not affected, nor is the same slot in another event
    controller.reserve_many(event.id, [clash.id], actor_id(2), "attendee")
    other_slot = _slot(db, other_event.id, 0, capacity=5)
    controller.reserve_many(other_event.id, [other_slot.id], actor_id(1), "attendee")


def test_back_to_back_sessions_do_not_conflict(db: Session) -> None:
    event = create_random_event(db, capacity=5)
    first = _slot(db, event.id, 0, capacity=5)
    second = _slot(db, event.id, 1, capacity=5)
    untimed = create_random_session(db, event.id, capacity=5)
    untimed.start_time = None
    untimed.end_time = None
    db.commit()

    registrations = AdmissionController(db).reserve_many(
        event.id, [first.id, second.id, untimed.id], actor_id(1), "attendee"
    )
    assert len(registrations) == 4


def test_cancelled_session_booking_no_longer_conflicts(db: Session) -> None:
    event = create_random_event(db, capacity=5)
    keynote = _slot(db, event.id, 0, capacity=5)
    clash = _slot(db, event.id, 0, capacity=5)
    controller = AdmissionController(db)
    controller.reserve_many(event.id, [keynote.id], actor_id(1), "attendee")
    controller.release_all(event.id, actor_id(1))

    controller.reserve_many(event.id, [clash.id], actor_id(1), "attendee")
    assert _reserved(db, clash) == 1


# --- retire_session ----------------------------------------------------------


def test_retire_session_cancels_registrations_and_archives(db: Session) -> None:
    event = create_random_event(db, capacity=5)
    session = create_random_session(db, event.id, capacity=5)
    controller = AdmissionController(db)
    controller.reserve_many(event.id, [session.id], actor_id(1), "attendee")
    controller.reserve_many(event.id, [session.id], actor_id(2), "attendee")

    assert controller.retire_session(session.id) == 2

    db.refresh(session)
    assert session.is_archived is True
    assert session.reserved_count == 0
    assert crud_registration.registration.count_active_by_resource(
        db, resource_type=ResourceKind.SESSION, resource_id=session.id
    ) == 0
    # Event seats are untouched
    assert _reserved(db, event) == 2
    assert [r.resource_type for r in _active_rows(db, actor_id(1))] == [ResourceKind.EVENT]


def test_archived_session_is_not_found(db: Session) -> None:
    event = create_random_event(db, capacity=5)
    session = create_random_session(db, event.id, capacity=5)
    controller = AdmissionController(db)
    controller.retire_session(session.id)

    with pytest.raises(NotFound):
        controller.reserve(ResourceRef.session(session.id), actor_id(1), "attendee")
    with pytest.raises(NotFound):
        controller.reserve_many(event.id, [session.id], actor_id(1), "attendee")
    with pytest.raises(NotFound):
        controller.retire_session(session.id)
    assert _reserved(db, event) == 0
    assert crud_capacity.session_capacity.increment_if_available(db, session.id) is None


def test_retire_session_rolls_back_on_failure(db: Session, monkeypatch) -> None:
    event = create_random_event(db, capacity=5)
    session = create_random_session(db, event.id, capacity=5)
    controller = AdmissionController(db)
    controller.reserve_many(event.id, [session.id], actor_id(1), "attendee")

    monkeypatch.setattr(
        crud_registration.registration,
        "cancel_all_for_resource",
        MagicMock(side_effect=RuntimeError("connection lost")),
    )
    with pytest.raises(RuntimeError):
        controller.retire_session(session.id)

    db.refresh(session)
    assert session.is_archived is False
    assert session.reserved_count == 1
