from datetime import datetime, timedelta, timezone
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from tests.utils.event import create_random_event, create_random_session

ACTOR = "act_0123456789ab"


def test_register_for_event_and_sessions(client: TestClient, db: Session) -> None:
    event = create_random_event(db, capacity=10)
    s1 = create_random_session(db, event.id, capacity=5)
    data = {"actor_id": ACTOR, "actor_role": "attendee", "session_ids": [s1.id]}

    response = client.post(f"/api/v1/events/{event.id}/registrations", json=data)

    assert response.status_code == 201
    content = response.json()
    assert [r["resource_type"] for r in content] == ["event", "session"]
    assert all(r["status"] == "registered" for r in content)
    assert content[1]["resource_id"] == s1.id


def test_full_session_returns_409_and_keeps_no_seat(client: TestClient, db: Session) -> None:
    event = create_random_event(db, capacity=10)
    s1 = create_random_session(db, event.id, capacity=1)
    first = {"actor_id": "act_aaaaaaaaaaaa", "actor_role": "attendee", "session_ids": [s1.id]}
    second = {"actor_id": ACTOR, "actor_role": "attendee", "session_ids": [s1.id]}

    assert client.post(f"/api/v1/events/{event.id}/registrations", json=first).status_code == 201
    response = client.post(f"/api/v1/events/{event.id}/registrations", json=second)

    assert response.status_code == 409
    content = response.json()
    assert content["code"] == "RESOURCE_FULL"
    assert content["resourceType"] == "session"
    assert content["resourceId"] == s1.id

    seats = client.get(f"/api/v1/events/{event.id}/seats").json()
    assert seats["seats"]["taken"] == 1


def test_duplicate_registration_returns_409(client: TestClient, db: Session) -> None:
    event = create_random_event(db)
    data = {"actor_id": ACTOR, "actor_role": "attendee"}

    assert client.post(f"/api/v1/events/{event.id}/registrations", json=data).status_code == 201
    response = client.post(f"/api/v1/events/{event.id}/registrations", json=data)

    assert response.status_code == 409
    assert response.json()["code"] == "ALREADY_REGISTERED"


def test_unknown_event_returns_404(client: TestClient) -> None:
    data = {"actor_id": ACTOR, "actor_role": "attendee"}
    response = client.post("/api/v1/events/evt_000000000000/registrations", json=data)

    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


def test_malformed_ids_and_roles_are_rejected(client: TestClient, db: Session) -> None:
    event = create_random_event(db)

    bad_path = client.post(
        "/api/v1/events/not-an-id/registrations",
        json={"actor_id": ACTOR, "actor_role": "attendee"},
    )
    bad_role = client.post(
        f"/api/v1/events/{event.id}/registrations",
        json={"actor_id": ACTOR, "actor_role": "wizard"},
    )

    assert bad_path.status_code == 400
    assert bad_role.status_code == 422


def test_duplicate_session_selection_returns_400(client: TestClient, db: Session) -> None:
    event = create_random_event(db)
    s1 = create_random_session(db, event.id)
    data = {"actor_id": ACTOR, "actor_role": "attendee", "session_ids": [s1.id, s1.id]}

    response = client.post(f"/api/v1/events/{event.id}/registrations", json=data)

    assert response.status_code == 400
    assert response.json()["code"] == "DUPLICATE_SELECTION"


def test_refund_releases_everything_and_is_repeatable(client: TestClient, db: Session) -> None:
    event = create_random_event(db, capacity=3)
    s1 = create_random_session(db, event.id, capacity=3)
    data = {"actor_id": ACTOR, "actor_role": "attendee", "session_ids": [s1.id]}
    client.post(f"/api/v1/events/{event.id}/registrations", json=data)

    first = client.delete(f"/api/v1/events/{event.id}/registrations/{ACTOR}")
    again = client.delete(f"/api/v1/events/{event.id}/registrations/{ACTOR}")

    assert first.status_code == 200
    assert first.json()["released"] == 2
    assert again.json()["released"] == 0

    seats = client.get(f"/api/v1/events/{event.id}/seats").json()
    assert seats["seats"]["taken"] == 0
    assert seats["sessions"][0]["seats"]["taken"] == 0


def test_cancel_session_registration_is_idempotent(client: TestClient, db: Session) -> None:
    event = create_random_event(db)
    s1 = create_random_session(db, event.id, capacity=2)
    data = {"actor_id": ACTOR, "actor_role": "attendee", "session_ids": [s1.id]}
    client.post(f"/api/v1/events/{event.id}/registrations", json=data)

    assert client.delete(f"/api/v1/sessions/{s1.id}/registrations/{ACTOR}").status_code == 204
    assert client.delete(f"/api/v1/sessions/{s1.id}/registrations/{ACTOR}").status_code == 204

    remaining = client.get(f"/api/v1/actors/{ACTOR}/registrations").json()
    assert [r["resource_type"] for r in remaining] == ["event"]


def test_list_registrations_filtered_by_event(client: TestClient, db: Session) -> None:
    event = create_random_event(db)
    other = create_random_event(db)
    for target in (event, other):
        client.post(
            f"/api/v1/events/{target.id}/registrations",
            json={"actor_id": ACTOR, "actor_role": "attendee"},
        )

    response = client.get(f"/api/v1/actors/{ACTOR}/registrations", params={"eventId": event.id})

    assert response.status_code == 200
    assert [r["event_id"] for r in response.json()] == [event.id]


def test_overlapping_sessions_return_409(client: TestClient, db: Session) -> None:
    event = create_random_event(db, capacity=10)
    start = datetime(2030, 5, 1, 9, 0, tzinfo=timezone.utc)
    keynote = create_random_session(
        db, event.id, capacity=5, start_time=start, end_time=start + timedelta(hours=2)
    )
    panel = create_random_session(
        db, event.id, capacity=5, start_time=start + timedelta(hours=1)
    )
    data = {"actor_id": ACTOR, "actor_role": "attendee", "session_ids": [keynote.id, panel.id]}

    response = client.post(f"/api/v1/events/{event.id}/registrations", json=data)

    assert response.status_code == 409
    content = response.json()
    assert content["code"] == "TIME_CONFLICT"
    assert content["resourceId"] == panel.id
    seats = client.get(f"/api/v1/events/{event.id}/seats").json()
    assert seats["seats"]["taken"] == 0
