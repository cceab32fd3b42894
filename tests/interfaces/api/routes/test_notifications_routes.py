"""Integration tests for the notification API endpoints."""

from __future__ import annotations

from datetime import timedelta

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from digest_api.domain.entities import Notification
from digest_api.infrastructure.repositories import NotificationRepository
from digest_api.infrastructure.security import create_access_token
from digest_api.utils import now_in_app_timezone


@pytest.fixture()
def client():
    from main import create_app

    with TestClient(create_app()) as test_client:
        yield test_client


def _auth(username: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(username)}"}


def _store(session, recipient: str, *, read: bool = False, type_: str = "dm") -> Notification:
    return NotificationRepository(session).create(
        Notification(
            id=None,
            recipient=recipient,
            type=type_,
            title="New message",
            message=f"Message for {recipient}",
            read=read,
        )
    )


def _seed_recent_activity(factory, username: str) -> None:
    recent = now_in_app_timezone() - timedelta(hours=1)
    chat = factory.chat(username, "bob")
    factory.message(chat, "bob", recent)
    factory.message(chat, "bob", recent + timedelta(minutes=1))
    community = factory.community("Alpha", members=(username,))
    factory.question(community, "bob", recent, title="Interview prep?")


def test_requests_without_valid_token_are_rejected(client, factory):
    factory.user("alice")

    assert client.get("/notifications/").status_code == 401
    response = client.get("/notifications/", headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401
    assert client.get("/notifications/", headers=_auth("ghost")).status_code == 401


def test_list_and_count_notifications(client, factory, session):
    factory.user("alice")
    _store(session, "alice")
    _store(session, "alice", read=True)
    _store(session, "bob")

    listing = client.get("/notifications/", headers=_auth("alice"))
    unread = client.get("/notifications/?unread_only=true", headers=_auth("alice"))
    count = client.get("/notifications/count", headers=_auth("alice"))

    assert listing.status_code == 200
    assert len(listing.json()) == 2
    assert all(item["recipient"] == "alice" for item in listing.json())
    assert len(unread.json()) == 1
    assert count.json() == {"count": 1}


def test_generate_summary_for_unconfigured_user(client, factory):
    factory.user("alice", summarized=False)

    response = client.post("/notifications/summary", headers=_auth("alice"))

    assert response.status_code == 400


def test_generate_summary_with_nothing_to_report(client, factory):
    factory.user("alice")

    response = client.post("/notifications/summary", headers=_auth("alice"))

    assert response.status_code == 200
    assert response.json() == {"message": "No new notifications to summarize"}


def test_generate_summary_and_expand_breakdown(client, factory):
    factory.user("alice")
    factory.user("bob")
    _seed_recent_activity(factory, "alice")

    response = client.post("/notifications/summary", headers=_auth("alice"))

    assert response.status_code == 200
    body = response.json()
    assert body["type"] == "summary"
    assert body["message"] == (
        "Summary: 2 new DM messages; 1 new question in followed communities (Alpha: 1)"
    )

    breakdown = client.get(
        f"/notifications/{body['id']}/summary-breakdown", headers=_auth("alice")
    )
    assert breakdown.status_code == 200
    detail = breakdown.json()
    assert [thread["count"] for thread in detail["dm_messages"].values()] == [2]
    assert [group["community_name"] for group in detail["community_questions"].values()] == [
        "Alpha"
    ]
    assert detail["job_fairs"] == []

    foreign = client.get(
        f"/notifications/{body['id']}/summary-breakdown", headers=_auth("bob")
    )
    assert foreign.status_code == 404


def test_breakdown_of_plain_notification_is_not_found(client, factory, session):
    factory.user("alice")
    plain = _store(session, "alice")

    response = client.get(
        f"/notifications/{plain.id}/summary-breakdown", headers=_auth("alice")
    )

    assert response.status_code == 404


def test_breakdown_since_override(client, factory, session):
    factory.user("alice")
    _seed_recent_activity(factory, "alice")
    summary = client.post("/notifications/summary", headers=_auth("alice")).json()
    later = (now_in_app_timezone() - timedelta(minutes=1)).isoformat()

    response = client.get(
        f"/notifications/{summary['id']}/summary-breakdown",
        params={"since": later},
        headers=_auth("alice"),
    )

    assert response.status_code == 200
    assert response.json()["dm_messages"] == {}


def test_mark_read_read_all_and_clear(client, factory, session):
    factory.user("alice")
    first = _store(session, "alice")
    _store(session, "alice")
    other = _store(session, "bob")

    single = client.patch(f"/notifications/{first.id}/read", headers=_auth("alice"))
    assert single.status_code == 200
    assert single.json()["read"] is True

    forbidden = client.patch(f"/notifications/{other.id}/read", headers=_auth("alice"))
    assert forbidden.status_code == 404

    read_all = client.patch("/notifications/read-all", headers=_auth("alice"))
    assert read_all.json() == {"affected": 1}
    assert client.get("/notifications/count", headers=_auth("alice")).json() == {"count": 0}

    cleared = client.delete("/notifications/clear-all", headers=_auth("alice"))
    assert cleared.json() == {"affected": 2}
    assert client.get("/notifications/", headers=_auth("alice")).json() == []


def test_websocket_init_ping_and_ack(client, factory, session):
    factory.user("alice")
    pending = _store(session, "alice")
    token = create_access_token("alice")

    with client.websocket_connect(f"/notifications/ws?token={token}") as websocket:
        init = websocket.receive_json()
        assert init["type"] == "init"
        assert [item["id"] for item in init["data"]] == [pending.id]

        websocket.send_json({"type": "ping"})
        assert websocket.receive_json() == {"type": "pong"}

        websocket.send_json({"type": "ack", "ids": [pending.id]})
        websocket.send_json({"type": "ping"})
        assert websocket.receive_json() == {"type": "pong"}

    assert client.get("/notifications/count", headers=_auth("alice")).json() == {"count": 0}


def test_summary_is_pushed_to_connected_client(client, factory):
    factory.user("alice")
    _seed_recent_activity(factory, "alice")
    token = create_access_token("alice")

    with client.websocket_connect(f"/notifications/ws?token={token}") as websocket:
        assert websocket.receive_json()["type"] == "init"

        response = client.post("/notifications/summary", headers=_auth("alice"))
        pushed = websocket.receive_json()

    assert pushed["type"] == "notification"
    assert pushed["data"]["id"] == response.json()["id"]
    assert pushed["data"]["type"] == "summary"
