"""
Tests for the message CRUD endpoints.
"""

from datetime import datetime

import pytest

from msgboard.models import Message


PROTECTED = [
    ("get", "/messages", None),
    ("post", "/messages/save", {"text": "hi"}),
    ("put", "/messages/update?id=1", {"text": "hi"}),
    ("delete", "/messages/delete?id=1", None),
]


@pytest.mark.parametrize("method,path,body", PROTECTED)
def test_requires_login(client, method, path, body):
    kwargs = {"json": body} if body is not None else {}
    response = client.request(method.upper(), path, **kwargs)
    assert response.status_code == 401


def test_scenario_owner_only_delete(client, new_client, login_as):
    """alice posts, bob cannot delete it, alice can."""
    login_as(client, "alice")
    response = client.post("/messages/save", json={"text": "hi"})
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == 1
    assert data["text"] == "hi"
    assert data["username"] == "alice"
    assert data["user_id"] == 1

    bob = new_client()
    login_as(bob, "bob")
    assert bob.delete("/messages/delete?id=1").status_code == 403

    response = client.delete("/messages/delete?id=1")
    assert response.status_code == 200
    assert response.json() == {"message": "Message deleted"}

    assert client.get("/messages").json() == []


def test_create_then_list(client, login_as):
    login_as(client, "alice")
    client.post("/messages/save", json={"text": "hello"})

    messages = client.get("/messages").json()
    assert len(messages) == 1
    assert messages[0]["text"] == "hello"
    assert messages[0]["timestamp"]


def test_timestamp_is_server_side(client, login_as):
    login_as(client, "alice")
    response = client.post(
        "/messages/save",
        json={"text": "hello", "timestamp": "2000-01-01T00:00:00", "user_id": 99},
    )
    data = response.json()
    assert not data["timestamp"].startswith("2000")
    assert data["user_id"] == 1


def test_empty_text_is_accepted(client, login_as):
    login_as(client, "alice")
    response = client.post("/messages/save", json={"text": ""})
    assert response.status_code == 200
    assert response.json()["text"] == ""


def test_save_malformed_body(client, login_as):
    login_as(client, "alice")
    assert client.post("/messages/save", json={}).status_code == 400
    assert client.post("/messages/save", json={"text": None}).status_code == 400


def test_list_newest_first_across_users(client, new_client, login_as):
    login_as(client, "alice")
    bob = new_client()
    login_as(bob, "bob")

    client.post("/messages/save", json={"text": "a1"})
    bob.post("/messages/save", json={"text": "b1"})
    client.post("/messages/save", json={"text": "a2"})
    bob.post("/messages/save", json={"text": "b2"})

    messages = bob.get("/messages").json()
    assert [m["text"] for m in messages] == ["b2", "a2", "b1", "a1"]
    assert [m["username"] for m in messages] == ["bob", "alice", "bob", "alice"]

    timestamps = [datetime.fromisoformat(m["timestamp"]) for m in messages]
    assert timestamps == sorted(timestamps, reverse=True)


def test_update_own_message(client, login_as):
    login_as(client, "alice")
    created = client.post("/messages/save", json={"text": "draft"}).json()

    response = client.put(f"/messages/update?id={created['id']}", json={"text": "final"})
    assert response.status_code == 200
    data = response.json()
    assert data == {"id": created["id"], "text": "final", "timestamp": created["timestamp"]}

    assert client.get("/messages").json()[0]["text"] == "final"


def test_update_by_other_user_is_forbidden(client, new_client, login_as):
    login_as(client, "alice")
    created = client.post("/messages/save", json={"text": "mine"}).json()

    bob = new_client()
    login_as(bob, "bob")
    response = bob.put(f"/messages/update?id={created['id']}", json={"text": "hacked"})
    assert response.status_code == 403

    assert client.get("/messages").json()[0]["text"] == "mine"


def test_delete_by_other_user_leaves_row(client, new_client, login_as):
    login_as(client, "alice")
    created = client.post("/messages/save", json={"text": "mine"}).json()

    bob = new_client()
    login_as(bob, "bob")
    assert bob.delete(f"/messages/delete?id={created['id']}").status_code == 403

    assert len(client.get("/messages").json()) == 1


def test_missing_message_is_404(client, login_as):
    login_as(client, "alice")
    assert client.put("/messages/update?id=42", json={"text": "x"}).status_code == 404
    assert client.delete("/messages/delete?id=42").status_code == 404


def test_missing_or_bad_id_is_400(client, login_as):
    login_as(client, "alice")
    assert client.delete("/messages/delete").status_code == 400
    assert client.delete("/messages/delete?id=abc").status_code == 400
    assert client.put("/messages/update", json={"text": "x"}).status_code == 400


def test_out_of_range_id_is_400(client, login_as):
    """Ids SQLite cannot store are rejected before reaching the database."""
    login_as(client, "alice")
    too_big = 2**70
    assert client.delete(f"/messages/delete?id={too_big}").status_code == 400
    assert client.put(f"/messages/update?id={too_big}", json={"text": "x"}).status_code == 400
    assert client.delete("/messages/delete?id=0").status_code == 400
    assert client.delete(f"/messages/delete?id={2**63 - 1}").status_code == 404


def test_anonymous_body_checks(client):
    """The body is parsed before the login check, so bad JSON is 400."""
    bad_json = client.put(
        "/messages/update?id=1",
        content="{not json",
        headers={"Content-Type": "application/json"},
    )
    assert bad_json.status_code == 400

    missing_text = client.put("/messages/update?id=1", json={})
    assert missing_text.status_code == 401


def test_update_malformed_body(client, login_as):
    login_as(client, "alice")
    created = client.post("/messages/save", json={"text": "draft"}).json()
    response = client.put(f"/messages/update?id={created['id']}", json={"body": "x"})
    assert response.status_code == 400


def test_store_failure_is_500(client, app, login_as):
    login_as(client, "alice")
    Message.__table__.drop(bind=app.state.engine)

    response = client.get("/messages")
    assert response.status_code == 500
    assert response.json() == {"detail": "Database error"}
