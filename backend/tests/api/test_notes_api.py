"""Integration tests for the note endpoints."""

from __future__ import annotations

from tests.helpers.http import API, assert_problem, bearer, signup


def test_note_lifecycle(client) -> None:
    owner = signup(client, "writer@example.com")["token"]
    reader = signup(client, "reader@example.com")["token"]

    created = client.post(
        f"{API}/notes",
        headers=bearer(owner),
        json={"title": "Snippet", "content": "print(1)", "content_type": "code", "language": "python"},
    )
    assert created.status_code == 201
    note = created.get_json()["data"]
    assert note["is_public"] is False

    assert_problem(client.get(f"{API}/notes/{note['id']}", headers=bearer(reader)), 403, "permission_denied")

    client.put(f"{API}/notes/{note['id']}", headers=bearer(owner), json={"is_public": True, "is_gist": True})
    viewed = client.get(f"{API}/notes/{note['id']}", headers=bearer(reader)).get_json()["data"]
    assert viewed["view_count"] == 1
    assert viewed["owner"] == "anonymous"

    own_view = client.get(f"{API}/notes/{note['id']}", headers=bearer(owner)).get_json()["data"]
    assert own_view["view_count"] == 1

    pinned = client.patch(f"{API}/notes/{note['id']}/pin", headers=bearer(owner)).get_json()["data"]
    assert pinned["is_pinned"] is True

    stats = client.get(f"{API}/notes/stats", headers=bearer(owner)).get_json()["data"]
    assert stats == {"total": 1, "public": 1, "gists": 1, "pinned": 1, "total_views": 1}

    assert client.get(f"{API}/notes?is_gist=true").get_json()["meta"]["total"] == 1
    assert len(client.get(f"{API}/notes/search?q=snip").get_json()["data"]) == 1

    assert_problem(client.delete(f"{API}/notes/{note['id']}", headers=bearer(reader)), 403, "permission_denied")
    assert client.delete(f"{API}/notes/{note['id']}", headers=bearer(owner)).status_code == 200


def test_language_requires_code(client) -> None:
    token = signup(client, "lang@example.com")["token"]
    resp = client.post(
        f"{API}/notes", headers=bearer(token), json={"title": "t", "content": "c", "language": "go"}
    )
    assert "language" in assert_problem(resp, 422, "validation_error")["details"]["errors"]


def test_mine_requires_auth(client) -> None:
    assert_problem(client.get(f"{API}/notes/mine"), 403, "authentication_required")
