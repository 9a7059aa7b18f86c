"""Integration tests for the URL shortener endpoints."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from freezegun import freeze_time

from tests.helpers.http import API, assert_problem, bearer, signup


def _shorten(client, token=None, **payload):
    return client.post(f"{API}/urls/shorten", headers=bearer(token), json=payload)


def test_anonymous_shorten_and_follow(client) -> None:
    resp = _shorten(client, url="https://example.com/page", is_public=False)
    assert resp.status_code == 201
    data = resp.get_json()["data"]
    assert data["is_public"] is True
    assert data["owner"] is None
    assert data["short_url"].endswith(f"/s/{data['short_code']}")

    info = client.get(f"{API}/urls/info/{data['short_code']}").get_json()["data"]
    assert info["clicks"] == 1

    redirect = client.get(f"/s/{data['short_code']}")
    assert redirect.status_code == 301
    assert redirect.headers["Location"] == "https://example.com/page"

    stats = client.get(f"{API}/urls/stats/{data['short_code']}").get_json()["data"]
    assert stats["clicks"] == 2


def test_alias_collision_and_validation(client) -> None:
    token = signup(client, "alias@example.com")["token"]
    assert _shorten(client, token, url="https://a.example", custom_alias="promo").status_code == 201

    taken = _shorten(client, url="https://b.example", custom_alias="promo")
    assert assert_problem(taken, 409, "conflict")["detail"] == "This alias is already taken"

    assert_problem(_shorten(client, url="ftp://nope"), 422, "validation_error")
    assert_problem(_shorten(client, url="https://x.example", expiresIn=10), 422, "validation_error")


def test_expired_and_private_links(client) -> None:
    # Tokens carry "nbf", so mint them inside the frozen clock
    with freeze_time(datetime(2026, 1, 1, tzinfo=UTC)):
        account = signup(client, "links@example.com")
        owner = account["token"]
        other = signup(client, "other@example.com")["token"]
        expiring = _shorten(client, owner, url="https://soon.example", expiresIn=60_000).get_json()["data"]
        assert expiring["owner"] == account["user"]["id"]
    with freeze_time(datetime(2026, 1, 1, tzinfo=UTC) + timedelta(minutes=2)):
        assert_problem(client.get(f"{API}/urls/info/{expiring['short_code']}"), 410, "gone")

    private = _shorten(client, owner, url="https://private.example", is_public=False).get_json()["data"]
    assert_problem(
        client.get(f"{API}/urls/stats/{private['short_code']}", headers=bearer(other)), 403, "permission_denied"
    )
    assert client.get(f"{API}/urls/stats/{private['short_code']}", headers=bearer(owner)).status_code == 200


def test_list_and_delete(client) -> None:
    owner = signup(client, "mine@example.com")["token"]
    other = signup(client, "notmine@example.com")["token"]
    link = _shorten(client, owner, url="https://mine.example").get_json()["data"]

    listing = client.get(f"{API}/urls", headers=bearer(owner)).get_json()
    assert listing["count"] == 1
    assert listing["data"][0]["short_code"] == link["short_code"]

    assert_problem(client.delete(f"{API}/urls/{link['short_code']}", headers=bearer(other)), 403, "permission_denied")
    assert client.delete(f"{API}/urls/{link['short_code']}", headers=bearer(owner)).status_code == 200
    assert_problem(client.get(f"/s/{link['short_code']}"), 404, "not_found")
