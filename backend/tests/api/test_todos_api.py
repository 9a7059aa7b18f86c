"""Integration tests for the todo endpoints."""

from __future__ import annotations

from tests.helpers.http import API, assert_problem, bearer, signup


def _create(client, token, **payload):
    resp = client.post(f"{API}/todos", headers=bearer(token), json=payload)
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["data"]


def test_anonymous_and_owner_listing_scenario(client) -> None:
    """A guest sees public todos only; the owner also sees private ones."""

    owner = signup(client, "owner@example.com")
    token = owner["token"]
    public = _create(client, token, title="Public task")
    _create(client, token, title="Private task", is_public=False)

    guest = client.get(f"{API}/todos").get_json()
    assert [t["title"] for t in guest["data"]] == ["Public task"]
    assert guest["data"][0]["owner"] == "anonymous"
    assert guest["meta"]["total"] == 1

    mine = client.get(f"{API}/todos", headers=bearer(token)).get_json()
    assert sorted(t["title"] for t in mine["data"]) == ["Private task", "Public task"]
    assert {t["owner"] for t in mine["data"]} == {owner["user"]["id"]}

    detail = client.get(f"{API}/todos/{public['id']}").get_json()["data"]
    assert detail["title"] == "Public task"


def test_bad_token_on_optional_route_falls_back_to_guest(client) -> None:
    token = signup(client, "fallback@example.com")["token"]
    _create(client, token, title="Hidden", is_public=False)

    resp = client.get(f"{API}/todos", headers=bearer("garbage"))

    assert resp.status_code == 200
    assert resp.get_json()["data"] == []


def test_private_todo_and_mutations_are_owner_only(client) -> None:
    alice = signup(client, "alice@example.com")["token"]
    bob = signup(client, "bob@example.com")["token"]
    private = _create(client, alice, title="Secret", is_public=False)
    public = _create(client, alice, title="Shared")

    assert_problem(client.get(f"{API}/todos/{private['id']}", headers=bearer(bob)), 403, "permission_denied")
    assert_problem(
        client.put(f"{API}/todos/{public['id']}", headers=bearer(bob), json={"title": "x"}),
        403,
        "permission_denied",
    )
    assert_problem(client.delete(f"{API}/todos/{public['id']}", headers=bearer(bob)), 403, "permission_denied")
    assert_problem(client.get(f"{API}/todos/999999", headers=bearer(bob)), 404, "not_found")
    assert_problem(client.post(f"{API}/todos", json={"title": "anon"}), 403, "authentication_required")


def test_update_toggle_delete(client) -> None:
    token = signup(client, "crud@example.com")["token"]
    todo = _create(client, token, title="Draft", priority="low")

    updated = client.put(
        f"{API}/todos/{todo['id']}", headers=bearer(token), json={"title": "Final", "priority": "high"}
    ).get_json()["data"]
    assert (updated["title"], updated["priority"]) == ("Final", "high")

    toggled = client.patch(f"{API}/todos/{todo['id']}/toggle", headers=bearer(token)).get_json()["data"]
    assert toggled["completed"] is True

    assert client.delete(f"{API}/todos/{todo['id']}", headers=bearer(token)).get_json() == {"deleted": True}
    assert client.get(f"{API}/todos/{todo['id']}", headers=bearer(token)).status_code == 404


def test_schema_validation(client) -> None:
    token = signup(client, "valid@example.com")["token"]
    resp = client.post(f"{API}/todos", headers=bearer(token), json={"title": "", "priority": "urgent"})
    errors = assert_problem(resp, 422, "validation_error")["details"]["errors"]
    assert {"title", "priority"} <= set(errors)


def test_mine_search_stats_and_bulk_complete(client) -> None:
    token = signup(client, "bulk@example.com")["token"]
    first = _create(client, token, title="Groceries", tags=["home"], priority="high")
    _create(client, token, title="Taxes", is_public=False)

    assert len(client.get(f"{API}/todos/mine", headers=bearer(token)).get_json()["data"]) == 2
    assert [t["title"] for t in client.get(f"{API}/todos/search?q=groc").get_json()["data"]] == ["Groceries"]
    assert client.get(f"{API}/todos?tag=home").get_json()["meta"]["total"] == 1

    resp = client.post(f"{API}/todos/bulk-complete", headers=bearer(token), json={"ids": [first["id"]]})
    assert resp.get_json() == {"count": 1}

    stats = client.get(f"{API}/todos/stats", headers=bearer(token)).get_json()["data"]
    assert stats == {"total": 2, "completed": 1, "public": 1, "high_priority": 1, "overdue": 0}
    assert_problem(client.get(f"{API}/todos/stats"), 403, "authentication_required")


def test_pagination_meta(client) -> None:
    token = signup(client, "pages@example.com")["token"]
    for n in range(3):
        _create(client, token, title=f"Item {n}")

    body = client.get(f"{API}/todos?limit=2&page=2&sort=title").get_json()

    assert [t["title"] for t in body["data"]] == ["Item 2"]
    assert body["meta"] == {
        "total": 3,
        "page": 2,
        "limit": 2,
        "pages": 2,
        "has_next": False,
        "has_prev": True,
    }
