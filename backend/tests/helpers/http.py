"""HTTP helper utilities for tests."""

from __future__ import annotations

API = "/api/v1"


def bearer(token: str | None) -> dict[str, str]:
    """Return an ``Authorization`` header for ``token`` (empty for guests)."""

    return {"Authorization": f"Bearer {token}"} if token else {}


def signup(client, email: str, password: str = "secret123", name: str = "Tester") -> dict:
    """Create an account through the API and return the JSON body."""

    resp = client.post(f"{API}/auth/signup", json={"email": email, "password": password, "name": name})
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()


def assert_problem(resp, status: int, code: str) -> dict:
    """Check an RFC 7807 error response and return its body."""

    assert resp.status_code == status, resp.get_json()
    assert resp.mimetype == "application/problem+json"
    body = resp.get_json()
    assert body["code"] == code
    assert body["request_id"]
    return body
