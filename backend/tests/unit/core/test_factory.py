"""Application factory wiring."""

from __future__ import annotations


def test_blueprints_mounted(app) -> None:
    rules = {rule.rule for rule in app.url_map.iter_rules()}

    assert "/api/v1/health" in rules
    assert "/api/v1/auth/signup" in rules
    assert "/api/v1/todos/<int:todo_id>" in rules
    assert "/api/v1/notes/<int:note_id>/pin" in rules
    assert "/api/v1/urls/shorten" in rules
    assert "/s/<code>" in rules


def test_shell_context_exposes_models(app) -> None:
    context = app.make_shell_context()

    assert {"db", "User", "Token", "Todo", "Note", "Url"} <= set(context)


def test_cli_group_registered(app) -> None:
    result = app.test_cli_runner().invoke(args=["tokens", "--help"])

    assert result.exit_code == 0
    assert "revoke-all" in result.output


def test_unknown_route_is_problem_json(client) -> None:
    resp = client.get("/api/v1/nope")

    assert resp.status_code == 404
    assert resp.mimetype == "application/problem+json"
    assert resp.get_json()["detail"] == "Route '/api/v1/nope' not found"
