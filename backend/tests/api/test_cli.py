"""Tests for the ``flask tokens`` command group."""

from __future__ import annotations

from tests.factories.token import TokenFactory


def test_list_shows_prefixes_only(app, user, token) -> None:
    result = app.test_cli_runner().invoke(args=["tokens", "list", user.email])

    assert result.exit_code == 0
    assert f"{token[:20]}..." in result.output
    assert token not in result.output


def test_list_without_tokens(app, user) -> None:
    result = app.test_cli_runner().invoke(args=["tokens", "list", user.email])
    assert "(no active tokens)" in result.output


def test_revoke_all_with_confirmation(app, user) -> None:
    TokenFactory.create_batch(2, user=user)
    runner = app.test_cli_runner()

    aborted = runner.invoke(args=["tokens", "revoke-all", user.email], input="n\n")
    assert aborted.exit_code == 1

    result = runner.invoke(args=["tokens", "revoke-all", user.email, "--yes"])
    assert result.exit_code == 0
    assert f"Revoked 2 token(s) for {user.email}" in result.output


def test_chain_of_rotated_token(app, client, user, token) -> None:
    rotated = client.post(
        "/api/v1/auth/rotate", headers={"Authorization": f"Bearer {token}"}, json={}
    ).get_json()["token"]

    result = app.test_cli_runner().invoke(args=["tokens", "chain", rotated])

    assert result.exit_code == 0
    lines = result.output.strip().splitlines()
    assert len(lines) == 2
    assert "revoked" in lines[0]
    assert "active" in lines[1]


def test_chain_unknown_token(app) -> None:
    result = app.test_cli_runner().invoke(args=["tokens", "chain", "nope"])

    assert result.exit_code == 1
    assert "Token not found" in result.output
