"""Flask CLI commands for operating on the token ledger."""

from __future__ import annotations

import logging

import click
from flask import current_app
from flask.cli import with_appcontext

from apihub.infra.jwt.provider import JWTTokenProvider
from apihub.services._shared.errors import NotFoundError
from apihub.services.tokens.service import TokenService

LOGGER = logging.getLogger(__name__)


def _service() -> TokenService:
    return TokenService(
        token_provider=JWTTokenProvider(),
        prefix_length=int(current_app.config.get("TOKEN_PREFIX_LENGTH", 20)),
    )


def _fmt(value: object) -> str:
    return "-" if value is None else str(value)


@click.group("tokens")
def tokens_cli() -> None:
    """Inspect and revoke bearer tokens."""


@tokens_cli.command("revoke-all")
@click.argument("email")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt.")
@with_appcontext
def revoke_all_command(email: str, yes: bool) -> None:
    """Revoke every active token of EMAIL."""
    if not yes:
        click.confirm(f"Revoke all active tokens of {email}?", abort=True)
    count = _service().revoke_all(email)
    LOGGER.info("Revoked tokens from CLI", extra={"event": "cli.revoke_all", "count": count})
    click.echo(f"Revoked {count} token(s) for {email}")


@tokens_cli.command("list")
@click.argument("email")
@with_appcontext
def list_command(email: str) -> None:
    """List the active tokens of EMAIL, newest first."""
    tokens = _service().list_active(email)
    if not tokens:
        click.echo("  (no active tokens)")
        return
    for t in tokens:
        click.echo(
            f"  {t.token}  created={_fmt(t.created_at)}  "
            f"last_used={_fmt(t.last_used_at)}  {t.description}"
        )


@tokens_cli.command("chain")
@click.argument("token")
@with_appcontext
def chain_command(token: str) -> None:
    """Print the rotation chain containing TOKEN, oldest first."""
    try:
        chain = _service().trace_chain(token)
    except NotFoundError as exc:
        raise click.ClickException("Token not found") from exc
    for index, link in enumerate(chain, start=1):
        click.echo(
            f"  {index:>2}. {link.token}  {link.status:<7}  {link.description}  "
            f"created={_fmt(link.created_at)}  revoked={_fmt(link.revoked_at)}"
        )
