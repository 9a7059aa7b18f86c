"""Startup security validation.

Refuses to build the application when token signing cannot be trusted. Runs
from :func:`apihub.factory.create_app` before any request is served.
"""

from __future__ import annotations

import logging

from flask import Flask

logger = logging.getLogger(__name__)

PLACEHOLDER_SECRETS = frozenset({"", "CHANGE_ME", "CHANGE_ME_JWT", "changeme", "secret"})


class StartupCheckError(RuntimeError):
    """Raised when a startup security check fails."""


def run_startup_checks(app: Flask) -> None:
    """
    Validate security invariants for ``app``.

    Raises:
        StartupCheckError: If any check fails
    """
    errors: list[str] = []
    _check_signing_secret(app, errors)
    if app.config.get("ENV_NAME") == "production":
        _check_production_safety(app, errors)

    if errors:
        for error in errors:
            logger.error("Startup security check failed", extra={"event": error})
        raise StartupCheckError(
            f"Startup blocked, {len(errors)} check(s) failed:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )

    logger.info("Startup security checks passed")


def _check_signing_secret(app: Flask, errors: list[str]) -> None:
    """The token signing secret must exist; nothing can be validated without it."""
    secret = app.config.get("JWT_SECRET_KEY")
    if not secret or not str(secret).strip():
        errors.append("JWT_SECRET_KEY is not configured")


def _check_production_safety(app: Flask, errors: list[str]) -> None:
    secret = str(app.config.get("JWT_SECRET_KEY") or "")
    if secret in PLACEHOLDER_SECRETS:
        errors.append("JWT_SECRET_KEY uses a placeholder value")
    min_length = int(app.config.get("JWT_SECRET_MIN_LENGTH", 0))
    if secret and len(secret) < min_length:
        errors.append(f"JWT_SECRET_KEY must be at least {min_length} characters")
    if app.config.get("SECRET_KEY") in PLACEHOLDER_SECRETS:
        errors.append("SECRET_KEY uses a placeholder value")
