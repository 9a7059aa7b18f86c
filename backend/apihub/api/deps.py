"""Shared API helpers: auth enforcement, request parsing and service wiring."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from flask import Response, current_app, g, jsonify, request

from apihub.core.logger import ensure_request_id
from apihub.infra.jwt.provider import JWTTokenProvider
from apihub.schemas.common import PaginationQuerySchema
from apihub.services._shared.base import ServiceContext
from apihub.services._shared.errors import (
    AuthenticationRequiredError,
    AuthError,
    InvalidTokenFormatError,
)
from apihub.services.auth.dto import CredentialPolicy
from apihub.services.auth.service import AuthService
from apihub.services.tokens.service import TokenService

F = TypeVar("F", bound=Callable[..., Any])
S = TypeVar("S")

BEARER_PREFIX = "Bearer "


@dataclass(slots=True)
class Pagination:
    """Container holding pagination arguments parsed from the request."""

    page: int
    limit: int
    sort: list[str]


def parse_pagination() -> Pagination:
    """Parse pagination parameters from ``request.args`` using Marshmallow."""

    schema = PaginationQuerySchema(
        default_limit=int(current_app.config.get("PAGINATION_DEFAULT_LIMIT", 50)),
        max_limit=int(current_app.config.get("PAGINATION_MAX_LIMIT", 100)),
    )
    data = schema.load(request.args)
    return Pagination(page=data["page"], limit=data["limit"], sort=data["sort"])


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


# --------------------------------------------------------------------------- #
# Service wiring
# --------------------------------------------------------------------------- #


def service_context() -> ServiceContext:
    """Build the request-scoped context from the identity set by the auth decorators."""

    return ServiceContext(
        actor_id=g.get("current_user_id"),
        actor_email=g.get("current_user_email"),
        request_id=ensure_request_id(),
    )


def build_token_service() -> TokenService:
    return TokenService(
        token_provider=JWTTokenProvider(),
        prefix_length=int(current_app.config.get("TOKEN_PREFIX_LENGTH", 20)),
        ctx=service_context(),
    )


def build_auth_service() -> AuthService:
    policy = CredentialPolicy(
        password_min_length=int(current_app.config.get("AUTH_PASSWORD_MIN_LENGTH", 5)),
        name_min_length=int(current_app.config.get("AUTH_NAME_MIN_LENGTH", 2)),
    )
    return AuthService(token_service=build_token_service(), policy=policy, ctx=service_context())


def build_service(cls: Callable[..., S]) -> S:
    """Instantiate a resource service bound to the current caller."""

    return cls(ctx=service_context())


# --------------------------------------------------------------------------- #
# Auth enforcement
# --------------------------------------------------------------------------- #


def bearer_token() -> str:
    """Extract the bearer token from ``Authorization``.

    :raises AuthenticationRequiredError: Header missing.
    :raises InvalidTokenFormatError: Header present but not ``Bearer <token>``.
    """
    header = request.headers.get("Authorization")
    if not header:
        raise AuthenticationRequiredError()
    if not header.startswith(BEARER_PREFIX) or not header[len(BEARER_PREFIX) :].strip():
        raise InvalidTokenFormatError()
    return header[len(BEARER_PREFIX) :].strip()


def _set_identity(email: str | None, token: str | None) -> None:
    # Always assign: ``g`` may outlive a single request when the app context is reused.
    g.current_user_email = email
    g.token = token
    g.current_user_id = build_auth_service().resolve_user_id(email) if email else None


def authenticate() -> None:
    """Validate the request's bearer token and attach the caller to ``g``.

    :raises AuthError: With a stable ``reason`` on any failure.
    """
    _set_identity(None, None)
    token = bearer_token()
    email = build_token_service().validate(token)
    _set_identity(email, token)


def require_auth(func: F) -> F:
    """Reject the request (403) unless it carries a valid, active token."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        authenticate()
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def optional_auth(func: F) -> F:
    """Attach the caller when a valid token is present; otherwise proceed as guest."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        try:
            authenticate()
        except AuthError as exc:
            if not isinstance(exc, AuthenticationRequiredError):
                current_app.logger.info(
                    "Ignoring bad credential on optional-auth route: %s",
                    exc.reason,
                    extra={"event": "auth.guest_fallback"},
                )
            _set_identity(None, None)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
