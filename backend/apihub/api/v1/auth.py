"""Authentication and token lifecycle endpoints."""

from __future__ import annotations

from flask import Blueprint, current_app, g, request

from apihub.api.deps import (
    build_auth_service,
    build_token_service,
    json_response,
    require_auth,
    timing,
)
from apihub.core.extensions import limiter
from apihub.schemas import (
    IssuedTokenSchema,
    LoginSchema,
    ProfileUpdateSchema,
    RevokeSchema,
    RotateSchema,
    RotationSchema,
    SignupSchema,
    TokenSummarySchema,
    UserSchema,
)
from apihub.services.auth.dto import LoginIn, ProfileUpdateIn, SignupIn

bp = Blueprint("auth", __name__, url_prefix="/auth")

signup_schema = SignupSchema()
login_schema = LoginSchema()
profile_update_schema = ProfileUpdateSchema()
rotate_schema = RotateSchema()
revoke_schema = RevokeSchema()
issued_schema = IssuedTokenSchema()
rotation_schema = RotationSchema()
user_schema = UserSchema()
token_list_schema = TokenSummarySchema(many=True)


def _auth_rate_limit() -> str:
    return str(current_app.config.get("AUTH_RATE_LIMIT", "20 per 15 minutes"))


@bp.post("/signup")
@limiter.limit(_auth_rate_limit)
@timing
def signup():
    """Create an account and return its first token."""

    data = signup_schema.load(request.get_json(silent=True) or {})
    issued = build_auth_service().signup(SignupIn(**data))
    return json_response(issued_schema.dump(issued), status=201)


@bp.post("/login")
@limiter.limit(_auth_rate_limit)
@timing
def login():
    """Authenticate credentials and issue a new token."""

    data = login_schema.load(request.get_json(silent=True) or {})
    issued = build_auth_service().login(LoginIn(**data))
    return json_response(issued_schema.dump(issued))


@bp.get("/me")
@require_auth
@timing
def me():
    """Return the authenticated user."""

    user = build_auth_service().get_user(g.current_user_email)
    return json_response({"user": user_schema.dump(user)})


@bp.put("/update")
@require_auth
@timing
def update_profile():
    """Change the caller's name and/or password."""

    data = profile_update_schema.load(request.get_json(silent=True) or {})
    user = build_auth_service().update_profile(g.current_user_email, ProfileUpdateIn(**data))
    return json_response({"user": user_schema.dump(user)})


@bp.post("/rotate")
@require_auth
@timing
def rotate():
    """Swap the request's token for a new one, revoking the old one unless told not to."""

    data = rotate_schema.load(request.get_json(silent=True) or {})
    rotation = build_token_service().rotate(g.token, revoke_old=data["revoke_old"])
    return json_response(rotation_schema.dump(rotation))


@bp.get("/tokens")
@require_auth
@timing
def list_tokens():
    """Active tokens of the caller; only prefixes are returned."""

    tokens = build_token_service().list_active(g.current_user_email)
    return json_response({"tokens": token_list_schema.dump(tokens), "count": len(tokens)})


@bp.post("/revoke")
@require_auth
@timing
def revoke():
    """Revoke one of the caller's tokens (defaults to the request's own token)."""

    data = revoke_schema.load(request.get_json(silent=True) or {})
    target = data["token"] or g.token
    revoked = build_token_service().revoke(target, email=g.current_user_email)
    return json_response({"revoked": revoked})


@bp.post("/revoke-all")
@require_auth
@timing
def revoke_all():
    """Revoke every active token of the caller, including the request's own."""

    count = build_token_service().revoke_all(g.current_user_email)
    return json_response({"count": count})
