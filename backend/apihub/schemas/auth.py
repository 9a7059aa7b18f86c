"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from typing import Any

from flask import current_app
from marshmallow import Schema, ValidationError, fields, validate, validates, validates_schema


def _min_length(key: str, default: int) -> int:
    return int(current_app.config.get(key, default))


class PasswordPolicyMixin:
    """Length checks driven by ``AUTH_PASSWORD_MIN_LENGTH`` / ``AUTH_NAME_MIN_LENGTH``."""

    def _check_password(self, value: str | None) -> None:
        if value is None:
            return
        minimum = _min_length("AUTH_PASSWORD_MIN_LENGTH", 5)
        if len(value) < minimum:
            raise ValidationError(f"Password must be at least {minimum} characters")

    def _check_name(self, value: str | None) -> None:
        if value is None:
            return
        minimum = _min_length("AUTH_NAME_MIN_LENGTH", 2)
        if len(value.strip()) < minimum:
            raise ValidationError(f"Name must be at least {minimum} characters")


class SignupSchema(PasswordPolicyMixin, Schema):
    """Input payload for account creation."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(max=128))
    name = fields.String(required=True, validate=validate.Length(max=100))

    @validates("password")
    def validate_password(self, value: str, **_: Any) -> None:
        self._check_password(value)

    @validates("name")
    def validate_name(self, value: str, **_: Any) -> None:
        self._check_name(value)


class LoginSchema(Schema):
    """Input payload for authenticating a user."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class ProfileUpdateSchema(PasswordPolicyMixin, Schema):
    """Partial profile update; at least one field."""

    name = fields.String(load_default=None, validate=validate.Length(max=100))
    password = fields.String(load_default=None, validate=validate.Length(max=128))

    @validates("password")
    def validate_password(self, value: str | None, **_: Any) -> None:
        self._check_password(value)

    @validates("name")
    def validate_name(self, value: str | None, **_: Any) -> None:
        self._check_name(value)

    @validates_schema
    def require_one(self, data: dict[str, Any], **_: Any) -> None:
        if data.get("name") is None and data.get("password") is None:
            raise ValidationError("Provide at least one of: name, password")


class RotateSchema(Schema):
    revoke_old = fields.Boolean(data_key="revokeOld", load_default=True)


class RevokeSchema(Schema):
    """``token`` defaults to the bearer token of the request."""

    token = fields.String(load_default=None, validate=validate.Length(min=1))


class UserSchema(Schema):
    """Public identity details."""

    id = fields.Integer(required=True)
    email = fields.Email(required=True)
    name = fields.String(required=True)


class IssuedTokenSchema(Schema):
    """Response of signup and login."""

    token = fields.String(required=True)
    user = fields.Nested(UserSchema, required=True)


class RotationSchema(Schema):
    token = fields.String(required=True)
    user = fields.Nested(UserSchema, required=True)
    revoked_old = fields.Boolean(data_key="revokedOldToken", required=True)


class TokenSummarySchema(Schema):
    """Listing row; ``token`` is a truncated prefix."""

    token = fields.String(required=True)
    created_at = fields.DateTime(required=True)
    last_used_at = fields.DateTime(allow_none=True)
    description = fields.String(required=True)
    is_active = fields.Boolean(required=True)
