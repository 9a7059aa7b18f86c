"""Short URL schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate

from apihub.services.urls.service import MAX_EXPIRES_IN_MS, MIN_EXPIRES_IN_MS


class ShortenSchema(Schema):
    """Payload for ``POST /urls/shorten``; ``expiresIn`` is in milliseconds."""

    url = fields.Url(required=True, schemes={"http", "https"}, require_tld=False)
    custom_alias = fields.String(
        load_default=None,
        validate=validate.Regexp(
            r"^[A-Za-z0-9_-]{3,50}$",
            error="Custom alias can only contain letters, numbers, hyphens, and underscores",
        ),
    )
    expires_in = fields.Integer(
        data_key="expiresIn",
        load_default=None,
        validate=validate.Range(min=MIN_EXPIRES_IN_MS, max=MAX_EXPIRES_IN_MS),
    )
    is_public = fields.Boolean(load_default=True)


class UrlListQuerySchema(Schema):
    class Meta:
        unknown = EXCLUDE

    limit = fields.Integer(load_default=None, validate=validate.Range(min=1))


class UrlSchema(Schema):
    """Representation of a short link; ``short_url`` is added by the endpoint."""

    short_code = fields.String(required=True)
    short_url = fields.String()
    original_url = fields.String(required=True)
    custom_alias = fields.String(allow_none=True)
    clicks = fields.Integer(required=True)
    is_active = fields.Boolean(required=True)
    is_public = fields.Boolean(required=True)
    expires_at = fields.DateTime(allow_none=True)
    domain = fields.String(allow_none=True)
    last_accessed_at = fields.DateTime(allow_none=True)
    owner = fields.Raw(allow_none=True)
    created_at = fields.DateTime(required=True)
