"""Note resource schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate

from apihub.models.note import CONTENT_TYPES

COLOR = validate.Regexp(r"^#[0-9A-Fa-f]{6}$", error="Color must look like #RRGGBB")


class NoteCreateSchema(Schema):
    """Payload for creating a note or gist."""

    title = fields.String(required=True, validate=validate.Length(min=1, max=200))
    content = fields.String(required=True, validate=validate.Length(max=100_000))
    content_type = fields.String(load_default="text", validate=validate.OneOf(CONTENT_TYPES))
    language = fields.String(load_default=None, validate=validate.Length(max=50))
    is_public = fields.Boolean(load_default=False)
    is_gist = fields.Boolean(load_default=False)
    is_pinned = fields.Boolean(load_default=False)
    tags = fields.List(fields.String(validate=validate.Length(min=1, max=30)), load_default=list)
    color = fields.String(load_default=None, validate=COLOR)


class NoteUpdateSchema(Schema):
    title = fields.String(validate=validate.Length(min=1, max=200))
    content = fields.String(validate=validate.Length(max=100_000))
    content_type = fields.String(validate=validate.OneOf(CONTENT_TYPES))
    language = fields.String(allow_none=True, validate=validate.Length(max=50))
    is_public = fields.Boolean()
    is_gist = fields.Boolean()
    is_pinned = fields.Boolean()
    tags = fields.List(fields.String(validate=validate.Length(min=1, max=30)))
    color = fields.String(allow_none=True, validate=COLOR)


class NoteFilterSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    content_type = fields.String(load_default=None, validate=validate.OneOf(CONTENT_TYPES))
    is_gist = fields.Boolean(load_default=None)
    tag = fields.String(load_default=None, validate=validate.Length(min=1, max=30))


class NoteSchema(Schema):
    """Representation of a note; ``owner`` is sanitized by the service."""

    id = fields.Integer(required=True)
    title = fields.String(required=True)
    content = fields.String(required=True)
    content_type = fields.String(required=True)
    language = fields.String(allow_none=True)
    is_public = fields.Boolean(required=True)
    is_gist = fields.Boolean(required=True)
    is_pinned = fields.Boolean(required=True)
    tags = fields.List(fields.String())
    color = fields.String(allow_none=True)
    view_count = fields.Integer(required=True)
    last_viewed_at = fields.DateTime(allow_none=True)
    owner = fields.Raw(allow_none=True)
    created_at = fields.DateTime(required=True)
    updated_at = fields.DateTime(required=True)


class NoteStatsSchema(Schema):
    total = fields.Integer()
    public = fields.Integer()
    gists = fields.Integer()
    pinned = fields.Integer()
    total_views = fields.Integer()
