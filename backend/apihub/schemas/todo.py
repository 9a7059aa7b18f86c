"""Todo resource schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate

from apihub.models.todo import PRIORITIES


class TodoCreateSchema(Schema):
    """Payload for creating a todo."""

    title = fields.String(required=True, validate=validate.Length(min=1, max=200))
    description = fields.String(load_default=None, validate=validate.Length(max=1000))
    completed = fields.Boolean(load_default=False)
    is_public = fields.Boolean(load_default=True)
    priority = fields.String(load_default="medium", validate=validate.OneOf(PRIORITIES))
    due_date = fields.DateTime(load_default=None, allow_none=True)
    tags = fields.List(fields.String(validate=validate.Length(min=1, max=30)), load_default=list)


class TodoUpdateSchema(Schema):
    """Partial update; only present keys are applied."""

    title = fields.String(validate=validate.Length(min=1, max=200))
    description = fields.String(allow_none=True, validate=validate.Length(max=1000))
    completed = fields.Boolean()
    is_public = fields.Boolean()
    priority = fields.String(validate=validate.OneOf(PRIORITIES))
    due_date = fields.DateTime(allow_none=True)
    tags = fields.List(fields.String(validate=validate.Length(min=1, max=30)))


class TodoFilterSchema(Schema):
    """Supported query parameters when listing todos."""

    class Meta:
        unknown = EXCLUDE

    completed = fields.Boolean(load_default=None)
    priority = fields.String(load_default=None, validate=validate.OneOf(PRIORITIES))
    tag = fields.String(load_default=None, validate=validate.Length(min=1, max=30))


class BulkCompleteSchema(Schema):
    ids = fields.List(fields.Integer(), load_default=None)
    completed = fields.Boolean(load_default=True)


class TodoSchema(Schema):
    """Representation of a todo; ``owner`` is sanitized by the service."""

    id = fields.Integer(required=True)
    title = fields.String(required=True)
    description = fields.String(allow_none=True)
    completed = fields.Boolean(required=True)
    is_public = fields.Boolean(required=True)
    priority = fields.String(required=True)
    due_date = fields.DateTime(allow_none=True)
    tags = fields.List(fields.String())
    owner = fields.Raw(allow_none=True)
    created_at = fields.DateTime(required=True)
    updated_at = fields.DateTime(required=True)


class TodoStatsSchema(Schema):
    total = fields.Integer()
    completed = fields.Integer()
    public = fields.Integer()
    high_priority = fields.Integer()
    overdue = fields.Integer()
