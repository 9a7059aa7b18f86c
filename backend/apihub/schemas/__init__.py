"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
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
from .common import MetaSchema, PaginationQuerySchema, SearchQuerySchema, SortQuerySchema, build_meta
from .note import NoteCreateSchema, NoteFilterSchema, NoteSchema, NoteStatsSchema, NoteUpdateSchema
from .todo import (
    BulkCompleteSchema,
    TodoCreateSchema,
    TodoFilterSchema,
    TodoSchema,
    TodoStatsSchema,
    TodoUpdateSchema,
)
from .url import ShortenSchema, UrlListQuerySchema, UrlSchema

__all__ = [
    "IssuedTokenSchema",
    "LoginSchema",
    "ProfileUpdateSchema",
    "RevokeSchema",
    "RotateSchema",
    "RotationSchema",
    "SignupSchema",
    "TokenSummarySchema",
    "UserSchema",
    "MetaSchema",
    "PaginationQuerySchema",
    "SearchQuerySchema",
    "SortQuerySchema",
    "build_meta",
    "NoteCreateSchema",
    "NoteFilterSchema",
    "NoteSchema",
    "NoteStatsSchema",
    "NoteUpdateSchema",
    "BulkCompleteSchema",
    "TodoCreateSchema",
    "TodoFilterSchema",
    "TodoSchema",
    "TodoStatsSchema",
    "TodoUpdateSchema",
    "ShortenSchema",
    "UrlListQuerySchema",
    "UrlSchema",
]
