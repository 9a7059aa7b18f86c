"""Note model (plain text, markdown or code snippets / gists)."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Enum, Integer, String, Text, false
from sqlalchemy.orm import Mapped, mapped_column, validates

from apihub.core.extensions import db

from .base import OwnedResourceMixin, PKMixin, ReprMixin, TimestampMixin

CONTENT_TYPES = ("text", "markdown", "code")
NoteContentType = Enum(
    *CONTENT_TYPES, name="note_content_type", native_enum=False, create_constraint=True
)


class Note(PKMixin, ReprMixin, TimestampMixin, OwnedResourceMixin, db.Model):
    """
    A note owned by a user. Private unless published.

    Fields
    ------
    content_type : str
        ``text``, ``markdown`` or ``code``; ``language`` only matters for code.
    is_gist : bool
        Marks shareable code snippets.
    is_pinned : bool
        Owner-side ordering hint.
    view_count, last_viewed_at
        Bumped when someone other than the owner opens the note.
    """

    __tablename__ = "notes"
    __public_by_default__ = False

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    content_type: Mapped[str] = mapped_column(NoteContentType, nullable=False, default="text")
    language: Mapped[str | None] = mapped_column(String(50))
    is_gist: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    is_pinned: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    color: Mapped[str | None] = mapped_column(String(7))
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    last_viewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    @validates("title")
    def _strip_title(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Title is required.")
        return value.strip()

    @validates("tags")
    def _normalize_tags(self, key: str, value: list[str] | None) -> list[str]:
        return [t.strip().lower() for t in (value or []) if t and t.strip()]
