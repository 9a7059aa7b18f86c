"""Todo model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Boolean, CheckConstraint, DateTime, Enum, String, Text, false
from sqlalchemy.orm import Mapped, mapped_column, validates

from apihub.core.extensions import db

from .base import OwnedResourceMixin, PKMixin, ReprMixin, TimestampMixin

PRIORITIES = ("low", "medium", "high")
TodoPriority = Enum(*PRIORITIES, name="todo_priority", native_enum=False, create_constraint=True)


class Todo(PKMixin, ReprMixin, TimestampMixin, OwnedResourceMixin, db.Model):
    """A task owned by a user; public unless the owner hides it."""

    __tablename__ = "todos"
    __public_by_default__ = True

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    completed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    priority: Mapped[str] = mapped_column(TodoPriority, nullable=False, default="medium")
    due_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    __table_args__ = (CheckConstraint("length(title) > 0", name="title_not_empty"),)

    @validates("title")
    def _strip_title(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Title is required.")
        return value.strip()

    @validates("tags")
    def _normalize_tags(self, key: str, value: list[str] | None) -> list[str]:
        return [t.strip() for t in (value or []) if t and t.strip()]
