"""Note repository."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import update

from apihub.models.note import Note
from apihub.repositories.owned import OwnedRepository


class NoteRepository(OwnedRepository[Note]):
    """Notes sort pinned first, then newest."""

    model = Note
    default_sort = ("-is_pinned", "-created_at")
    searchable_fields = ("title", "content")
    # view_count / last_viewed_at only move through :meth:`record_view`
    allowed_updates = frozenset(
        {
            "title",
            "content",
            "content_type",
            "language",
            "is_public",
            "is_gist",
            "is_pinned",
            "tags",
            "color",
        }
    )

    def record_view(self, note: Note, *, now: datetime) -> None:
        """Atomically bump the view counter and refresh ``note``."""
        self.session.execute(
            update(Note)
            .where(Note.id == note.id)
            .values(
                view_count=Note.view_count + 1,
                last_viewed_at=now,
                updated_at=Note.updated_at,
            )
            .execution_options(synchronize_session=False)
        )
        self.session.refresh(note)
