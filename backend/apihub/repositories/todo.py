"""Todo repository."""

from __future__ import annotations

from apihub.models.todo import Todo
from apihub.repositories.owned import OwnedRepository


class TodoRepository(OwnedRepository[Todo]):
    model = Todo
    searchable_fields = ("title", "description")
    allowed_updates = frozenset(
        {"title", "description", "completed", "is_public", "priority", "due_date", "tags"}
    )
