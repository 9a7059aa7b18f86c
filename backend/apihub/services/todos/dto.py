"""DTOs for TodoService."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True, slots=True)
class TodoOut:
    """
    Public todo representation.

    :param owner: Owner id for the owner, ``"anonymous"`` for anyone else.
    """

    id: int
    title: str
    description: str | None
    completed: bool
    is_public: bool
    priority: str
    due_date: datetime | None
    owner: int | str | None
    created_at: datetime
    updated_at: datetime
    tags: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class TodoStatsOut:
    total: int
    completed: int
    public: int
    high_priority: int
    overdue: int
