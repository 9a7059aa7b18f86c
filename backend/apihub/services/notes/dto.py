"""DTOs for NoteService."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True, slots=True)
class NoteOut:
    id: int
    title: str
    content: str
    content_type: str
    language: str | None
    is_public: bool
    is_gist: bool
    is_pinned: bool
    color: str | None
    view_count: int
    last_viewed_at: datetime | None
    owner: int | str | None
    created_at: datetime
    updated_at: datetime
    tags: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class NoteStatsOut:
    total: int
    public: int
    gists: int
    pinned: int
    total_views: int
