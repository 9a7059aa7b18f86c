"""Repository package exposing persistence-layer access for all domain models."""

from __future__ import annotations

# ---------------------------------------------------------------------
# Core base exports
# ---------------------------------------------------------------------
from apihub.repositories.base import (
    BaseRepository,
    Page,
    apply_sorting,
    paginate_select,
)

# ---------------------------------------------------------------------
# Domain-specific repositories
# ---------------------------------------------------------------------
from apihub.repositories.note import NoteRepository
from apihub.repositories.owned import OwnedRepository
from apihub.repositories.todo import TodoRepository
from apihub.repositories.token import TokenRepository
from apihub.repositories.url import UrlRepository
from apihub.repositories.user import UserRepository

__all__ = [
    # Base
    "BaseRepository",
    "OwnedRepository",
    "Page",
    "paginate_select",
    "apply_sorting",
    # Domain
    "NoteRepository",
    "TodoRepository",
    "TokenRepository",
    "UrlRepository",
    "UserRepository",
]
