"""
Unit of Work contract shared by the read-write and read-only implementations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from apihub.repositories import (
        NoteRepository,
        TodoRepository,
        TokenRepository,
        UrlRepository,
        UserRepository,
    )


class UnitOfWork(ABC):
    """
    One transactional boundary around the repositories a service call needs.

    Every repository shares the same session. Leaving the block without an
    exception commits (read-only: rolls back); any exception rolls back.
    """

    users: UserRepository
    tokens: TokenRepository
    todos: TodoRepository
    notes: NoteRepository
    urls: UrlRepository

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...

    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...
