"""
Ownership-scoped service base shared by todos, notes and short URLs.

Access rules, applied in this order:

1. mutations without a caller raise :class:`AuthenticationRequiredError`;
2. unknown ids raise :class:`NotFoundError` (there is no owner to check);
3. private rows read by a non-owner, and any mutation by a non-owner, raise
   :class:`PermissionDeniedError` with the same message in both cases.

Ownership always wins: an owner reads, updates and deletes their rows
whatever the visibility flag says.

The caller is ``ctx.actor_id``; services are built per request.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import Any, ClassVar, Generic, TypeVar

from sqlalchemy import ColumnElement
from sqlalchemy.exc import IntegrityError

from apihub.repositories.owned import OwnedRepository
from apihub.services._shared.base import BaseService
from apihub.services._shared.dto import PageMeta
from apihub.services._shared.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationFailedError,
)
from apihub.uow.sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

E = TypeVar("E")  # mapped entity
V = TypeVar("V")  # view DTO

#: Shown instead of the owner id to anyone who is not the owner.
OWNER_PLACEHOLDER = "anonymous"

Owner = int | str | None


class OwnershipScopedService(BaseService, ABC, Generic[E, V]):
    """Generic CRUD over an :class:`OwnedRepository` with sanitized views.

    Subclasses set ``repo_attr`` (the unit-of-work attribute holding the
    repository) and ``entity_name``, and implement :meth:`to_view`.
    """

    repo_attr: ClassVar[str]
    entity_name: ClassVar[str]
    allow_anonymous_create: ClassVar[bool] = False

    # ------------------------------------------------------------------ #
    # Hooks
    # ------------------------------------------------------------------ #

    @abstractmethod
    def to_view(self, entity: E, *, owner: Owner) -> V:
        """Build the public view; ``owner`` is already sanitized."""

    def prepare_create(self, data: Mapping[str, Any], owner_id: int | None) -> dict[str, Any]:
        return dict(data)

    def prepare_update(self, entity: E, updates: Mapping[str, Any]) -> dict[str, Any]:
        return dict(updates)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def repo(self, uow: SQLAlchemyUnitOfWork | SQLAlchemyReadOnlyUnitOfWork) -> OwnedRepository[E]:
        return getattr(uow, self.repo_attr)

    def owner_view(self, repo: OwnedRepository[E], entity: E) -> Owner:
        """Owner id for the owner, a placeholder for others, ``None`` when ownerless."""
        owner = repo.owner_of(entity)
        if owner is None:
            return None
        return owner if repo.is_owner(entity, self.ctx.actor_id) else OWNER_PLACEHOLDER

    def _view(self, repo: OwnedRepository[E], entity: E) -> V:
        return self.to_view(entity, owner=self.owner_view(repo, entity))

    def _get_or_404(self, repo: OwnedRepository[E], entity_id: Any) -> E:
        entity = repo.get(entity_id)
        if entity is None:
            raise NotFoundError(self.entity_name, entity_id)
        return entity

    def ensure_readable(
        self, repo: OwnedRepository[E], entity: E, *, require_ownership: bool = False
    ) -> None:
        """:raises PermissionDeniedError: Private and not owned, or ownership required."""
        if repo.is_owner(entity, self.ctx.actor_id):
            return
        if require_ownership or not repo.is_public(entity):
            raise PermissionDeniedError()

    def load_owned(self, uow: SQLAlchemyUnitOfWork, entity_id: Any) -> E:
        """Fetch a row the caller may mutate.

        :raises AuthenticationRequiredError: No caller.
        :raises NotFoundError: Unknown id.
        :raises PermissionDeniedError: Caller is not the owner.
        """
        actor = self.require_actor()
        repo = self.repo(uow)
        entity = self._get_or_404(repo, entity_id)
        self.ensure_owner(actor, repo.owner_of(entity))
        return entity

    def _conflict(self, exc: IntegrityError) -> ConflictError:
        return ConflictError(self.entity_name, f"{self.entity_name} conflicts with an existing record")

    # ------------------------------------------------------------------ #
    # Commands
    # ------------------------------------------------------------------ #

    def create(self, data: Mapping[str, Any]) -> V:
        """
        Persist a new row owned by the caller.

        :raises AuthenticationRequiredError: No caller and anonymous creation
            is not allowed for this resource.
        :raises ValidationFailedError: A model validator rejected the data.
        :raises ConflictError: A unique constraint was hit.
        """
        owner_id = self.ctx.actor_id
        if owner_id is None and not self.allow_anonymous_create:
            self.require_actor()
        try:
            with self.rw_uow() as uow:
                repo = self.repo(uow)
                try:
                    entity = repo.build(self.prepare_create(data, owner_id), owner_id=owner_id)
                except ValueError as exc:
                    raise ValidationFailedError(str(exc)) from exc
                view = self._view(repo, entity)
        except IntegrityError as exc:
            raise self._conflict(exc) from exc
        return view

    def update(self, entity_id: Any, updates: Mapping[str, Any]) -> V:
        """
        Apply allow-listed ``updates`` to a row the caller owns.

        :raises AuthenticationRequiredError: No caller.
        :raises NotFoundError: Unknown id.
        :raises PermissionDeniedError: Caller is not the owner.
        :raises ValidationFailedError: Unknown fields or rejected values.
        """
        self.require_actor()
        try:
            with self.rw_uow() as uow:
                repo = self.repo(uow)
                entity = self.load_owned(uow, entity_id)
                try:
                    repo.assign_updates(entity, self.prepare_update(entity, updates))
                except ValueError as exc:
                    raise ValidationFailedError(str(exc)) from exc
                view = self._view(repo, entity)
        except IntegrityError as exc:
            raise self._conflict(exc) from exc
        return view

    def delete(self, entity_id: Any) -> None:
        """Physically delete a row the caller owns (same checks as :meth:`update`)."""
        self.require_actor()
        with self.rw_uow() as uow:
            entity = self.load_owned(uow, entity_id)
            self.repo(uow).delete(entity)

    def bulk_update(
        self,
        filters: Mapping[str, Any] | None,
        updates: Mapping[str, Any],
        *,
        where: Iterable[ColumnElement[bool]] = (),
    ) -> int:
        """
        Apply ``updates`` to every caller-owned row matching ``filters``.

        :returns: Number of rows changed.
        :raises AuthenticationRequiredError: No caller.
        """
        actor = self.require_actor()
        with self.rw_uow() as uow:
            try:
                return self.repo(uow).bulk_update(
                    filters, updates, owner_id=actor, where=list(where)
                )
            except ValueError as exc:
                raise ValidationFailedError(str(exc)) from exc

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def find(
        self,
        filters: Mapping[str, Any] | None = None,
        *,
        include_private: bool = False,
        sort: Iterable[str] | None = None,
        limit: int | None = None,
        skip: int = 0,
        where: Iterable[ColumnElement[bool]] = (),
    ) -> list[V]:
        """Rows visible to the caller: public ones plus the caller's own."""
        with self.ro_uow() as uow:
            repo = self.repo(uow)
            rows = repo.find(
                filters,
                caller_id=self.ctx.actor_id,
                include_private=include_private,
                sort=sort,
                limit=limit,
                skip=skip,
                where=list(where),
            )
            return [self._view(repo, row) for row in rows]

    def find_by_id(self, entity_id: Any, *, require_ownership: bool = False) -> V:
        """
        :raises NotFoundError: Unknown id.
        :raises PermissionDeniedError: Private and not owned, or ownership
            required and not owned.
        """
        with self.ro_uow() as uow:
            repo = self.repo(uow)
            entity = self._get_or_404(repo, entity_id)
            self.ensure_readable(repo, entity, require_ownership=require_ownership)
            return self._view(repo, entity)

    def find_mine(
        self,
        filters: Mapping[str, Any] | None = None,
        *,
        sort: Iterable[str] | None = None,
        limit: int | None = None,
        skip: int = 0,
    ) -> list[V]:
        """All of the caller's rows, public or private."""
        actor = self.require_actor()
        with self.ro_uow() as uow:
            repo = self.repo(uow)
            rows = repo.find_by_owner(actor, filters=filters, sort=sort, limit=limit, skip=skip)
            return [self._view(repo, row) for row in rows]

    def count(
        self,
        filters: Mapping[str, Any] | None = None,
        *,
        include_private: bool = False,
        where: Iterable[ColumnElement[bool]] = (),
    ) -> int:
        with self.ro_uow() as uow:
            return self.repo(uow).count(
                filters,
                caller_id=self.ctx.actor_id,
                include_private=include_private,
                where=list(where),
            )

    def paginate(
        self,
        filters: Mapping[str, Any] | None = None,
        *,
        page: int = 1,
        limit: int | None = None,
        sort: Iterable[str] | None = None,
        include_private: bool = False,
        where: Iterable[ColumnElement[bool]] = (),
    ) -> tuple[list[V], PageMeta]:
        """Visibility-filtered page of views plus pagination metadata."""
        with self.ro_uow() as uow:
            repo = self.repo(uow)
            result = repo.paginate(
                filters,
                caller_id=self.ctx.actor_id,
                include_private=include_private,
                page=page,
                limit=limit,
                sort=sort,
                where=list(where),
            )
            items = [self._view(repo, row) for row in result.items]
        return items, PageMeta.from_page(result)

    def search(
        self,
        term: str,
        *,
        sort: Iterable[str] | None = None,
        limit: int | None = None,
        skip: int = 0,
    ) -> list[V]:
        """Case-insensitive text search over the caller's visible rows."""
        with self.ro_uow() as uow:
            repo = self.repo(uow)
            rows = repo.search(term, caller_id=self.ctx.actor_id, sort=sort, limit=limit, skip=skip)
            return [self._view(repo, row) for row in rows]

    def aggregate(
        self,
        expressions: Mapping[str, ColumnElement[Any]],
        filters: Mapping[str, Any] | None = None,
        *,
        include_private: bool = False,
        where: Iterable[ColumnElement[bool]] = (),
    ) -> dict[str, Any]:
        """Labelled aggregates over the caller's visible rows."""
        with self.ro_uow() as uow:
            return self.repo(uow).aggregate(
                expressions,
                filters,
                caller_id=self.ctx.actor_id,
                include_private=include_private,
                where=list(where),
            )

    def is_owner(self, entity_id: Any) -> bool:
        """``True`` when the caller owns ``entity_id``; unknown ids are ``False``."""
        with self.ro_uow() as uow:
            repo = self.repo(uow)
            entity = repo.get(entity_id)
            return entity is not None and repo.is_owner(entity, self.ctx.actor_id)
