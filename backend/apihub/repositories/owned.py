"""Ownership-scoped repository shared by every user-owned resource.

The visibility rule lives here, inside the SQL statement, so no caller can
forget it:

- without a caller, only rows flagged public are returned;
- with a caller, rows flagged public **or** owned by the caller are returned;
- ``include_private=True`` bypasses the rule (owner-scoped or admin paths).

Ownership decisions that need an error (permission denied, authentication
required) belong to the service layer; this class only filters.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, ClassVar, TypeVar, cast

from sqlalchemy import ColumnElement, Select, and_, func, or_, select, update
from sqlalchemy.engine import CursorResult
from sqlalchemy.orm import InstrumentedAttribute

from apihub.repositories.base import BaseRepository, Page, apply_sorting, paginate_select

E = TypeVar("E")

#: Columns that are never caller-assignable, whatever the allow-list says.
PROTECTED_FIELDS = frozenset({"id", "created_at", "updated_at"})


class OwnedRepository(BaseRepository[E]):
    """Generic repository over a model with an owner and a visibility flag.

    Subclasses set ``model`` and may tune the class attributes below.
    """

    owner_field: ClassVar[str] = "owner_id"
    visibility_field: ClassVar[str] = "is_public"
    default_sort: ClassVar[tuple[str, ...]] = ("-created_at",)
    default_limit: ClassVar[int] = 50
    max_limit: ClassVar[int] = 100
    #: ``None`` means every mapped column except protected ones and the owner.
    allowed_updates: ClassVar[frozenset[str] | None] = None
    searchable_fields: ClassVar[tuple[str, ...]] = ()

    # ------------------------------ Columns ----------------------------------

    @property
    def owner_column(self) -> InstrumentedAttribute[Any]:
        return cast(InstrumentedAttribute[Any], getattr(self.model, self.owner_field))

    @property
    def visibility_column(self) -> InstrumentedAttribute[Any]:
        return cast(InstrumentedAttribute[Any], getattr(self.model, self.visibility_field))

    def _column_names(self) -> set[str]:
        return {c.key for c in self.model.__table__.columns}  # type: ignore[attr-defined]

    def _sortable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        return {name: getattr(self.model, name) for name in self._column_names()}

    def _updatable_fields(self) -> set[str]:
        base = self._column_names() - PROTECTED_FIELDS - {self.owner_field}
        if self.allowed_updates is None:
            return base
        return base & set(self.allowed_updates)

    # ----------------------------- Entity helpers ----------------------------

    def owner_of(self, entity: E) -> int | None:
        return cast(int | None, getattr(entity, self.owner_field))

    def is_public(self, entity: E) -> bool:
        return bool(getattr(entity, self.visibility_field))

    def is_owner(self, entity: E, caller_id: int | None) -> bool:
        """``True`` only for a present caller matching a present owner."""
        owner = self.owner_of(entity)
        return caller_id is not None and owner is not None and owner == caller_id

    # ---------------------------- Query building -----------------------------

    def visibility_clause(
        self, caller_id: int | None, *, include_private: bool = False
    ) -> ColumnElement[bool] | None:
        """Return the ``WHERE`` fragment enforcing visibility, or ``None``.

        :param caller_id: Authenticated caller id, or ``None`` for a guest.
        :param include_private: Skip filtering entirely.
        """
        if include_private:
            return None
        public = self.visibility_column.is_(True)
        if caller_id is None:
            return public
        return or_(public, self.owner_column == caller_id)

    def clamp_limit(self, limit: int | None) -> int:
        if limit is None or limit <= 0:
            return self.default_limit
        return min(int(limit), self.max_limit)

    def scoped_clauses(
        self,
        filters: Mapping[str, Any] | None = None,
        *,
        caller_id: int | None = None,
        include_private: bool = False,
        where: Iterable[ColumnElement[bool]] = (),
    ) -> list[ColumnElement[bool]]:
        """Equality filters, extra clauses and the visibility fragment.

        Filter keys must name mapped columns; unknown keys are ignored.
        """
        columns = self._column_names()
        clauses: list[ColumnElement[bool]] = [
            getattr(self.model, key) == value
            for key, value in (filters or {}).items()
            if key in columns
        ]
        clauses.extend(where)
        visibility = self.visibility_clause(caller_id, include_private=include_private)
        if visibility is not None:
            clauses.append(visibility)
        return clauses

    def scoped_select(
        self,
        filters: Mapping[str, Any] | None = None,
        *,
        caller_id: int | None = None,
        include_private: bool = False,
        where: Iterable[ColumnElement[bool]] = (),
    ) -> Select[Any]:
        """Build ``SELECT`` for the model with equality filters plus visibility."""
        stmt: Select[Any] = select(self.model)
        clauses = self.scoped_clauses(
            filters, caller_id=caller_id, include_private=include_private, where=where
        )
        if clauses:
            stmt = stmt.where(and_(*clauses))
        return stmt

    def _sorted(self, stmt: Select[Any], sort: Iterable[str] | None) -> Select[Any]:
        tokens = list(sort) if sort else list(self.default_sort)
        return apply_sorting(stmt, self._sortable_fields(), tokens, pk_attr=self._pk_attr())

    # ------------------------------- Writes ----------------------------------

    def build(self, data: Mapping[str, Any], *, owner_id: int | None) -> E:
        """Instantiate and stage an entity from caller data.

        Protected columns in ``data`` are dropped; the owner comes only from
        ``owner_id``. Model validators may raise :class:`ValueError`.
        """
        allowed = self._column_names() - PROTECTED_FIELDS - {self.owner_field}
        payload = {k: v for k, v in data.items() if k in allowed}
        payload[self.owner_field] = owner_id
        entity = self.model(**payload)
        return self.add(entity)

    def bulk_update(
        self,
        filters: Mapping[str, Any] | None,
        updates: Mapping[str, Any],
        *,
        owner_id: int,
        where: Iterable[ColumnElement[bool]] = (),
    ) -> int:
        """Apply ``updates`` to every row of ``owner_id`` matching ``filters``.

        :returns: Number of rows changed.
        :raises ValueError: If ``updates`` names non-updatable fields.
        """
        values = self._sanitize_update_fields(updates, strict=True)
        if not values:
            return 0
        columns = self._column_names()
        clauses = [self.owner_column == owner_id]
        clauses.extend(
            getattr(self.model, key) == value
            for key, value in (filters or {}).items()
            if key in columns
        )
        clauses.extend(where)
        stmt = (
            update(self.model)
            .where(and_(*clauses))
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        result = cast(CursorResult[Any], self.session.execute(stmt))
        return int(result.rowcount or 0)

    # ------------------------------- Reads -----------------------------------

    def find(
        self,
        filters: Mapping[str, Any] | None = None,
        *,
        caller_id: int | None = None,
        include_private: bool = False,
        sort: Iterable[str] | None = None,
        limit: int | None = None,
        skip: int = 0,
        where: Iterable[ColumnElement[bool]] = (),
    ) -> list[E]:
        stmt = self.scoped_select(
            filters, caller_id=caller_id, include_private=include_private, where=where
        )
        stmt = self._sorted(self._default_eagerload(stmt), sort)
        stmt = stmt.limit(self.clamp_limit(limit)).offset(max(int(skip), 0))
        return cast(list[E], list(self.session.execute(stmt).scalars().all()))

    def count(
        self,
        filters: Mapping[str, Any] | None = None,
        *,
        caller_id: int | None = None,
        include_private: bool = False,
        where: Iterable[ColumnElement[bool]] = (),
    ) -> int:
        stmt = self.scoped_select(
            filters, caller_id=caller_id, include_private=include_private, where=where
        )
        count_stmt = select(func.count()).select_from(stmt.subquery())
        return int(self.session.execute(count_stmt).scalar_one())

    def paginate(
        self,
        filters: Mapping[str, Any] | None = None,
        *,
        caller_id: int | None = None,
        include_private: bool = False,
        page: int = 1,
        limit: int | None = None,
        sort: Iterable[str] | None = None,
        where: Iterable[ColumnElement[bool]] = (),
    ) -> Page[E]:
        limit = self.clamp_limit(limit)
        stmt = self.scoped_select(
            filters, caller_id=caller_id, include_private=include_private, where=where
        )
        stmt = self._sorted(self._default_eagerload(stmt), sort)
        items, total = paginate_select(self.session, stmt, page=page, limit=limit)
        return Page(items=items, total=total, page=max(int(page), 1), limit=limit)

    def search_clause(self, term: str) -> ColumnElement[bool] | None:
        """Case-insensitive substring match over ``searchable_fields``."""
        term = term.strip()
        if not term or not self.searchable_fields:
            return None
        pattern = f"%{term}%"
        return or_(*(getattr(self.model, f).ilike(pattern) for f in self.searchable_fields))

    def search(
        self,
        term: str,
        *,
        caller_id: int | None = None,
        include_private: bool = False,
        sort: Iterable[str] | None = None,
        limit: int | None = None,
        skip: int = 0,
    ) -> list[E]:
        """Visibility-filtered text search; an empty term matches nothing."""
        clause = self.search_clause(term)
        if clause is None:
            return []
        return self.find(
            caller_id=caller_id,
            include_private=include_private,
            sort=sort,
            limit=limit,
            skip=skip,
            where=[clause],
        )

    def find_by_owner(
        self,
        owner_id: int,
        *,
        filters: Mapping[str, Any] | None = None,
        sort: Iterable[str] | None = None,
        limit: int | None = None,
        skip: int = 0,
    ) -> list[E]:
        """All rows of ``owner_id``, public or not."""
        return self.find(
            filters,
            include_private=True,
            sort=sort,
            limit=limit,
            skip=skip,
            where=[self.owner_column == owner_id],
        )

    def aggregate(
        self,
        expressions: Mapping[str, ColumnElement[Any]],
        filters: Mapping[str, Any] | None = None,
        *,
        caller_id: int | None = None,
        include_private: bool = False,
        where: Iterable[ColumnElement[bool]] = (),
    ) -> dict[str, Any]:
        """Evaluate labelled aggregate expressions over the visible set.

        Example::

            repo.aggregate({"total": func.count(), "done": func.sum(...)},
                           caller_id=42)
        """
        clauses = self.scoped_clauses(
            filters, caller_id=caller_id, include_private=include_private, where=where
        )
        labelled = [expr.label(name) for name, expr in expressions.items()]
        stmt = select(*labelled).select_from(self.model)
        if clauses:
            stmt = stmt.where(and_(*clauses))
        row = self.session.execute(stmt).mappings().one()
        return dict(row)
