"""Repository base and query helpers shared by the user, token and resource stores.

Repositories only stage changes on the session they were given; the unit of
work decides when to commit. Sorting and updates go through per-repository
whitelists so request input never names an arbitrary column.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import Select, func, select
from sqlalchemy.orm import InstrumentedAttribute, Session

from apihub.core.extensions import db

E = TypeVar("E")


@dataclass(slots=True)
class Page(Generic[E]):
    """One page of rows plus the total matching the filters.

    :param items: Rows of the current page.
    :param total: Row count ignoring ``LIMIT``/``OFFSET``.
    :param page: 1-based page number.
    :param limit: Page size.
    """

    items: Sequence[E]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        if self.limit <= 0:
            return 0
        return -(-self.total // self.limit)

    @property
    def has_next(self) -> bool:
        return self.page < self.pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1


def parse_sort_tokens(raw: Iterable[str]) -> list[tuple[str, bool]]:
    """``["-created_at", "title"]`` → ``[("created_at", True), ("title", False)]``."""
    parsed: list[tuple[str, bool]] = []
    for token in raw:
        descending = token.startswith("-")
        name = token.lstrip("-").strip()
        if name:
            parsed.append((name, descending))
    return parsed


def apply_sorting(
    stmt: Select[Any],
    sortable_fields: Mapping[str, InstrumentedAttribute[Any]],
    tokens: Iterable[str],
    *,
    pk_attr: InstrumentedAttribute[Any] | None,
) -> Select[Any]:
    """Order ``stmt`` by whitelisted sort tokens, then by primary key.

    Tokens naming a field outside ``sortable_fields`` are skipped. The primary
    key tiebreaker keeps page boundaries stable between requests.
    """
    orders = [
        column.desc() if descending else column.asc()
        for name, descending in parse_sort_tokens(tokens)
        if isinstance(column := sortable_fields.get(name), InstrumentedAttribute)
    ]
    if pk_attr is not None:
        orders.append(pk_attr.asc())
    return stmt.order_by(*orders) if orders else stmt


def paginate_select(
    session: Session, stmt: Select[Any], *, page: int, limit: int
) -> tuple[list[Any], int]:
    """Run ``stmt`` for one page and count all matching rows.

    The count runs over the statement with its ``ORDER BY`` removed.
    """
    page = max(int(page), 1)
    limit = max(int(limit), 1)
    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    total = int(session.execute(count_stmt).scalar_one())
    rows = session.execute(stmt.limit(limit).offset((page - 1) * limit)).scalars().all()
    return list(rows), total


class BaseRepository(Generic[E]):
    """Persistence-only access to one mapped model.

    Subclasses set ``model`` and may override ``_sortable_fields``,
    ``_updatable_fields`` and ``_default_eagerload``.
    """

    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        """The unit of work's session, else the Flask-scoped one."""
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    # ------------------------------ Whitelists -------------------------------

    def _default_eagerload(self, stmt: Select[Any]) -> Select[Any]:
        return stmt

    def _pk_attr(self) -> InstrumentedAttribute[Any] | None:
        return getattr(self.model, "id", None)

    def _sortable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        return {}

    def _updatable_fields(self) -> set[str]:
        return set()

    def _sanitize_update_fields(
        self, fields: Mapping[str, Any], *, strict: bool = True
    ) -> dict[str, Any]:
        """Keep only updatable keys.

        :raises ValueError: ``strict`` and a key is not updatable. A repository
            with no updatable fields rejects every non-empty update.
        """
        allowed = self._updatable_fields()
        rejected = sorted(key for key in fields if key not in allowed)
        if rejected and strict:
            raise ValueError(f"Unknown or non-updatable fields: {rejected}")
        return {key: value for key, value in fields.items() if key in allowed}

    # --------------------------------- CRUD ----------------------------------

    def add(self, instance: E) -> E:
        """Stage ``instance`` and flush so its primary key is assigned."""
        self.session.add(instance)
        self.flush()
        return instance

    def get(self, entity_id: Any) -> E | None:
        pk_attr = self._pk_attr()
        if pk_attr is None:
            raise RuntimeError(f"{type(self).__name__}.get needs an 'id' column")
        stmt = self._default_eagerload(select(self.model).where(pk_attr == entity_id))
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def delete(self, instance: E) -> None:
        self.session.delete(instance)
        self.flush()

    def flush(self) -> None:
        self.session.flush()

    def assign_updates(
        self,
        instance: E,
        fields: Mapping[str, Any],
        *,
        strict: bool = True,
        flush: bool = True,
    ) -> E:
        """Set whitelisted attributes on ``instance``.

        Attributes go through ``setattr`` so model ``@validates`` hooks run.

        :raises ValueError: ``strict`` and ``fields`` holds a non-updatable key.
        """
        for key, value in self._sanitize_update_fields(fields, strict=strict).items():
            setattr(instance, key, value)
        if flush:
            self.flush()
        return instance
