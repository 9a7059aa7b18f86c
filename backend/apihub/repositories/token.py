"""Token ledger repository.

Every state transition is a single conditional ``UPDATE`` keyed on the token
string and its current ``is_active`` value, so concurrent writers cannot both
observe an active row and both transition it.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, cast

from sqlalchemy import select, update
from sqlalchemy.engine import CursorResult

from apihub.models.token import Token
from apihub.repositories.base import BaseRepository


class TokenRepository(BaseRepository[Token]):
    """Persistence-only repository for :class:`Token`."""

    model = Token

    def _sortable_fields(self):
        return {
            "created_at": Token.created_at,
            "last_used_at": Token.last_used_at,
            "id": Token.id,
        }

    # ---- Lookups ----

    def get_by_token(self, token: str) -> Token | None:
        stmt = select(Token).where(Token.token == token)
        return cast(Token | None, self.session.execute(stmt).scalars().first())

    def is_active(self, token: str) -> bool:
        stmt = select(Token.id).where(Token.token == token, Token.is_active.is_(True))
        return self.session.execute(stmt).first() is not None

    def list_active_for_email(self, email: str) -> list[Token]:
        """Active tokens for ``email``, newest first."""
        stmt = (
            select(Token)
            .where(Token.email == email, Token.is_active.is_(True))
            .order_by(Token.created_at.desc(), Token.id.desc())
        )
        return list(self.session.execute(stmt).scalars().all())

    # ---- Transitions ----

    def _execute_update(self, stmt: Any) -> int:
        result = cast(
            CursorResult[Any],
            self.session.execute(stmt.execution_options(synchronize_session="fetch")),
        )
        return int(result.rowcount or 0)

    def touch(self, token: str, *, now: datetime) -> int:
        """Stamp ``last_used_at`` on an active record."""
        stmt = (
            update(Token)
            .where(Token.token == token, Token.is_active.is_(True))
            .values(last_used_at=now)
        )
        return self._execute_update(stmt)

    def revoke_if_active(
        self,
        token: str,
        *,
        now: datetime,
        rotated_to: str | None = None,
        email: str | None = None,
    ) -> bool:
        """Transition ``token`` from active to revoked.

        :param token: Exact token string.
        :param now: Revocation timestamp.
        :param rotated_to: Successor token when revoking as part of a rotation.
        :param email: When given, only a record owned by this email matches.
        :returns: ``True`` if this call performed the transition, ``False`` when
            the record was already revoked, unknown, or owned by someone else.
        """
        conditions = [Token.token == token, Token.is_active.is_(True)]
        if email is not None:
            conditions.append(Token.email == email)
        values: dict[str, Any] = {"is_active": False, "revoked_at": now}
        if rotated_to is not None:
            values["rotated_to"] = rotated_to
        return self._execute_update(update(Token).where(*conditions).values(**values)) == 1

    def revoke_all_for_email(self, email: str, *, now: datetime) -> int:
        """Revoke every active token of ``email``; returns rows transitioned."""
        stmt = (
            update(Token)
            .where(Token.email == email, Token.is_active.is_(True))
            .values(is_active=False, revoked_at=now)
        )
        return self._execute_update(stmt)
