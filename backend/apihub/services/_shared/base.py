"""Service base class and request-scoped context."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from apihub.services._shared.errors import AuthenticationRequiredError, PermissionDeniedError
from apihub.services._shared.policies.common import is_owner
from apihub.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Timezone-aware current time; the default service clock."""
    return datetime.now(UTC)


@dataclass(slots=True)
class ServiceContext:
    """
    Carry cross-cutting request-scoped data (caller identity, request ids).

    :param actor_id: Authenticated user identifier, ``None`` for guests.
    :param actor_email: Authenticated user email, ``None`` for guests.
    :param request_id: Correlation id for logging/tracing.
    """

    actor_id: int | None = None
    actor_email: str | None = None
    request_id: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.actor_id is not None


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Offer the caller and ownership checks every service shares.
    * Keep services thin, orchestration-only, no web/ORM leakage.

    Notes
    -----
    - Services must never touch the global session; always use a Unit of Work.
    - Services raise :mod:`apihub.services._shared.errors` types; the HTTP
      mapping lives in :mod:`apihub.core.errors`.
    """

    def __init__(self, *, ctx: ServiceContext | None = None, clock: Clock | None = None) -> None:
        """
        :param ctx: Optional request-scoped context.
        :param clock: Time source; injectable so tests can pin timestamps.
        """
        self.ctx = ctx or ServiceContext()
        self.clock: Clock = clock or utcnow

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: Read-write UoW instance.
        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork()

    def ro_uow(self, *, enforce_db_readonly: bool = True) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :param enforce_db_readonly: Apply ``SET TRANSACTION READ ONLY`` when supported.
        :returns: Read-only UoW instance.
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork(enforce_db_readonly=enforce_db_readonly)

    # --------------------------- AuthZ --------------------------------

    def require_actor(self, actor_id: int | None = None) -> int:
        """Return the caller id or raise when the call is anonymous.

        :raises AuthenticationRequiredError: If no caller is present.
        """
        actor = actor_id if actor_id is not None else self.ctx.actor_id
        if actor is None:
            raise AuthenticationRequiredError()
        return actor

    def ensure_owner(self, actor_id: int | None, owner_id: int | None) -> None:
        """
        Ensure the current actor is the resource owner.

        :raises PermissionDeniedError: If the actor is not the owner.
        """
        if not is_owner(actor_id=actor_id, owner_id=owner_id):
            raise PermissionDeniedError()
