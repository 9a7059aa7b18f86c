"""
SQLAlchemy implementation of UnitOfWork for Flask.
"""

from __future__ import annotations

import logging
from contextlib import suppress

from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import InvalidRequestError, OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session, SessionTransaction

from apihub.core.extensions import db
from apihub.repositories import (
    NoteRepository,
    TodoRepository,
    TokenRepository,
    UrlRepository,
    UserRepository,
)
from apihub.services._shared.errors import UnavailableError
from apihub.uow.base import UnitOfWork

log = logging.getLogger(__name__)

#: Store failures surfaced to callers as retryable ``UnavailableError``.
UNAVAILABLE_ERRORS = (OperationalError, PoolTimeoutError)


def _unavailable(exc: BaseException) -> UnavailableError:
    log.error("Store unavailable: %s", exc.__class__.__name__, exc_info=exc)
    return UnavailableError()


class SQLAlchemyRepositoryContainer:
    """Provide repository instances that share a SQLAlchemy session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=self.session)
        self.tokens = TokenRepository(session=self.session)
        self.todos = TodoRepository(session=self.session)
        self.notes = NoteRepository(session=self.session)
        self.urls = UrlRepository(session=self.session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    SQLAlchemy-backed UoW using the Flask-scoped session.

    The same session is shared across all repositories for a consistent
    transaction. Connectivity failures and pool timeouts are rolled back and
    re-raised as :class:`UnavailableError`.
    """

    def __init__(self, session: Session | None = None) -> None:
        super().__init__(session=session if session is not None else db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        # No-op: the session is lazily started on the first statement.
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            try:
                self.commit()
            except UNAVAILABLE_ERRORS as commit_exc:
                self.rollback()
                raise _unavailable(commit_exc) from commit_exc
            except Exception:
                self.rollback()
                raise
            return
        self.rollback()
        if isinstance(exc, UNAVAILABLE_ERRORS):
            raise _unavailable(exc) from exc

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only Unit of Work backed by the Flask-scoped SQLAlchemy session.

    This UoW:
    - Applies ``SET TRANSACTION READ ONLY`` on PostgreSQL when it owns the
      transaction.
    - Installs portable write-guards and rolls back on exit when it owns the
      transaction.
    - Disallows ``commit()``.

    Notes
    -----
    When a transaction is already running on the session (autobegin, outer
    test fixture) the scope attaches to it instead of erroring; the guards
    still intercept ORM flushes and raw DML.
    """

    _WRITE_PREFIXES = (
        "insert",
        "update",
        "delete",
        "alter",
        "drop",
        "truncate",
        "create",
        "replace",
    )

    def __init__(self, session: Session | None = None, *, enforce_db_readonly: bool = True) -> None:
        super().__init__(session=session if session is not None else db.session)
        self.enforce_db_readonly = enforce_db_readonly
        self._conn: Connection | None = None
        self._txn_ctx: SessionTransaction | None = None
        self._listeners_installed = False

    # ----------------------------- Context Manager -----------------------------

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        self._txn_ctx = None
        try:
            txn_ctx = self.session.begin()
            txn_ctx.__enter__()
            self._txn_ctx = txn_ctx
        except InvalidRequestError:
            # Already inside a transaction: attach, skip SET TRANSACTION
            pass

        try:
            self._conn = self.session.connection()
        except UNAVAILABLE_ERRORS as exc:
            self._close_owned(type(exc), exc, None)
            raise _unavailable(exc) from exc

        self._install_listeners()

        if self._txn_ctx is not None and self.enforce_db_readonly:
            if self._conn.dialect.name == "postgresql":
                try:
                    self.session.execute(text("SET TRANSACTION READ ONLY"))
                except SQLAlchemyError as exc:
                    log.warning("SET TRANSACTION READ ONLY failed (%s); guards only.", exc)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        """Always remove guards. Roll back only if we own the transaction."""
        try:
            self._close_owned(exc_type, exc, tb)
        finally:
            self._remove_listeners()
            self._conn = None
        if isinstance(exc, UNAVAILABLE_ERRORS):
            raise _unavailable(exc) from exc

    def _close_owned(self, exc_type, exc, tb) -> None:
        if self._txn_ctx is None:
            return
        txn_ctx, self._txn_ctx = self._txn_ctx, None
        try:
            self.session.rollback()
        finally:
            # Leave the begin() context too, or the session keeps refusing work
            txn_ctx.__exit__(exc_type, exc, tb)

    # ----------------------------- Public API ---------------------------------

    def commit(self) -> None:
        """
        Disallow commit in read-only Unit of Work.

        :raises RuntimeError: always, to prevent accidental writes.
        """
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()

    # ----------------------------- Guards & Listeners --------------------------

    def _install_listeners(self) -> None:
        """Install ORM/db-level listeners to prevent any write attempt."""
        if self._listeners_installed:
            return

        def _before_flush(session, flush_context, instances):
            if session.new or session.dirty or session.deleted:
                raise RuntimeError(
                    "Read-only UnitOfWork: ORM flush blocked (new/dirty/deleted objects present)."
                )

        event.listen(self.session, "before_flush", _before_flush)

        def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            first_token = statement.lstrip().split(None, 1)[0].lower() if statement else ""
            if first_token.startswith(self._WRITE_PREFIXES):
                raise RuntimeError(
                    f"Read-only UnitOfWork: SQL statement blocked: {first_token.upper()}"
                )

        target = self._conn if self._conn is not None else self.session.get_bind()
        event.listen(target, "before_cursor_execute", _before_cursor_execute)

        self._ro__before_flush = _before_flush
        self._ro__before_cursor_execute = _before_cursor_execute
        self._ro__target = target
        self._listeners_installed = True

    def _remove_listeners(self) -> None:
        """Detach previously installed listeners."""
        if not self._listeners_installed:
            return

        with suppress(InvalidRequestError):
            event.remove(self.session, "before_flush", self._ro__before_flush)
        with suppress(InvalidRequestError):
            event.remove(self._ro__target, "before_cursor_execute", self._ro__before_cursor_execute)

        self._listeners_installed = False
