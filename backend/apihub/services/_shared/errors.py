"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never import Flask or HTTP
helpers. They are the stable contract between repositories, services and the
transport layer; the translation to RFC 7807 responses lives in
``apihub/core/errors.py``.

Taxonomy
--------
- ``AuthenticationRequiredError``: no credential where one is required.
- ``InvalidTokenError``: malformed token or bad signature.
- ``TokenRevokedError`` / ``TokenNotActiveError``: valid signature, inactive record.
- ``PermissionDeniedError``: authenticated but not the owner, or private resource.
- ``NotFoundError``: no such resource, user or token.
- ``ValidationFailedError``: malformed input to create/update.
- ``UnavailableError``: store timeout or connectivity failure (retryable).
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint to match (e.g., 'uq_users_email').

    Returns
    -------
    bool
        True if the IntegrityError matches the given constraint.

    Notes
    -----
    PostgreSQL reports the constraint name; SQLite reports ``table.column``,
    so callers may pass either form.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    return constraint_name.lower() in message


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from repositories or domain logic.
    """

    default_message = "Service error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class AuthError(ServiceError):
    """Base for failures that deny a request its caller identity."""

    #: Machine-stable reason surfaced to clients.
    reason = "invalid"


# --------------------------------------------------------------------------- #
# Authentication / token lifecycle
# --------------------------------------------------------------------------- #


class AuthenticationRequiredError(AuthError):
    """Raised when an operation needs a caller and none is present."""

    default_message = "Authentication required"
    reason = "no token"


class InvalidTokenFormatError(AuthError):
    """Raised when the Authorization header is not ``Bearer <token>``."""

    default_message = "Invalid token format"
    reason = "invalid format"


class InvalidTokenError(AuthError):
    """Raised when a token is malformed or its signature does not verify."""

    default_message = "Invalid token"
    reason = "invalid"


class TokenRevokedError(AuthError):
    """Raised when a well-signed token has no active ledger record."""

    default_message = "Token has been revoked"
    reason = "revoked"


class TokenNotActiveError(AuthError):
    """Raised when rotating a token that is not (or no longer) active."""

    default_message = "Token is not active or does not exist"
    reason = "not active"


class InvalidCredentialsError(ServiceError):
    """Raised on a failed login; never says which half was wrong."""

    default_message = "Invalid credentials"


# --------------------------------------------------------------------------- #
# Resource access
# --------------------------------------------------------------------------- #


class PermissionDeniedError(ServiceError):
    """Raised when the caller is not entitled to the resource.

    The message is identical for "private" and "owned by someone else" so
    the response never reveals which case applied.
    """

    default_message = "Permission denied"


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:
        return f"{self.entity} not found"

    @property
    def message(self) -> str:
        return str(self)


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return self.detail

    @property
    def message(self) -> str:
        return self.detail


class ValidationFailedError(ServiceError):
    """Raised when create/update input breaks a domain rule.

    :param message: Human-readable summary.
    :param errors: Optional field → messages mapping.
    """

    default_message = "Validation failed"

    def __init__(self, message: str | None = None, errors: dict[str, list[str]] | None = None):
        super().__init__(message)
        self.errors = errors or {}


class GoneError(ServiceError):
    """Raised when a resource existed but is expired or deactivated."""

    default_message = "Resource is no longer available"


class UnavailableError(ServiceError):
    """Raised when the store timed out or could not be reached. Retryable."""

    default_message = "Service temporarily unavailable"
