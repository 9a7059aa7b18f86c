"""
DTOs for AuthService.

Data Transfer Objects (DTOs) isolate the service layer from ORM models,
ensuring clear input/output contracts and type safety.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from apihub.models.user import User

# --------------------------------------------------------------------------- #
# Input DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class SignupIn:
    """
    Input DTO for account creation.

    :param email: Login email, stored as given (trimmed, case preserved).
    :type email: str
    :param password: Raw password to be hashed by the model.
    :type password: str
    :param name: Display name.
    :type name: str
    """

    email: str
    password: str
    name: str


@dataclass(frozen=True, slots=True)
class LoginIn:
    email: str
    password: str


@dataclass(frozen=True, slots=True)
class ProfileUpdateIn:
    """
    Input DTO for profile changes. At least one field must be set.

    :param name: Optional new display name.
    :type name: str | None
    :param password: Optional new raw password.
    :type password: str | None
    """

    name: str | None = None
    password: str | None = None


@dataclass(frozen=True, slots=True)
class CredentialPolicy:
    """Minimum lengths applied at signup and profile update."""

    password_min_length: int = 5
    name_min_length: int = 2


# --------------------------------------------------------------------------- #
# Output DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class UserOut:
    """
    Public user representation.

    :param id: User identifier.
    :type id: int
    :param email: Email as stored.
    :type email: str
    :param name: Display name.
    :type name: str
    """

    id: int
    email: str
    name: str

    @classmethod
    def from_model(cls, user: User) -> UserOut:
        return cls(id=user.id, email=user.email, name=user.name)

    def as_dict(self) -> dict[str, object]:
        return {"id": self.id, "email": self.email, "name": self.name}


@dataclass(frozen=True, slots=True)
class IssuedTokenOut:
    """A freshly minted token and the user it belongs to."""

    token: str
    user: UserOut
