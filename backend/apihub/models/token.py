"""Token model: the ledger of issued bearer credentials."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    func,
    true,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from apihub.core.extensions import db

from .base import PKMixin, ReprMixin

if TYPE_CHECKING:
    from .user import User

DEFAULT_TOKEN_DESCRIPTION = "API Token"


class Token(PKMixin, ReprMixin, db.Model):
    """
    A bearer credential and its lifecycle state.

    Fields
    ------
    token : str
        The signed credential. Immutable once minted.
    user_id : int
        Owning user.
    email : str
        Owner email, denormalized for lookups without a join.
    is_active : bool
        ``True`` until revoked. Revocation is terminal.
    description : str
        Free text ("Signup Token", "Login Token", "Rotated Token", ...).
    created_at, last_used_at, revoked_at : datetime
        Lifecycle timestamps; ``last_used_at`` moves on every validation.
    rotated_from, rotated_to : str | None
        Rotation chain pointers holding the neighbouring token strings.

    Rows are never deleted so rotation chains stay traceable.
    """

    __tablename__ = "tokens"

    token: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )
    description: Mapped[str] = mapped_column(
        String(200), nullable=False, default=DEFAULT_TOKEN_DESCRIPTION
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    last_used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    rotated_from: Mapped[str | None] = mapped_column(Text)
    rotated_to: Mapped[str | None] = mapped_column(Text)

    user: Mapped[User] = relationship("User", back_populates="tokens")

    __table_args__ = (
        UniqueConstraint("token", name="uq_tokens_token"),
        Index("ix_tokens_email_is_active", "email", "is_active"),
    )

    @property
    def status(self) -> str:
        """``"active"`` or ``"revoked"``."""
        return "active" if self.is_active else "revoked"

    @validates("token")
    def _freeze_token(self, key: str, value: str) -> str:
        """
        Reject blank tokens and any change to an already minted string.

        :raises ValueError: On empty input or an attempt to replace the token.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Token string is required.")
        current = self.__dict__.get("token")
        if current is not None and current != value:
            raise ValueError("Token string is immutable.")
        return value

    @validates("is_active")
    def _no_reactivation(self, key: str, value: bool) -> bool:
        """Revocation is terminal: a revoked token never becomes active again."""
        if value and self.__dict__.get("is_active") is False:
            raise ValueError("Revoked tokens cannot be re-activated.")
        return bool(value)
