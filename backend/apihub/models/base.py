"""Reusable SQLAlchemy mixins shared by domain models (typed 2.0)."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, false, func, true
from sqlalchemy.orm import Mapped, declared_attr, mapped_column, validates


class TimestampMixin:
    """Provide ``created_at`` and ``updated_at`` timestamp columns.

    Attributes
    ----------
    created_at:
        Timezone-aware timestamp filled by the database on insert.
    updated_at:
        Timezone-aware timestamp refreshed by the database on update.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )


class PKMixin:
    """Expose an integer surrogate primary key column named ``id``."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True)


class ReprMixin:
    """Provide a concise ``__repr__`` including the class name and id."""

    def __repr__(self) -> str:
        cls = self.__class__.__name__
        key = getattr(self, "id", None)
        return f"<{cls} id={key}>"


class OwnedResourceMixin:
    """Owner reference plus visibility flag shared by every stored resource.

    Attributes
    ----------
    owner_id:
        Owning user. Nullable so anonymous-capable resources (short URLs) can
        exist without one; immutable once set.
    is_public:
        Visibility flag. Public rows are readable by anyone; the owner can
        always read their own rows regardless of this flag.

    Notes
    -----
    Subclasses choose the default for ``is_public`` through
    ``__public_by_default__``.
    """

    __public_by_default__: bool = True

    @declared_attr
    def owner_id(cls) -> Mapped[int | None]:
        return mapped_column(
            ForeignKey("users.id", ondelete="CASCADE"),
            nullable=True,
            index=True,
        )

    @declared_attr
    def is_public(cls) -> Mapped[bool]:
        return mapped_column(
            Boolean,
            nullable=False,
            default=cls.__public_by_default__,
            server_default=true() if cls.__public_by_default__ else false(),
        )

    @validates("owner_id")
    def _freeze_owner(self, key: str, value: int | None) -> int | None:
        """Reject re-assigning an owner once one is recorded.

        :raises ValueError: If the row already has a different owner.
        """
        current = self.__dict__.get("owner_id")
        if current is not None and value != current:
            raise ValueError("Resource owner is immutable.")
        return value
