"""DTOs for TokenService."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from apihub.services.auth.dto import UserOut


@dataclass(frozen=True, slots=True)
class TokenSummaryOut:
    """
    Listing view of an active token. Never carries the full credential.

    :param token: Fixed-length prefix followed by ``"..."``.
    :param created_at: Issue time.
    :param last_used_at: Last successful validation, if any.
    :param description: Free text set at issue time.
    :param is_active: Always ``True`` for listings of active tokens.
    """

    token: str
    created_at: datetime
    last_used_at: datetime | None
    description: str
    is_active: bool


@dataclass(frozen=True, slots=True)
class RotationOut:
    """
    Result of a rotation.

    :param token: The new credential.
    :param user: Owner of both tokens.
    :param revoked_old: Whether the old token was revoked by this call.
    """

    token: str
    user: UserOut
    revoked_old: bool


@dataclass(frozen=True, slots=True)
class ChainLinkOut:
    """One hop of a rotation chain."""

    token: str
    status: str
    description: str
    created_at: datetime
    revoked_at: datetime | None
