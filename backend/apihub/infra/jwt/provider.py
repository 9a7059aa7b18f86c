# apihub/infra/jwt/provider.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, cast

from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from apihub.services._shared.errors import InvalidTokenError
from apihub.services._shared.ports import TokenProvider


@dataclass(slots=True)
class JWTTokenProvider(TokenProvider):
    """
    Adapter for Flask-JWT-Extended.

    Tokens carry the email both as ``sub`` and as an explicit ``email``
    claim, and no ``exp``: lifetime is governed by the token ledger.

    .. note::
       Requires an active Flask app context with ``JWT_SECRET_KEY`` set.
    """

    def encode(self, *, email: str) -> str:
        # expires_delta=False: never embed an expiry claim
        return cast(
            str,
            create_access_token(
                identity=email,
                additional_claims={"email": email},
                expires_delta=False,
            ),
        )

    def decode(self, token: str) -> dict[str, Any]:
        try:
            claims = cast(dict[str, Any], decode_token(token))
        except (PyJWTError, JWTExtendedException) as exc:
            raise InvalidTokenError() from exc
        if not claims.get("email"):
            # Signed by us but not an identity token
            raise InvalidTokenError()
        return claims
