from __future__ import annotations

from typing import Any, Protocol

from apihub.services._shared.errors import InvalidTokenError


class TokenProvider(Protocol):
    """Port for minting and verifying signed bearer credentials.

    Implementations never embed an expiry: tokens live until revoked in the
    ledger.
    """

    def encode(self, *, email: str) -> str:
        """Mint a signed credential carrying ``email`` as a claim."""
        ...

    def decode(self, token: str) -> dict[str, Any]:
        """Verify the signature and return the claims.

        :raises InvalidTokenError: On a malformed token or bad signature.
        """
        ...


class StubTokenProvider(TokenProvider):
    """Deterministic token provider used in unit tests.

    Tokens are only "well signed" when this instance minted them, which lets
    tests tell a forged credential (:class:`InvalidTokenError`) from a valid
    one missing from the ledger.
    """

    def __init__(self) -> None:
        self._seq = 0
        self._issued: dict[str, dict[str, Any]] = {}

    def encode(self, *, email: str) -> str:
        self._seq += 1
        token = f"stub.{self._seq}.{email}"
        self._issued[token] = {"sub": email, "email": email, "type": "access"}
        return token

    def decode(self, token: str) -> dict[str, Any]:
        try:
            return dict(self._issued[token])
        except KeyError:
            raise InvalidTokenError() from None
