"""
apihub.services._shared.ports
=============================

*Ports* (hexagonal interfaces) that decouple the service layer from
infrastructure.

Modules
-------
- :mod:`token_provider`:
    Defines :class:`~.TokenProvider`, the abstraction for minting and
    verifying bearer credentials, plus a deterministic stub for tests.

Concrete adapters live under ``apihub.infra``.
"""

from __future__ import annotations

from .token_provider import StubTokenProvider, TokenProvider

__all__ = ["TokenProvider", "StubTokenProvider"]
