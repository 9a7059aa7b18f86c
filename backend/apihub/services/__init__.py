"""Service layer.

Subpackages
-----------
- ``_shared``: base service, unit-of-work helpers, errors, ports, the
  ownership-scoped service base.
- ``tokens``: token lifecycle (:class:`TokenService`).
- ``auth``: signup, login and profile (:class:`AuthService`).
- ``todos``, ``notes``, ``urls``: ownership-scoped resources.

Modules are imported directly (``from apihub.services.tokens.service import
TokenService``); this package does not re-export them so the unit of work
can import the error taxonomy without a cycle.
"""
