"""Reverse-proxy awareness for client addresses used by rate limiting."""

from __future__ import annotations

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix


def init_app(app: Flask) -> None:
    """Wrap the WSGI app in :class:`ProxyFix` when ``USE_PROXYFIX`` is on.

    ``PROXY_FIX_HOPS`` (default 1) is the number of trusted proxies. Rate
    limits key on ``request.remote_addr``, so trusting too many hops lets a
    client spoof its address through ``X-Forwarded-For``.
    """
    if not app.config.get("USE_PROXYFIX", True):
        return
    hops = int(app.config.get("PROXY_FIX_HOPS", 1))
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=hops, x_host=hops, x_prefix=hops)
