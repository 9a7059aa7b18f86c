"""URL shortener endpoints."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, current_app, redirect, request

from apihub.api.deps import build_service, json_response, optional_auth, require_auth, timing
from apihub.core.extensions import limiter
from apihub.schemas import ShortenSchema, UrlListQuerySchema, UrlSchema
from apihub.services.urls.dto import ShortenIn, UrlOut
from apihub.services.urls.service import UrlService

bp = Blueprint("urls", __name__, url_prefix="/urls")
# Mounted at the site root, outside the versioned API
redirect_bp = Blueprint("short_links", __name__)

shorten_schema = ShortenSchema()
url_schema = UrlSchema()
url_list_query_schema = UrlListQuerySchema()


def _shorten_rate_limit() -> str:
    return str(current_app.config.get("URL_SHORTEN_RATE_LIMIT", "30 per minute"))


def _dump(url: UrlOut) -> dict[str, Any]:
    body = url_schema.dump(url)
    body["short_url"] = f"{request.host_url.rstrip('/')}/s/{url.short_code}"
    return body


@bp.post("/shorten")
@limiter.limit(_shorten_rate_limit)
@optional_auth
@timing
def shorten():
    """Shorten a link; anonymous links are always public."""

    data = shorten_schema.load(request.get_json(silent=True) or {})
    url = build_service(UrlService).shorten(
        ShortenIn(
            original_url=data["url"],
            custom_alias=data["custom_alias"],
            expires_in_ms=data["expires_in"],
            is_public=data["is_public"],
        )
    )
    return json_response({"data": _dump(url)}, status=201)


@bp.get("/info/<code>")
@optional_auth
@timing
def info(code: str):
    """Resolve a short code and count the click; 410 when expired or inactive."""

    url = build_service(UrlService).resolve(code)
    return json_response({"data": _dump(url)})


@bp.get("/stats/<code>")
@optional_auth
@timing
def stats(code: str):
    url = build_service(UrlService).stats(code)
    return json_response({"data": _dump(url)})


@bp.get("")
@require_auth
@timing
def list_urls():
    query = url_list_query_schema.load(request.args)
    urls = build_service(UrlService).list_mine(limit=query["limit"])
    return json_response({"data": [_dump(u) for u in urls], "count": len(urls)})


@bp.delete("/<code>")
@require_auth
@timing
def delete_url(code: str):
    build_service(UrlService).delete_by_code(code)
    return json_response({"deleted": True})


@redirect_bp.get("/s/<code>")
@optional_auth
def follow(code: str):
    """Count the click and redirect permanently to the original URL."""

    url = build_service(UrlService).resolve(code)
    return redirect(url.original_url, code=301)
