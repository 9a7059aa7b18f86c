"""Note and gist endpoints."""

from __future__ import annotations

from flask import Blueprint, request

from apihub.api.deps import (
    build_service,
    json_response,
    optional_auth,
    parse_pagination,
    require_auth,
    timing,
)
from apihub.schemas import (
    NoteCreateSchema,
    NoteFilterSchema,
    NoteSchema,
    NoteStatsSchema,
    NoteUpdateSchema,
    SearchQuerySchema,
    build_meta,
)
from apihub.services.notes.service import NoteService

bp = Blueprint("notes", __name__, url_prefix="/notes")

note_schema = NoteSchema()
note_list_schema = NoteSchema(many=True)
note_create_schema = NoteCreateSchema()
note_update_schema = NoteUpdateSchema()
note_filter_schema = NoteFilterSchema()
note_stats_schema = NoteStatsSchema()
search_schema = SearchQuerySchema()


@bp.get("")
@optional_auth
@timing
def list_notes():
    """Public notes plus the caller's own, pinned first."""

    filters = note_filter_schema.load(request.args)
    pagination = parse_pagination()
    items, meta = build_service(NoteService).list_notes(
        **filters, page=pagination.page, limit=pagination.limit, sort=pagination.sort
    )
    return json_response({"data": note_list_schema.dump(items), "meta": build_meta(meta)})


@bp.get("/mine")
@require_auth
@timing
def my_notes():
    pagination = parse_pagination()
    items = build_service(NoteService).find_mine(
        sort=pagination.sort,
        limit=pagination.limit,
        skip=(pagination.page - 1) * pagination.limit,
    )
    return json_response({"data": note_list_schema.dump(items)})


@bp.get("/search")
@optional_auth
@timing
def search_notes():
    query = search_schema.load(request.args)
    items = build_service(NoteService).search(query["q"], limit=query["limit"])
    return json_response({"data": note_list_schema.dump(items)})


@bp.get("/stats")
@require_auth
@timing
def note_stats():
    stats = build_service(NoteService).stats()
    return json_response({"data": note_stats_schema.dump(stats)})


@bp.post("")
@require_auth
@timing
def create_note():
    payload = note_create_schema.load(request.get_json(silent=True) or {})
    note = build_service(NoteService).create(payload)
    return json_response({"data": note_schema.dump(note)}, status=201)


@bp.get("/<int:note_id>")
@optional_auth
@timing
def get_note(note_id: int):
    """Open a note; views by anyone but the owner are counted."""

    note = build_service(NoteService).open(note_id)
    return json_response({"data": note_schema.dump(note)})


@bp.put("/<int:note_id>")
@require_auth
@timing
def update_note(note_id: int):
    payload = note_update_schema.load(request.get_json(silent=True) or {})
    note = build_service(NoteService).update(note_id, payload)
    return json_response({"data": note_schema.dump(note)})


@bp.patch("/<int:note_id>/pin")
@require_auth
@timing
def pin_note(note_id: int):
    note = build_service(NoteService).toggle_pin(note_id)
    return json_response({"data": note_schema.dump(note)})


@bp.delete("/<int:note_id>")
@require_auth
@timing
def delete_note(note_id: int):
    build_service(NoteService).delete(note_id)
    return json_response({"deleted": True})
