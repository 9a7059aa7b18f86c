# apihub/services/notes/service.py
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy import String, case, cast, func

from apihub.models.note import Note
from apihub.services._shared.dto import PageMeta
from apihub.services._shared.errors import ValidationFailedError
from apihub.services._shared.scoped import Owner, OwnershipScopedService
from apihub.services.notes.dto import NoteOut, NoteStatsOut


class NoteService(OwnershipScopedService[Note, NoteOut]):
    """
    Notes and code gists: private by default.

    Opening a note someone else owns counts as a view; the owner's own reads
    do not.
    """

    repo_attr = "notes"
    entity_name = "Note"

    def to_view(self, entity: Note, *, owner: Owner) -> NoteOut:
        return NoteOut(
            id=entity.id,
            title=entity.title,
            content=entity.content,
            content_type=entity.content_type,
            language=entity.language,
            is_public=entity.is_public,
            is_gist=entity.is_gist,
            is_pinned=entity.is_pinned,
            color=entity.color,
            view_count=entity.view_count,
            last_viewed_at=entity.last_viewed_at,
            owner=owner,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            tags=list(entity.tags or []),
        )

    def _check_language(self, content_type: str | None, language: str | None) -> None:
        if language and content_type not in (None, "code"):
            raise ValidationFailedError(errors={"language": ["Only code notes carry a language"]})

    def prepare_create(self, data: Mapping[str, Any], owner_id: int | None) -> dict[str, Any]:
        payload = dict(data)
        self._check_language(payload.get("content_type", "text"), payload.get("language"))
        return payload

    def prepare_update(self, entity: Note, updates: Mapping[str, Any]) -> dict[str, Any]:
        payload = dict(updates)
        self._check_language(
            payload.get("content_type", entity.content_type),
            payload.get("language", entity.language),
        )
        return payload

    def list_notes(
        self,
        *,
        content_type: str | None = None,
        is_gist: bool | None = None,
        tag: str | None = None,
        page: int = 1,
        limit: int | None = None,
        sort: list[str] | None = None,
    ) -> tuple[list[NoteOut], PageMeta]:
        filters: dict[str, Any] = {}
        if content_type:
            filters["content_type"] = content_type
        if is_gist is not None:
            filters["is_gist"] = is_gist
        where = [cast(Note.tags, String).like(f'%"{tag.strip().lower()}"%')] if tag else []
        return self.paginate(filters, page=page, limit=limit, sort=sort, where=where)

    def open(self, note_id: int) -> NoteOut:
        """
        Read a note, counting the view when the caller is not the owner.

        :raises NotFoundError: Unknown id.
        :raises PermissionDeniedError: Private note of someone else.
        """
        with self.rw_uow() as uow:
            repo = uow.notes
            note = self._get_or_404(repo, note_id)
            self.ensure_readable(repo, note)
            if not repo.is_owner(note, self.ctx.actor_id):
                repo.record_view(note, now=self.clock())
            return self._view(repo, note)

    def toggle_pin(self, note_id: int) -> NoteOut:
        self.require_actor()
        with self.rw_uow() as uow:
            note = self.load_owned(uow, note_id)
            uow.notes.assign_updates(note, {"is_pinned": not note.is_pinned})
            return self._view(uow.notes, note)

    def stats(self) -> NoteStatsOut:
        """Counters over the caller's own notes."""
        actor = self.require_actor()
        row = self.aggregate(
            {
                "total": func.count(Note.id),
                "public": func.sum(case((Note.is_public.is_(True), 1), else_=0)),
                "gists": func.sum(case((Note.is_gist.is_(True), 1), else_=0)),
                "pinned": func.sum(case((Note.is_pinned.is_(True), 1), else_=0)),
                "total_views": func.sum(Note.view_count),
            },
            {"owner_id": actor},
            include_private=True,
        )
        return NoteStatsOut(**{key: int(value or 0) for key, value in row.items()})
