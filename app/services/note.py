"""Versioned knowledge-base notes.

An update never overwrites a note in place: the current title and content
are first committed as an immutable :class:`NoteVersion` carrying the version
number being superseded, then the note is overwritten with
``version + 1``. The two commits are issued strictly in that order, so the
worst outcome of a failure between them is a harmless orphan snapshot.
"""

from typing import Any, Dict, List, Optional, Union
from uuid import UUID

import structlog
from pydantic import BaseModel
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import (
    RecordNotFoundError,
    RecordValidationError,
    StoreFailureError,
    VersionConflictError,
)
from app.models.note import Note, NoteVersion
from app.services.base import OwnedRecordService
from app.services.collection_query import sort_collection
from app.services.collections import NOTES
from app.services.event import event_service
from app.services.project import project_service
from app.services.skill import skill_service
from app.services.task import task_service

logger = structlog.get_logger(__name__)

VERSIONED_FIELDS = ("title", "content", "category")
LINK_SERVICES = {
    "skill_id": skill_service,
    "project_id": project_service,
    "event_id": event_service,
    "task_id": task_service,
}


class NoteService(OwnedRecordService):
    """Service layer for notes and their revision history."""

    model = Note
    schema = NOTES
    required_fields = VERSIONED_FIELDS

    def _prepare(self, values: Dict[str, Any], record=None) -> Dict[str, Any]:
        # Version and view count are owned by this service
        values.pop("version", None)
        values.pop("view_count", None)
        if record is None:
            values["version"] = 1
        return values

    async def _require(self, db: AsyncSession, note_uuid: UUID, user_id: int) -> Note:
        note = await self.get(db, note_uuid, user_id)
        if not note:
            raise RecordNotFoundError("Note", note_uuid)
        return note

    async def _check_links(
        self, db: AsyncSession, values: Dict[str, Any], user_id: int
    ) -> None:
        """Linked records must exist and belong to the same user."""
        errors = []
        for field, service in LINK_SERVICES.items():
            record_id = values.get(field)
            if record_id is None:
                continue
            if not await service.get_by_id(db, record_id, user_id):
                errors.append(f"{field} does not refer to an existing {service.entity}")
        if errors:
            logger.warning("Note links rejected", user_id=user_id, errors=errors)
            raise RecordValidationError(errors)

    async def create_note(
        self, db: AsyncSession, data: Union[BaseModel, Dict[str, Any]], user_id: int
    ) -> Note:
        """Create a note at version 1. No snapshot is taken."""
        await self._check_links(db, self._values(data), user_id)
        return await self.create(db, data, user_id)

    async def get_note(
        self, db: AsyncSession, note_uuid: UUID, user_id: int
    ) -> Optional[Note]:
        return await self.get(db, note_uuid, user_id)

    async def get_notes(self, db: AsyncSession, user_id: int) -> List[Note]:
        notes = await self.get_all(db, user_id)
        return sort_collection(notes, NOTES, tz=settings.TIMEZONE)

    async def update_note(
        self,
        db: AsyncSession,
        note_uuid: UUID,
        data: Union[BaseModel, Dict[str, Any]],
        user_id: int,
        expected_version: Optional[int] = None,
    ) -> Note:
        """Snapshot the current state, then apply ``data`` as the next version.

        Raises:
            RecordNotFoundError: no such note for this user
            RecordValidationError: title, content or category would be empty,
                or a link points at a record the user does not own
            VersionConflictError: ``expected_version`` is stale
            StoreFailureError: either commit failed
        """
        note = await self._require(db, note_uuid, user_id)

        values = self._values(data)
        self._validate(values, creating=False)
        await self._check_links(db, values, user_id)
        values = self._prepare(values, note)

        note_id = note.id
        current_version = note.version
        if expected_version is not None and expected_version != current_version:
            logger.warning(
                "Note update rejected, stale version",
                note_uuid=note_uuid,
                expected_version=expected_version,
                current_version=current_version,
            )
            raise VersionConflictError(expected_version, current_version)

        # Step 1: persist the pre-image
        db.add(
            NoteVersion(
                note_id=note_id,
                version_number=current_version,
                title=note.title,
                content=note.content,
            )
        )
        try:
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.error(
                "Failed to save note version snapshot, update aborted",
                note_uuid=note_uuid,
                version_number=current_version,
                error=str(e),
            )
            raise StoreFailureError("Failed to save note history", cause=e)

        # Step 2: overwrite the note
        try:
            note = await self._load(db, note_id)
            for key, value in values.items():
                setattr(note, key, value)
            note.version = current_version + 1
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.error(
                "Orphan note version snapshot, note not advanced",
                note_uuid=note_uuid,
                version_number=current_version,
                error=str(e),
            )
            raise StoreFailureError("Failed to update note", cause=e)

        logger.info(
            "Note updated successfully",
            note_uuid=note_uuid,
            version=current_version + 1,
            user_id=user_id,
            updated_fields=list(values.keys()),
        )
        return await self._load(db, note_id)

    async def delete_note(self, db: AsyncSession, note_uuid: UUID, user_id: int) -> None:
        """Remove a note together with its whole history."""
        note = await self._require(db, note_uuid, user_id)

        try:
            await db.execute(delete(NoteVersion).where(NoteVersion.note_id == note.id))
            await db.delete(note)
            await db.commit()

            logger.info("Note deleted", note_uuid=note_uuid, user_id=user_id)

        except Exception as e:
            await db.rollback()
            logger.error("Failed to delete note", note_uuid=note_uuid, error=str(e))
            raise

    async def list_versions(
        self, db: AsyncSession, note_uuid: UUID, user_id: int
    ) -> List[NoteVersion]:
        """Snapshots of a note, newest superseded version first."""
        note = await self._require(db, note_uuid, user_id)

        result = await db.execute(
            select(NoteVersion)
            .where(NoteVersion.note_id == note.id)
            .order_by(NoteVersion.version_number.desc(), NoteVersion.id.desc())
        )
        return list(result.scalars().all())

    async def record_view(self, db: AsyncSession, note_uuid: UUID, user_id: int) -> Note:
        """Increment the view counter by one. Calls are not deduplicated."""
        note = await self._require(db, note_uuid, user_id)

        try:
            await db.execute(
                update(Note)
                .where(Note.id == note.id)
                .values(view_count=Note.view_count + 1)
            )
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.error("Failed to record note view", note_uuid=note_uuid, error=str(e))
            raise

        return await self._load(db, note.id)

    async def toggle_pin(self, db: AsyncSession, note_uuid: UUID, user_id: int) -> Note:
        return await self._toggle(db, note_uuid, user_id, "is_pinned")

    async def toggle_favorite(
        self, db: AsyncSession, note_uuid: UUID, user_id: int
    ) -> Note:
        return await self._toggle(db, note_uuid, user_id, "is_favorite")

    async def _toggle(
        self, db: AsyncSession, note_uuid: UUID, user_id: int, field: str
    ) -> Note:
        # Metadata only: version and history are left untouched
        note = await self._require(db, note_uuid, user_id)
        value = not getattr(note, field)

        try:
            setattr(note, field, value)
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.error(
                "Failed to toggle note flag",
                note_uuid=note_uuid,
                field=field,
                error=str(e),
            )
            raise

        logger.info("Note flag toggled", note_uuid=note_uuid, field=field, value=value)
        return await self._load(db, note.id)

    async def resolve_links(self, db: AsyncSession, note: Note) -> Dict[str, Any]:
        """Linked skill, project, event and task; ``None`` when absent or dangling."""
        return {
            "skill": await skill_service.get_by_id(db, note.skill_id, note.user_id),
            "project": await project_service.get_by_id(
                db, note.project_id, note.user_id
            ),
            "event": await event_service.get_by_id(db, note.event_id, note.user_id),
            "task": await task_service.get_by_id(db, note.task_id, note.user_id),
        }


note_service = NoteService()
