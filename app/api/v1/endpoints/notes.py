from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps.auth import get_current_user
from app.api.deps.database import get_db
from app.core.config import settings
from app.core.exceptions import (
    RecordNotFoundError,
    StoreFailureError,
    VersionConflictError,
)
from app.models.note import NoteType
from app.models.user import User
from app.schemas.note import (
    NoteCreate,
    NoteDetailResponse,
    NoteLinks,
    NoteListResponse,
    NoteResponse,
    NoteStats,
    NoteUpdate,
    NoteVersionResponse,
)
from app.services.collection_query import build_predicates
from app.services.collections import NOTES
from app.services.note import note_service

router = APIRouter()


@router.post("/", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
async def create_note(
    note_data: NoteCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Create a new note at version 1."""
    try:
        note = await note_service.create_note(db, note_data, user.id)
        return NoteResponse.model_validate(note)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/", response_model=NoteListResponse)
async def get_notes(
    search: Optional[str] = Query(None, description="Title, content, category or tag"),
    category: Optional[str] = Query(None),
    note_type: Optional[NoteType] = Query(None),
    tag: Optional[str] = Query(None, description="Exact tag"),
    pinned_only: bool = Query(False),
    favorites_only: bool = Query(False),
    skip: int = Query(0, ge=0),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """List notes, pinned first, then most recently updated."""
    flags = []
    if pinned_only:
        flags.append("is_pinned")
    if favorites_only:
        flags.append("is_favorite")

    try:
        predicates = build_predicates(
            NOTES,
            search=search,
            enums={"category": category, "note_type": note_type},
            flags=flags,
            contains={"tags": tag},
            tz=settings.TIMEZONE,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    result = await note_service.query(db, user.id, predicates, skip, limit)
    return NoteListResponse(
        items=[NoteResponse.model_validate(note) for note in result.items],
        total=result.total,
        filtered_total=result.filtered_total,
        stats=NoteStats(**result.stats),
        filter_options=result.filter_options,
    )


@router.get("/{note_uuid}", response_model=NoteDetailResponse)
async def get_note(
    note_uuid: UUID,
    edit: bool = Query(False, description="Opened for editing, do not count a view"),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Get a note with its linked records. Reading it counts as a view."""
    if edit:
        note = await note_service.get_note(db, note_uuid, user.id)
        if not note:
            raise HTTPException(status_code=404, detail="Note not found")
    else:
        try:
            note = await note_service.record_view(db, note_uuid, user.id)
        except RecordNotFoundError:
            raise HTTPException(status_code=404, detail="Note not found")

    links = await note_service.resolve_links(db, note)
    payload = NoteResponse.model_validate(note).model_dump()
    return NoteDetailResponse(
        **payload, links=NoteLinks.model_validate(links, from_attributes=True)
    )


@router.put("/{note_uuid}", response_model=NoteResponse)
async def update_note(
    note_uuid: UUID,
    note_update: NoteUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Update a note. The previous title and content are kept as a version."""
    changes = note_update.model_dump(exclude_unset=True, exclude={"expected_version"})
    try:
        note = await note_service.update_note(
            db,
            note_uuid,
            changes,
            user.id,
            expected_version=note_update.expected_version,
        )
        return NoteResponse.model_validate(note)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Note not found")
    except VersionConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StoreFailureError:
        raise HTTPException(status_code=500, detail="Failed to update note")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/{note_uuid}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_note(
    note_uuid: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Delete a note and its whole version history."""
    try:
        await note_service.delete_note(db, note_uuid, user.id)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Note not found")


@router.get("/{note_uuid}/versions", response_model=List[NoteVersionResponse])
async def get_note_versions(
    note_uuid: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Version history, newest superseded version first."""
    try:
        versions = await note_service.list_versions(db, note_uuid, user.id)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Note not found")
    return [NoteVersionResponse.model_validate(version) for version in versions]


@router.post("/{note_uuid}/pin", response_model=NoteResponse)
async def toggle_note_pin(
    note_uuid: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        note = await note_service.toggle_pin(db, note_uuid, user.id)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Note not found")
    return NoteResponse.model_validate(note)


@router.post("/{note_uuid}/favorite", response_model=NoteResponse)
async def toggle_note_favorite(
    note_uuid: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        note = await note_service.toggle_favorite(db, note_uuid, user.id)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Note not found")
    return NoteResponse.model_validate(note)
