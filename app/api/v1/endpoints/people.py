from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps.auth import get_current_user
from app.api.deps.database import get_db
from app.core.config import settings
from app.models.user import User
from app.schemas.person import (
    PersonCreate,
    PersonCSVImport,
    PersonImportResult,
    PersonListResponse,
    PersonResponse,
    PersonStats,
    PersonUpdate,
)
from app.services.collection_query import build_predicates
from app.services.collections import PEOPLE
from app.services.person import person_service

router = APIRouter()


def _csv_response(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/", response_model=PersonResponse, status_code=status.HTTP_201_CREATED)
async def create_person(
    person_data: PersonCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Add a person to the network."""
    try:
        person = await person_service.create(db, person_data, user.id)
        return PersonResponse.model_validate(person)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/", response_model=PersonListResponse)
async def get_people(
    search: Optional[str] = Query(None, description="Name, profession, skill or tag"),
    role: Optional[str] = Query(None),
    tag: Optional[str] = Query(None),
    skill: Optional[str] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """List people, most recently added first."""
    try:
        predicates = build_predicates(
            PEOPLE,
            search=search,
            enums={"role": role},
            contains={"tags": tag, "skills": skill},
            tz=settings.TIMEZONE,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    result = await person_service.query(db, user.id, predicates, skip, limit)
    return PersonListResponse(
        items=[PersonResponse.model_validate(person) for person in result.items],
        total=result.total,
        filtered_total=result.filtered_total,
        stats=PersonStats(**result.stats),
        filter_options=result.filter_options,
    )


@router.post("/import", response_model=PersonImportResult)
async def import_people_from_csv(
    import_data: PersonCSVImport,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Import people from a CSV file, reporting failed and duplicate rows."""
    try:
        return await person_service.import_people_from_csv(db, user.id, import_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/export")
async def export_people_to_csv(
    role: Optional[str] = Query(None),
    tag: Optional[str] = Query(None),
    skill: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Download people as CSV, optionally filtered by role, tag or skill."""
    content = await person_service.export_people_to_csv(
        db, user.id, role=role, tag=tag, skill=skill
    )
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    return _csv_response(content, f"people-{stamp}.csv")


@router.get("/import-template")
async def download_import_template(user: User = Depends(get_current_user)):
    return _csv_response(person_service.import_template(), "people-template.csv")


@router.get("/{person_uuid}", response_model=PersonResponse)
async def get_person(
    person_uuid: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    person = await person_service.get(db, person_uuid, user.id)
    if not person:
        raise HTTPException(status_code=404, detail="Person not found")
    return PersonResponse.model_validate(person)


@router.put("/{person_uuid}", response_model=PersonResponse)
async def update_person(
    person_uuid: UUID,
    person_update: PersonUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        person = await person_service.update(db, person_uuid, person_update, user.id)
        if not person:
            raise HTTPException(status_code=404, detail="Person not found")
        return PersonResponse.model_validate(person)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/{person_uuid}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_person(
    person_uuid: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    deleted = await person_service.delete(db, person_uuid, user.id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Person not found")
