from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps.auth import get_current_user
from app.api.deps.database import get_db
from app.core.config import settings
from app.models.skill import SkillCategory, SkillDifficulty, SkillLevel, SkillType
from app.models.user import User
from app.schemas.skill import (
    SkillCreate,
    SkillListResponse,
    SkillResponse,
    SkillStats,
    SkillUpdate,
)
from app.services.collection_query import build_predicates
from app.services.collections import SKILLS
from app.services.skill import skill_service

router = APIRouter()


@router.post("/", response_model=SkillResponse, status_code=status.HTTP_201_CREATED)
async def create_skill(
    skill_data: SkillCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Create a new skill."""
    try:
        skill = await skill_service.create(db, skill_data, user.id)
        return SkillResponse.model_validate(skill)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/", response_model=SkillListResponse)
async def get_skills(
    search: Optional[str] = Query(None, description="Name, description or tag"),
    category: Optional[SkillCategory] = Query(None),
    skill_type: Optional[SkillType] = Query(None),
    level: Optional[SkillLevel] = Query(None),
    difficulty: Optional[SkillDifficulty] = Query(None),
    tag: Optional[str] = Query(None),
    featured_only: bool = Query(False),
    skip: int = Query(0, ge=0),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """List skills, featured first, then by practice hours."""
    try:
        predicates = build_predicates(
            SKILLS,
            search=search,
            enums={
                "category": category,
                "skill_type": skill_type,
                "level": level,
                "difficulty": difficulty,
            },
            flags=["is_featured"] if featured_only else [],
            contains={"tags": tag},
            tz=settings.TIMEZONE,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    result = await skill_service.query(db, user.id, predicates, skip, limit)
    return SkillListResponse(
        items=[SkillResponse.model_validate(skill) for skill in result.items],
        total=result.total,
        filtered_total=result.filtered_total,
        stats=SkillStats(**result.stats),
        filter_options=result.filter_options,
    )


@router.get("/{skill_uuid}", response_model=SkillResponse)
async def get_skill(
    skill_uuid: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    skill = await skill_service.get(db, skill_uuid, user.id)
    if not skill:
        raise HTTPException(status_code=404, detail="Skill not found")
    return SkillResponse.model_validate(skill)


@router.put("/{skill_uuid}", response_model=SkillResponse)
async def update_skill(
    skill_uuid: UUID,
    skill_update: SkillUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        skill = await skill_service.update(db, skill_uuid, skill_update, user.id)
        if not skill:
            raise HTTPException(status_code=404, detail="Skill not found")
        return SkillResponse.model_validate(skill)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/{skill_uuid}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_skill(
    skill_uuid: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    deleted = await skill_service.delete(db, skill_uuid, user.id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Skill not found")
