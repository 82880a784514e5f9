from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps.auth import get_current_user
from app.api.deps.database import get_db
from app.core.config import settings
from app.models.project import Priority, ProjectCategory, ProjectStatus
from app.models.user import User
from app.schemas.project import (
    ProjectCreate,
    ProjectListResponse,
    ProjectResponse,
    ProjectStats,
    ProjectUpdate,
)
from app.services.collection_query import TimelineWindow, build_predicates
from app.services.collections import PROJECTS
from app.services.project import project_service

router = APIRouter()


@router.post("/", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    project_data: ProjectCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Create a new project."""
    try:
        project = await project_service.create(db, project_data, user.id)
        return ProjectResponse.model_validate(project)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/", response_model=ProjectListResponse)
async def get_projects(
    search: Optional[str] = Query(None, description="Title, description, tag or tech"),
    category: Optional[ProjectCategory] = Query(None),
    project_status: Optional[ProjectStatus] = Query(None, alias="status"),
    priority: Optional[Priority] = Query(None),
    tag: Optional[str] = Query(None),
    tech: Optional[str] = Query(None, description="Exact tech stack entry"),
    timeline: TimelineWindow = Query(TimelineWindow.ALL, description="By deadline"),
    skip: int = Query(0, ge=0),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """List projects, newest first."""
    try:
        predicates = build_predicates(
            PROJECTS,
            search=search,
            enums={
                "category": category,
                "status": project_status,
                "priority": priority,
            },
            contains={"tags": tag, "tech_stack": tech},
            timeline=timeline,
            tz=settings.TIMEZONE,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    result = await project_service.query(db, user.id, predicates, skip, limit)
    return ProjectListResponse(
        items=[ProjectResponse.model_validate(project) for project in result.items],
        total=result.total,
        filtered_total=result.filtered_total,
        stats=ProjectStats(**result.stats),
        filter_options=result.filter_options,
    )


@router.get("/{project_uuid}", response_model=ProjectResponse)
async def get_project(
    project_uuid: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    project = await project_service.get(db, project_uuid, user.id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return ProjectResponse.model_validate(project)


@router.put("/{project_uuid}", response_model=ProjectResponse)
async def update_project(
    project_uuid: UUID,
    project_update: ProjectUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Update a project. Moving to completed stamps ``completed_at``."""
    try:
        project = await project_service.update(
            db, project_uuid, project_update, user.id
        )
        if not project:
            raise HTTPException(status_code=404, detail="Project not found")
        return ProjectResponse.model_validate(project)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/{project_uuid}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project_uuid: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    deleted = await project_service.delete(db, project_uuid, user.id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Project not found")
