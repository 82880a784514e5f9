from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps.auth import get_current_user
from app.api.deps.database import get_db
from app.core.config import settings
from app.models.project import Priority
from app.models.task import TaskCategory, TaskStatus
from app.models.user import User
from app.schemas.task import (
    TaskCreate,
    TaskListResponse,
    TaskResponse,
    TaskStats,
    TaskStatusUpdate,
    TaskUpdate,
)
from app.services.collection_query import TimelineWindow, build_predicates
from app.services.collections import TASKS
from app.services.task import task_service

router = APIRouter()


@router.post("/", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_data: TaskCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Create a new task with its subtasks."""
    try:
        task = await task_service.create(db, task_data, user.id)
        return TaskResponse.model_validate(task)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/", response_model=TaskListResponse)
async def get_tasks(
    search: Optional[str] = Query(None, description="Title, description or tag"),
    category: Optional[TaskCategory] = Query(None),
    priority: Optional[Priority] = Query(None),
    task_status: Optional[TaskStatus] = Query(None, alias="status"),
    tag: Optional[str] = Query(None),
    timeline: TimelineWindow = Query(TimelineWindow.ALL, description="By due date"),
    featured_only: bool = Query(False),
    skip: int = Query(0, ge=0),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """List tasks, featured first, then earliest due date."""
    try:
        predicates = build_predicates(
            TASKS,
            search=search,
            enums={
                "category": category,
                "priority": priority,
                "status": task_status,
            },
            flags=["is_featured"] if featured_only else [],
            contains={"tags": tag},
            timeline=timeline,
            tz=settings.TIMEZONE,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    result = await task_service.query(db, user.id, predicates, skip, limit)
    return TaskListResponse(
        items=[TaskResponse.model_validate(task) for task in result.items],
        total=result.total,
        filtered_total=result.filtered_total,
        stats=TaskStats(**result.stats),
        filter_options=result.filter_options,
    )


@router.get("/{task_uuid}", response_model=TaskResponse)
async def get_task(
    task_uuid: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    task = await task_service.get(db, task_uuid, user.id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return TaskResponse.model_validate(task)


@router.put("/{task_uuid}", response_model=TaskResponse)
async def update_task(
    task_uuid: UUID,
    task_update: TaskUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Update a task. A supplied ``subtasks`` list replaces the stored one."""
    try:
        task = await task_service.update(db, task_uuid, task_update, user.id)
        if not task:
            raise HTTPException(status_code=404, detail="Task not found")
        return TaskResponse.model_validate(task)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.patch("/{task_uuid}/status", response_model=TaskResponse)
async def update_task_status(
    task_uuid: UUID,
    status_update: TaskStatusUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    task = await task_service.update_status(
        db, task_uuid, status_update.status, user.id
    )
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return TaskResponse.model_validate(task)


@router.delete("/{task_uuid}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_uuid: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    deleted = await task_service.delete(db, task_uuid, user.id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Task not found")
