from datetime import date, datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.models.project import Priority, ProjectCategory, ProjectStatus


class ProjectBase(BaseModel):
    """Base project schema with common fields."""

    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    category: ProjectCategory = ProjectCategory.PERSONAL
    status: ProjectStatus = ProjectStatus.IDEA
    priority: Priority = Priority.MEDIUM
    progress: int = Field(0, ge=0, le=100)
    start_date: Optional[date] = None
    deadline: Optional[date] = None
    github_url: Optional[str] = Field(None, max_length=500)
    demo_url: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = None
    tags: Optional[list[str]] = None
    tech_stack: Optional[list[str]] = None
    team_members: Optional[list[int]] = Field(None, description="Person ids")


class ProjectCreate(ProjectBase):
    """Schema for creating a new project."""


class ProjectUpdate(BaseModel):
    """Schema for updating a project."""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[ProjectCategory] = None
    status: Optional[ProjectStatus] = None
    priority: Optional[Priority] = None
    progress: Optional[int] = Field(None, ge=0, le=100)
    start_date: Optional[date] = None
    deadline: Optional[date] = None
    github_url: Optional[str] = Field(None, max_length=500)
    demo_url: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = None
    tags: Optional[list[str]] = None
    tech_stack: Optional[list[str]] = None
    team_members: Optional[list[int]] = None


class ProjectResponse(ProjectBase):
    """Schema for project responses."""

    id: int
    uuid: UUID
    completed_at: Optional[datetime] = None

    # Audit timestamps
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProjectSummary(BaseModel):
    id: int
    uuid: UUID
    title: str
    status: ProjectStatus

    model_config = {"from_attributes": True}


class ProjectStats(BaseModel):
    total: int = 0
    in_progress: int = 0
    completed: int = 0
    overdue: int = 0
    avg_progress: int = 0


class ProjectListResponse(BaseModel):
    """Schema for the filtered project list."""

    items: list[ProjectResponse]
    total: int
    filtered_total: int
    stats: ProjectStats
    filter_options: dict[str, list[Any]] = Field(default_factory=dict)
