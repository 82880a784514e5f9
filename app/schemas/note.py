from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.models.note import NoteType
from app.schemas.common import TagCount
from app.schemas.event import EventSummary
from app.schemas.project import ProjectSummary
from app.schemas.skill import SkillSummary
from app.schemas.task import TaskSummary


class NoteBase(BaseModel):
    """Base note schema with common fields."""

    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1, description="Markdown body")
    category: str = Field(..., min_length=1, max_length=100)
    note_type: NoteType = NoteType.CONCEPT
    tags: Optional[list[str]] = None
    attachments: Optional[list[str]] = Field(None, description="Attachment URLs")

    # Weak links
    skill_id: Optional[int] = None
    project_id: Optional[int] = None
    event_id: Optional[int] = None
    task_id: Optional[int] = None


class NoteCreate(NoteBase):
    """Schema for creating a new note."""

    is_pinned: bool = False
    is_favorite: bool = False


class NoteUpdate(BaseModel):
    """Schema for updating a note. Every update creates a new version."""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    note_type: Optional[NoteType] = None
    tags: Optional[list[str]] = None
    attachments: Optional[list[str]] = None
    skill_id: Optional[int] = None
    project_id: Optional[int] = None
    event_id: Optional[int] = None
    task_id: Optional[int] = None
    expected_version: Optional[int] = Field(
        None, ge=1, description="Reject the update if the note moved past this version"
    )


class NoteResponse(NoteBase):
    """Schema for note responses."""

    id: int
    uuid: UUID
    is_pinned: bool
    is_favorite: bool
    view_count: int
    version: int

    # Audit timestamps
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class NoteLinks(BaseModel):
    skill: Optional[SkillSummary] = None
    project: Optional[ProjectSummary] = None
    event: Optional[EventSummary] = None
    task: Optional[TaskSummary] = None


class NoteDetailResponse(NoteResponse):
    """Note with its linked records resolved."""

    links: NoteLinks = NoteLinks()


class NoteVersionResponse(BaseModel):
    """Schema for an immutable note snapshot."""

    uuid: UUID
    version_number: int
    title: str
    content: str
    created_at: datetime

    model_config = {"from_attributes": True}


class NoteStats(BaseModel):
    total: int = 0
    pinned: int = 0
    favorites: int = 0
    total_views: int = 0
    categories: int = 0
    top_tags: list[TagCount] = []


class NoteListResponse(BaseModel):
    """Schema for the filtered note list."""

    items: list[NoteResponse]
    total: int
    filtered_total: int
    stats: NoteStats
    filter_options: dict[str, list[Any]] = Field(default_factory=dict)
