from datetime import date, datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.models.skill import SkillCategory, SkillDifficulty, SkillLevel, SkillType


class SkillResource(BaseModel):
    """Learning resource attached to a skill."""

    type: str = Field(..., max_length=50, description="course, book, video, ...")
    title: str = Field(..., min_length=1, max_length=255)
    url: Optional[str] = Field(None, max_length=500)


class SkillBase(BaseModel):
    """Base skill schema with common fields."""

    name: str = Field(..., min_length=1, max_length=255)
    category: SkillCategory = SkillCategory.WEB
    skill_type: SkillType = SkillType.LANGUAGE
    level: SkillLevel = SkillLevel.BEGINNER
    difficulty: SkillDifficulty = SkillDifficulty.MEDIUM
    progress: int = Field(0, ge=0, le=100, description="Progress percentage")
    practice_hours: float = Field(0, ge=0)
    learning_since: Optional[date] = None
    last_practiced: Optional[date] = None
    description: Optional[str] = None
    icon_url: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = None
    tags: Optional[list[str]] = None
    resources: Optional[list[SkillResource]] = None
    is_featured: bool = False


class SkillCreate(SkillBase):
    """Schema for creating a new skill."""


class SkillUpdate(BaseModel):
    """Schema for updating a skill."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    category: Optional[SkillCategory] = None
    skill_type: Optional[SkillType] = None
    level: Optional[SkillLevel] = None
    difficulty: Optional[SkillDifficulty] = None
    progress: Optional[int] = Field(None, ge=0, le=100)
    practice_hours: Optional[float] = Field(None, ge=0)
    learning_since: Optional[date] = None
    last_practiced: Optional[date] = None
    description: Optional[str] = None
    icon_url: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = None
    tags: Optional[list[str]] = None
    resources: Optional[list[SkillResource]] = None
    is_featured: Optional[bool] = None


class SkillResponse(SkillBase):
    """Schema for skill responses."""

    id: int
    uuid: UUID

    # Audit timestamps
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class SkillSummary(BaseModel):
    id: int
    uuid: UUID
    name: str
    level: SkillLevel

    model_config = {"from_attributes": True}


class SkillStats(BaseModel):
    total: int = 0
    total_hours: float = 0
    avg_progress: int = 0
    expert_count: int = 0
    in_progress: int = 0


class SkillListResponse(BaseModel):
    """Schema for the filtered skill list."""

    items: list[SkillResponse]
    total: int
    filtered_total: int
    stats: SkillStats
    filter_options: dict[str, list[Any]] = Field(default_factory=dict)
