from datetime import date, datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from app.models.project import Priority
from app.models.task import RecurrencePattern, TaskCategory, TaskStatus

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class SubtaskIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    is_completed: bool = False


class SubtaskResponse(BaseModel):
    id: int
    title: str
    is_completed: bool
    order_index: int

    model_config = {"from_attributes": True}


class TaskBase(BaseModel):
    """Base task schema with common fields."""

    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    notes: Optional[str] = None
    category: TaskCategory = TaskCategory.PERSONAL
    priority: Priority = Priority.MEDIUM
    status: TaskStatus = TaskStatus.NOT_STARTED
    due_date: Optional[date] = None
    due_time: Optional[str] = Field(None, pattern=TIME_PATTERN, description="HH:MM")
    estimated_time: Optional[int] = Field(None, ge=0, description="Minutes")
    actual_time_spent: int = Field(0, ge=0, description="Minutes")
    progress: int = Field(0, ge=0, le=100)

    # Weak links
    skill_id: Optional[int] = None
    project_id: Optional[int] = None
    event_id: Optional[int] = None

    # Recurrence
    is_recurring: bool = False
    recurrence_pattern: Optional[RecurrencePattern] = None
    recurrence_end_date: Optional[date] = None

    tags: Optional[list[str]] = None
    attachments: Optional[list[str]] = None
    is_featured: bool = False


class TaskCreate(TaskBase):
    """Schema for creating a new task."""

    subtasks: list[SubtaskIn] = []

    @model_validator(mode="after")
    def validate_recurrence(self):
        if self.is_recurring and not self.recurrence_pattern:
            raise ValueError("recurrence_pattern is required for recurring tasks")
        return self


class TaskUpdate(BaseModel):
    """Schema for updating a task. ``subtasks`` replaces the whole list."""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    notes: Optional[str] = None
    category: Optional[TaskCategory] = None
    priority: Optional[Priority] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[date] = None
    due_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    estimated_time: Optional[int] = Field(None, ge=0)
    actual_time_spent: Optional[int] = Field(None, ge=0)
    progress: Optional[int] = Field(None, ge=0, le=100)
    skill_id: Optional[int] = None
    project_id: Optional[int] = None
    event_id: Optional[int] = None
    is_recurring: Optional[bool] = None
    recurrence_pattern: Optional[RecurrencePattern] = None
    recurrence_end_date: Optional[date] = None
    tags: Optional[list[str]] = None
    attachments: Optional[list[str]] = None
    is_featured: Optional[bool] = None
    subtasks: Optional[list[SubtaskIn]] = None


class TaskStatusUpdate(BaseModel):
    status: TaskStatus


class TaskResponse(TaskBase):
    """Schema for task responses."""

    id: int
    uuid: UUID
    completed_at: Optional[datetime] = None
    subtasks: list[SubtaskResponse] = []
    completed_subtasks: int = 0

    # Audit timestamps
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TaskSummary(BaseModel):
    id: int
    uuid: UUID
    title: str
    status: TaskStatus

    model_config = {"from_attributes": True}


class TaskStats(BaseModel):
    total: int = 0
    not_started: int = 0
    in_progress: int = 0
    done: int = 0
    overdue: int = 0
    high_priority: int = 0


class TaskListResponse(BaseModel):
    """Schema for the filtered task list."""

    items: list[TaskResponse]
    total: int
    filtered_total: int
    stats: TaskStats
    filter_options: dict[str, list[Any]] = Field(default_factory=dict)
