import enum
import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base


class TaskCategory(enum.Enum):
    SCHOOL = "school"
    CONTENT = "content"
    PROJECT = "project"
    PERSONAL = "personal"
    LEARNING = "learning"
    WORK = "work"
    HEALTH = "health"
    OTHER = "other"


class TaskStatus(enum.Enum):
    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    DONE = "done"
    BLOCKED = "blocked"
    CANCELLED = "cancelled"


class RecurrencePattern(enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Task(Base):
    """A to-do item with subtasks, due date and optional recurrence."""

    __tablename__ = "tasks"

    # Core identity
    id = Column(Integer, primary_key=True, index=True)
    uuid = Column(
        Uuid(as_uuid=True), unique=True, nullable=False, default=uuid.uuid4, index=True
    )
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    category = Column(String(20), nullable=False, default=TaskCategory.PERSONAL.value)
    priority = Column(String(20), nullable=False, default="medium")
    status = Column(
        String(20), nullable=False, default=TaskStatus.NOT_STARTED.value, index=True
    )

    # Schedule and effort
    due_date = Column(Date, nullable=True, index=True)
    due_time = Column(String(5), nullable=True)  # HH:MM
    estimated_time = Column(Integer, nullable=True)  # minutes
    actual_time_spent = Column(Integer, nullable=False, default=0)  # minutes
    progress = Column(Integer, nullable=False, default=0)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    # Weak links, left dangling-safe on delete of the target
    skill_id = Column(
        Integer, ForeignKey("skills.id", ondelete="SET NULL"), nullable=True
    )
    project_id = Column(
        Integer, ForeignKey("projects.id", ondelete="SET NULL"), nullable=True
    )
    event_id = Column(
        Integer, ForeignKey("events.id", ondelete="SET NULL"), nullable=True
    )

    # Recurrence
    is_recurring = Column(Boolean, default=False, nullable=False)
    recurrence_pattern = Column(String(20), nullable=True)
    recurrence_end_date = Column(Date, nullable=True)

    tags = Column(JSON, nullable=True)
    attachments = Column(JSON, nullable=True)
    is_featured = Column(Boolean, default=False, nullable=False)

    # Audit timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    subtasks = relationship(
        "Subtask",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="Subtask.order_index",
        lazy="selectin",
    )

    @property
    def completed_subtasks(self) -> int:
        return sum(1 for subtask in self.subtasks if subtask.is_completed)

    def __repr__(self):
        return (
            f"<Task(id={self.id}, title='{self.title}', status='{self.status}', "
            f"due_date={self.due_date})>"
        )


class Subtask(Base):
    """Checklist item of a task. Has no lifecycle outside its task."""

    __tablename__ = "subtasks"

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(
        Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title = Column(String(255), nullable=False)
    is_completed = Column(Boolean, default=False, nullable=False)
    order_index = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    task = relationship("Task", back_populates="subtasks")

    def __repr__(self):
        return (
            f"<Subtask(id={self.id}, task_id={self.task_id}, "
            f"order={self.order_index}, done={self.is_completed})>"
        )
