import enum
import uuid

from sqlalchemy import (
    JSON,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.sql import func

from app.core.database import Base


class ProjectCategory(enum.Enum):
    SCHOOL = "school"
    COMPETITION = "competition"
    PERSONAL = "personal"
    CLIENT = "client"
    STARTUP = "startup"
    WEB = "web"
    IOT = "iot"
    AI = "ai"
    MOBILE = "mobile"
    API = "api"


class ProjectStatus(enum.Enum):
    IDEA = "idea"
    PLANNING = "planning"
    IN_PROGRESS = "in-progress"
    ON_HOLD = "on-hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Priority(enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class Project(Base):
    """A project with status, priority and progress tracking."""

    __tablename__ = "projects"

    # Core identity
    id = Column(Integer, primary_key=True, index=True)
    uuid = Column(
        Uuid(as_uuid=True), unique=True, nullable=False, default=uuid.uuid4, index=True
    )
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(30), nullable=False, default=ProjectCategory.PERSONAL.value)
    status = Column(
        String(20), nullable=False, default=ProjectStatus.IDEA.value, index=True
    )
    priority = Column(String(20), nullable=False, default=Priority.MEDIUM.value)
    progress = Column(Integer, nullable=False, default=0)

    # Schedule
    start_date = Column(Date, nullable=True)
    deadline = Column(Date, nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    # Links
    github_url = Column(String(500), nullable=True)
    demo_url = Column(String(500), nullable=True)

    notes = Column(Text, nullable=True)
    tags = Column(JSON, nullable=True)
    tech_stack = Column(JSON, nullable=True)
    team_members = Column(JSON, nullable=True)  # person ids

    # Audit timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self):
        return (
            f"<Project(id={self.id}, title='{self.title}', status='{self.status}', "
            f"progress={self.progress})>"
        )
