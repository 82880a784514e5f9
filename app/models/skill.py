import enum
import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.sql import func

from app.core.database import Base


class SkillCategory(enum.Enum):
    WEB = "web"
    MOBILE = "mobile"
    IOT = "iot"
    AI = "ai"
    DEVOPS = "devops"
    DATA = "data"
    EMBEDDED = "embedded"
    DESIGN = "design"
    SOFT_SKILL = "soft-skill"


class SkillType(enum.Enum):
    LANGUAGE = "language"
    FRAMEWORK = "framework"
    LIBRARY = "library"
    TOOL = "tool"
    PLATFORM = "platform"
    HARDWARE = "hardware"
    SOFT_SKILL = "soft-skill"


class SkillLevel(enum.Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


class SkillDifficulty(enum.Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    INSANE = "insane"


class Skill(Base):
    """A skill being learned, with progress and practice tracking."""

    __tablename__ = "skills"

    # Core identity
    id = Column(Integer, primary_key=True, index=True)
    uuid = Column(
        Uuid(as_uuid=True), unique=True, nullable=False, default=uuid.uuid4, index=True
    )
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    category = Column(String(30), nullable=False, default=SkillCategory.WEB.value)
    skill_type = Column(String(30), nullable=False, default=SkillType.LANGUAGE.value)
    level = Column(String(20), nullable=False, default=SkillLevel.BEGINNER.value)
    difficulty = Column(
        String(20), nullable=False, default=SkillDifficulty.MEDIUM.value
    )

    # Progress tracking
    progress = Column(Integer, nullable=False, default=0)  # 0-100
    practice_hours = Column(Float, nullable=False, default=0)
    learning_since = Column(Date, nullable=True)
    last_practiced = Column(Date, nullable=True)

    description = Column(Text, nullable=True)
    icon_url = Column(String(500), nullable=True)
    notes = Column(Text, nullable=True)
    tags = Column(JSON, nullable=True)
    resources = Column(JSON, nullable=True)  # [{type, title, url}]
    is_featured = Column(Boolean, default=False, nullable=False)

    # Audit timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    @property
    def is_in_progress(self) -> bool:
        return 0 < (self.progress or 0) < 100

    def __repr__(self):
        return (
            f"<Skill(id={self.id}, name='{self.name}', level='{self.level}', "
            f"progress={self.progress})>"
        )
