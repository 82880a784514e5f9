import enum
import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.sql import func

from app.core.database import Base


class NoteType(enum.Enum):
    FORMULA = "formula"
    TUTORIAL = "tutorial"
    CONCEPT = "concept"
    TROUBLESHOOTING = "troubleshooting"
    REFERENCE = "reference"
    CODE_SNIPPET = "code-snippet"
    OTHER = "other"


class Note(Base):
    """Knowledge base entry. Every content edit bumps ``version``."""

    __tablename__ = "notes"

    # Core identity
    id = Column(Integer, primary_key=True, index=True)
    uuid = Column(
        Uuid(as_uuid=True), unique=True, nullable=False, default=uuid.uuid4, index=True
    )
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Content
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)  # markdown
    category = Column(String(100), nullable=False, index=True)
    note_type = Column(String(30), nullable=False, default=NoteType.CONCEPT.value)
    tags = Column(JSON, nullable=True)
    attachments = Column(JSON, nullable=True)  # urls

    # Weak links
    skill_id = Column(
        Integer, ForeignKey("skills.id", ondelete="SET NULL"), nullable=True
    )
    project_id = Column(
        Integer, ForeignKey("projects.id", ondelete="SET NULL"), nullable=True
    )
    event_id = Column(
        Integer, ForeignKey("events.id", ondelete="SET NULL"), nullable=True
    )
    task_id = Column(
        Integer, ForeignKey("tasks.id", ondelete="SET NULL"), nullable=True
    )

    # Metadata, not versioned
    is_pinned = Column(Boolean, default=False, nullable=False)
    is_favorite = Column(Boolean, default=False, nullable=False)
    view_count = Column(Integer, default=0, nullable=False)

    version = Column(Integer, default=1, nullable=False)

    # Audit timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self):
        return (
            f"<Note(id={self.id}, title='{self.title}', version={self.version}, "
            f"pinned={self.is_pinned})>"
        )


class NoteVersion(Base):
    """Immutable full copy of a note as it was before an update."""

    __tablename__ = "note_versions"

    id = Column(Integer, primary_key=True, index=True)
    uuid = Column(
        Uuid(as_uuid=True), unique=True, nullable=False, default=uuid.uuid4
    )
    note_id = Column(
        Integer, ForeignKey("notes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    version_number = Column(Integer, nullable=False)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return (
            f"<NoteVersion(id={self.id}, note_id={self.note_id}, "
            f"version_number={self.version_number})>"
        )
