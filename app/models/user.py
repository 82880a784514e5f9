import uuid

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Uuid
from sqlalchemy.sql import func

from app.core.database import Base


class User(Base):
    """Account that owns every person, skill, project, event, task and note."""

    __tablename__ = "users"

    # Core identity
    id = Column(Integer, primary_key=True, index=True)
    uuid = Column(
        Uuid(as_uuid=True), unique=True, nullable=False, default=uuid.uuid4, index=True
    )
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=True)

    # Identity provider link
    descope_user_id = Column(String(255), unique=True, nullable=True, index=True)

    is_active = Column(Boolean, default=True, nullable=False)

    # Audit timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', active={self.is_active})>"
