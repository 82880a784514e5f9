import uuid

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.sql import func

from app.core.database import Base

CONTACT_FIELDS = (
    "instagram",
    "whatsapp",
    "linkedin",
    "github",
    "discord",
    "email",
    "phone",
    "twitter",
    "telegram",
    "website",
)


class Person(Base):
    """A contact in the user's network."""

    __tablename__ = "people"

    # Core identity
    id = Column(Integer, primary_key=True, index=True)
    uuid = Column(
        Uuid(as_uuid=True), unique=True, nullable=False, default=uuid.uuid4, index=True
    )
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Profile
    name = Column(String(255), nullable=False, index=True)
    profession = Column(String(255), nullable=True)
    role = Column(String(100), nullable=True, index=True)  # Friend, Mentor, ...
    skills = Column(JSON, nullable=True)  # list[str]
    tags = Column(JSON, nullable=True)  # list[str]

    # { instagram, whatsapp, linkedin, github, ... } -> handle or url
    contacts = Column(JSON, nullable=True)
    notes = Column(Text, nullable=True)

    # Audit timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def contact(self, field: str):
        """Get a single contact value, or None."""
        return (self.contacts or {}).get(field)

    def __repr__(self):
        return f"<Person(id={self.id}, name='{self.name}', role='{self.role}')>"
