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
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base


class EventType(enum.Enum):
    SEMINAR = "seminar"
    WORKSHOP = "workshop"
    COMPETITION = "competition"
    MEETUP = "meetup"
    CONFERENCE = "conference"
    OTHER = "other"


class Event(Base):
    """An attended or planned event (seminar, workshop, meetup, ...)."""

    __tablename__ = "events"

    # Core identity
    id = Column(Integer, primary_key=True, index=True)
    uuid = Column(
        Uuid(as_uuid=True), unique=True, nullable=False, default=uuid.uuid4, index=True
    )
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    event_type = Column(String(30), nullable=False, default=EventType.SEMINAR.value)

    # Schedule
    start_date = Column(Date, nullable=True, index=True)
    end_date = Column(Date, nullable=True)
    start_time = Column(String(5), nullable=True)  # HH:MM
    end_time = Column(String(5), nullable=True)

    # Location
    venue = Column(String(255), nullable=True)
    organizer = Column(String(255), nullable=True)
    is_online = Column(Boolean, default=False, nullable=False)
    meeting_url = Column(String(500), nullable=True)

    cost = Column(Float, nullable=False, default=0)
    registration_url = Column(String(500), nullable=True)
    event_info_url = Column(String(500), nullable=True)
    certificate_url = Column(String(500), nullable=True)

    notes = Column(Text, nullable=True)
    tags = Column(JSON, nullable=True)
    is_featured = Column(Boolean, default=False, nullable=False)

    # Audit timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    attendees = relationship(
        "EventAttendee",
        back_populates="event",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def attendee_count(self) -> int:
        return len(self.attendees)

    @property
    def has_certificate(self) -> bool:
        return bool(self.certificate_url)

    def __repr__(self):
        return (
            f"<Event(id={self.id}, name='{self.name}', type='{self.event_type}', "
            f"start_date={self.start_date})>"
        )


class EventAttendee(Base):
    """Person met at an event."""

    __tablename__ = "event_attendees"
    __table_args__ = (
        UniqueConstraint("event_id", "person_id", name="uq_event_attendee"),
    )

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(
        Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False
    )
    person_id = Column(
        Integer, ForeignKey("people.id", ondelete="CASCADE"), nullable=False
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    event = relationship("Event", back_populates="attendees")
    person = relationship("Person", lazy="selectin")

    def __repr__(self):
        return f"<EventAttendee(event_id={self.event_id}, person_id={self.person_id})>"
