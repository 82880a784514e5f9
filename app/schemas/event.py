from datetime import date, datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from app.models.event import EventType

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class EventBase(BaseModel):
    """Base event schema with common fields."""

    name: str = Field(..., min_length=1, max_length=255)
    event_type: EventType = EventType.SEMINAR
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    start_time: Optional[str] = Field(None, pattern=TIME_PATTERN, description="HH:MM")
    end_time: Optional[str] = Field(None, pattern=TIME_PATTERN, description="HH:MM")
    venue: Optional[str] = Field(None, max_length=255)
    organizer: Optional[str] = Field(None, max_length=255)
    is_online: bool = False
    meeting_url: Optional[str] = Field(None, max_length=500)
    cost: float = Field(0, ge=0)
    registration_url: Optional[str] = Field(None, max_length=500)
    event_info_url: Optional[str] = Field(None, max_length=500)
    certificate_url: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = None
    tags: Optional[list[str]] = None
    is_featured: bool = False


class EventCreate(EventBase):
    """Schema for creating a new event."""

    @model_validator(mode="after")
    def validate_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        return self


class EventUpdate(BaseModel):
    """Schema for updating an event."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    event_type: Optional[EventType] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    start_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    end_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    venue: Optional[str] = Field(None, max_length=255)
    organizer: Optional[str] = Field(None, max_length=255)
    is_online: Optional[bool] = None
    meeting_url: Optional[str] = Field(None, max_length=500)
    cost: Optional[float] = Field(None, ge=0)
    registration_url: Optional[str] = Field(None, max_length=500)
    event_info_url: Optional[str] = Field(None, max_length=500)
    certificate_url: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = None
    tags: Optional[list[str]] = None
    is_featured: Optional[bool] = None


class AttendeePerson(BaseModel):
    uuid: UUID
    name: str
    role: Optional[str] = None

    model_config = {"from_attributes": True}


class AttendeeResponse(BaseModel):
    person_id: int
    person: Optional[AttendeePerson] = None

    model_config = {"from_attributes": True}


class EventResponse(EventBase):
    """Schema for event responses."""

    id: int
    uuid: UUID
    attendees: list[AttendeeResponse] = []
    attendee_count: int = 0
    has_certificate: bool = False

    # Audit timestamps
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class EventSummary(BaseModel):
    id: int
    uuid: UUID
    name: str
    start_date: Optional[date] = None

    model_config = {"from_attributes": True}


class EventStats(BaseModel):
    total: int = 0
    total_attendees: int = 0
    with_certificates: int = 0
    total_spent: float = 0
    upcoming: int = 0


class EventListResponse(BaseModel):
    """Schema for the filtered event list."""

    items: list[EventResponse]
    total: int
    filtered_total: int
    stats: EventStats
    filter_options: dict[str, list[Any]] = Field(default_factory=dict)
