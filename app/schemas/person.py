from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class PersonContacts(BaseModel):
    """Handles or URLs per contact channel."""

    instagram: Optional[str] = Field(None, max_length=255)
    whatsapp: Optional[str] = Field(None, max_length=50)
    linkedin: Optional[str] = Field(None, max_length=255)
    github: Optional[str] = Field(None, max_length=255)
    discord: Optional[str] = Field(None, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    twitter: Optional[str] = Field(None, max_length=255)
    telegram: Optional[str] = Field(None, max_length=255)
    website: Optional[str] = Field(None, max_length=500)


class PersonBase(BaseModel):
    """Base person schema with common fields."""

    name: str = Field(..., min_length=1, max_length=255, description="Full name")
    profession: Optional[str] = Field(None, max_length=255)
    role: Optional[str] = Field(
        None, max_length=100, description="Relationship, e.g. Friend or Mentor"
    )
    skills: Optional[list[str]] = None
    tags: Optional[list[str]] = None
    notes: Optional[str] = None


class PersonCreate(PersonBase):
    """Schema for creating a new person."""

    contacts: Optional[PersonContacts] = None


class PersonUpdate(BaseModel):
    """Schema for updating a person."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    profession: Optional[str] = Field(None, max_length=255)
    role: Optional[str] = Field(None, max_length=100)
    skills: Optional[list[str]] = None
    tags: Optional[list[str]] = None
    contacts: Optional[PersonContacts] = None
    notes: Optional[str] = None


class PersonResponse(PersonBase):
    """Schema for person responses."""

    id: int
    uuid: UUID
    contacts: Optional[dict[str, str]] = None

    # Audit timestamps
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PersonStats(BaseModel):
    total: int = 0
    roles: int = 0
    with_contacts: int = 0


class PersonListResponse(BaseModel):
    """Schema for the filtered people list."""

    items: list[PersonResponse]
    total: int
    filtered_total: int
    stats: PersonStats
    filter_options: dict[str, list[Any]] = Field(default_factory=dict)


class PersonCSVImport(BaseModel):
    """Schema for CSV import data."""

    file_data: str = Field(..., description="Base64 encoded CSV file data")
    skip_duplicates: bool = Field(default=True, description="Skip duplicate records")


class PersonImportResult(BaseModel):
    """Schema for CSV import results."""

    success: int = Field(0, description="Inserted rows")
    failed: int = Field(0, description="Rejected rows")
    duplicates: int = Field(0, description="Rows matching an existing person")
    errors: list[str] = Field(default_factory=list)
    duplicate_records: list[dict[str, Any]] = Field(default_factory=list)
