from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class UserResponse(BaseModel):
    """Schema for the authenticated user."""

    id: int
    uuid: UUID
    email: str
    name: Optional[str] = None
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}
