from pydantic import BaseModel


class TagCount(BaseModel):
    tag: str
    count: int


class DashboardCounts(BaseModel):
    """Schema for dashboard headline numbers."""

    people: int = 0
    projects: int = 0
    skills: int = 0
    events: int = 0
    tasks: int = 0
    notes: int = 0
