# Import all models to ensure they are registered with SQLAlchemy
from . import (
    event,
    note,
    person,
    project,
    skill,
    task,
    user,
)

__all__ = [
    "event",
    "note",
    "person",
    "project",
    "skill",
    "task",
    "user",
]
