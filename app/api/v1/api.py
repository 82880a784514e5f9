from fastapi import APIRouter

from app.api.v1.endpoints import (
    auth,
    dashboard,
    events,
    notes,
    people,
    projects,
    skills,
    tasks,
)

api_router = APIRouter()

# Authentication endpoints
api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])

# Dashboard counts
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])

# Network
api_router.include_router(people.router, prefix="/people", tags=["people"])

# Learning and work tracking
api_router.include_router(skills.router, prefix="/skills", tags=["skills"])
api_router.include_router(projects.router, prefix="/projects", tags=["projects"])
api_router.include_router(events.router, prefix="/events", tags=["events"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])

# Versioned knowledge base
api_router.include_router(notes.router, prefix="/notes", tags=["notes"])
