from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps.auth import get_current_user
from app.api.deps.database import get_db
from app.core.config import settings
from app.core.exceptions import RecordNotFoundError
from app.models.event import EventType
from app.models.user import User
from app.schemas.event import (
    EventCreate,
    EventListResponse,
    EventResponse,
    EventStats,
    EventUpdate,
)
from app.services.collection_query import TimelineWindow, build_predicates
from app.services.collections import EVENTS
from app.services.event import event_service

router = APIRouter()


@router.post("/", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    event_data: EventCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Create a new event."""
    try:
        event = await event_service.create(db, event_data, user.id)
        return EventResponse.model_validate(event)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/", response_model=EventListResponse)
async def get_events(
    search: Optional[str] = Query(None, description="Name, venue, organizer or tag"),
    event_type: Optional[EventType] = Query(None),
    tag: Optional[str] = Query(None),
    year: Optional[int] = Query(None, ge=1970, le=9999, description="Start year"),
    timeline: TimelineWindow = Query(TimelineWindow.ALL, description="By start date"),
    online_only: bool = Query(False),
    featured_only: bool = Query(False),
    skip: int = Query(0, ge=0),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """List events, featured first, then latest start date."""
    flags = []
    if online_only:
        flags.append("is_online")
    if featured_only:
        flags.append("is_featured")

    try:
        predicates = build_predicates(
            EVENTS,
            search=search,
            enums={"event_type": event_type},
            flags=flags,
            contains={"tags": tag},
            year=year,
            timeline=timeline,
            tz=settings.TIMEZONE,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    result = await event_service.query(db, user.id, predicates, skip, limit)
    return EventListResponse(
        items=[EventResponse.model_validate(event) for event in result.items],
        total=result.total,
        filtered_total=result.filtered_total,
        stats=EventStats(**result.stats),
        filter_options=result.filter_options,
    )


@router.get("/{event_uuid}", response_model=EventResponse)
async def get_event(
    event_uuid: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    event = await event_service.get(db, event_uuid, user.id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return EventResponse.model_validate(event)


@router.put("/{event_uuid}", response_model=EventResponse)
async def update_event(
    event_uuid: UUID,
    event_update: EventUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        event = await event_service.update(db, event_uuid, event_update, user.id)
        if not event:
            raise HTTPException(status_code=404, detail="Event not found")
        return EventResponse.model_validate(event)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/{event_uuid}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event(
    event_uuid: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    deleted = await event_service.delete(db, event_uuid, user.id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Event not found")


@router.post("/{event_uuid}/attendees/{person_uuid}", response_model=EventResponse)
async def add_event_attendee(
    event_uuid: UUID,
    person_uuid: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Record that a person was met at this event."""
    try:
        event = await event_service.add_attendee(db, event_uuid, person_uuid, user.id)
        return EventResponse.model_validate(event)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/{event_uuid}/attendees/{person_uuid}", response_model=EventResponse)
async def remove_event_attendee(
    event_uuid: UUID,
    person_uuid: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        event = await event_service.remove_attendee(
            db, event_uuid, person_uuid, user.id
        )
        return EventResponse.model_validate(event)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
