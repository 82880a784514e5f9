from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import RecordNotFoundError
from app.models.event import Event, EventAttendee
from app.services.base import OwnedRecordService
from app.services.collections import EVENTS
from app.services.person import person_service

logger = structlog.get_logger(__name__)


class EventService(OwnedRecordService):
    """Service layer for events and the people met there."""

    model = Event
    schema = EVENTS
    required_fields = ("name",)
    url_fields = (
        "meeting_url",
        "registration_url",
        "event_info_url",
        "certificate_url",
    )

    async def _event_and_person(
        self, db: AsyncSession, event_uuid: UUID, person_uuid: UUID, user_id: int
    ):
        event = await self.get(db, event_uuid, user_id)
        if not event:
            raise RecordNotFoundError("Event", event_uuid)
        person = await person_service.get(db, person_uuid, user_id)
        if not person:
            raise RecordNotFoundError("Person", person_uuid)
        return event, person

    async def add_attendee(
        self, db: AsyncSession, event_uuid: UUID, person_uuid: UUID, user_id: int
    ) -> Event:
        """Link a person to an event. Adding twice is a no-op."""
        event, person = await self._event_and_person(
            db, event_uuid, person_uuid, user_id
        )
        if any(attendee.person_id == person.id for attendee in event.attendees):
            return event

        try:
            event.attendees.append(EventAttendee(person_id=person.id))
            await db.commit()

            logger.info(
                "Attendee added",
                event_uuid=event_uuid,
                person_uuid=person_uuid,
                user_id=user_id,
            )
            return await self._load(db, event.id)

        except IntegrityError as e:
            await db.rollback()
            logger.error(
                "Failed to add attendee due to integrity constraint",
                event_uuid=event_uuid,
                person_uuid=person_uuid,
                error=str(e),
            )
            raise ValueError("Person is already an attendee of this event")
        except Exception as e:
            await db.rollback()
            logger.error(
                "Failed to add attendee",
                event_uuid=event_uuid,
                person_uuid=person_uuid,
                error=str(e),
            )
            raise

    async def remove_attendee(
        self, db: AsyncSession, event_uuid: UUID, person_uuid: UUID, user_id: int
    ) -> Event:
        event, person = await self._event_and_person(
            db, event_uuid, person_uuid, user_id
        )
        remaining = [a for a in event.attendees if a.person_id != person.id]
        if len(remaining) == len(event.attendees):
            return event

        try:
            event.attendees = remaining
            await db.commit()

            logger.info(
                "Attendee removed",
                event_uuid=event_uuid,
                person_uuid=person_uuid,
                user_id=user_id,
            )
            return await self._load(db, event.id)

        except Exception as e:
            await db.rollback()
            logger.error(
                "Failed to remove attendee",
                event_uuid=event_uuid,
                person_uuid=person_uuid,
                error=str(e),
            )
            raise


event_service = EventService()
