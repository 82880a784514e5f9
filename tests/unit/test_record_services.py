"""Unit tests for the project, skill and event services."""

from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import RecordNotFoundError, RecordValidationError
from app.models.project import ProjectStatus
from app.models.user import User
from app.schemas.project import ProjectCreate, ProjectUpdate
from app.services.dashboard import dashboard_service
from app.services.event import event_service
from app.services.project import project_service
from app.services.skill import skill_service


class TestProjectService:
    """Test project completion tracking."""

    async def test_completing_sets_completed_at(
        self, db: AsyncSession, sample_project, sample_user: User
    ):
        project = await project_service.update(
            db,
            sample_project.uuid,
            ProjectUpdate(status=ProjectStatus.COMPLETED),
            sample_user.id,
        )

        assert project.status == "completed"
        assert project.completed_at is not None

    async def test_resaving_completed_project_keeps_timestamp(
        self, db: AsyncSession, sample_project, sample_user: User
    ):
        first = await project_service.update(
            db, sample_project.uuid, {"status": "completed"}, sample_user.id
        )
        completed_at = first.completed_at

        second = await project_service.update(
            db, sample_project.uuid, {"status": "completed", "progress": 100}, sample_user.id
        )

        assert second.completed_at == completed_at

    async def test_invalid_url_is_rejected(self, db: AsyncSession, sample_user: User):
        with pytest.raises(RecordValidationError, match="github_url"):
            await project_service.create(
                db,
                ProjectCreate(title="Site", github_url="github.com/me/site"),
                sample_user.id,
            )

    async def test_records_are_scoped_to_owner(
        self, db: AsyncSession, sample_project, other_user: User
    ):
        assert await project_service.get(db, sample_project.uuid, other_user.id) is None
        result = await project_service.query(db, other_user.id)
        assert result.total == 0


class TestSkillService:
    async def test_query_stats(self, db: AsyncSession, sample_skill, sample_user: User):
        await skill_service.create(
            db, {"name": "Rust", "progress": 25, "practice_hours": 4}, sample_user.id
        )

        result = await skill_service.query(db, sample_user.id)

        assert result.total == 2
        assert result.stats["total_hours"] == 124.5
        assert result.stats["avg_progress"] == 53
        # Most practiced first
        assert result.items[0].name == "Python"


class TestEventService:
    """Test attendee bookkeeping."""

    async def test_add_attendee_is_idempotent(
        self, db: AsyncSession, sample_event, sample_person, sample_user: User
    ):
        event = await event_service.add_attendee(
            db, sample_event.uuid, sample_person.uuid, sample_user.id
        )
        assert event.attendee_count == 1

        event = await event_service.add_attendee(
            db, sample_event.uuid, sample_person.uuid, sample_user.id
        )
        assert event.attendee_count == 1
        assert event.attendees[0].person.name == "Ada Lovelace"

    async def test_remove_attendee(
        self, db: AsyncSession, sample_event, sample_person, sample_user: User
    ):
        await event_service.add_attendee(
            db, sample_event.uuid, sample_person.uuid, sample_user.id
        )

        event = await event_service.remove_attendee(
            db, sample_event.uuid, sample_person.uuid, sample_user.id
        )

        assert event.attendee_count == 0

    async def test_add_unknown_person(
        self, db: AsyncSession, sample_event, sample_user: User
    ):
        with pytest.raises(RecordNotFoundError, match="Person"):
            await event_service.add_attendee(db, sample_event.uuid, uuid4(), sample_user.id)


class TestDashboardService:
    async def test_counts_per_collection(
        self, db: AsyncSession, sample_user: User, sample_note, sample_task, sample_skill
    ):
        counts = await dashboard_service.get_counts(db, sample_user.id)

        assert counts == {
            "people": 0,
            "projects": 0,
            "skills": 1,
            "events": 0,
            "tasks": 1,
            "notes": 1,
        }
