from datetime import date

import pytest
from pydantic import ValidationError

from app.models.event import EventType
from app.models.note import NoteType
from app.models.task import TaskStatus
from app.schemas.event import EventCreate
from app.schemas.note import NoteCreate, NoteStats, NoteUpdate
from app.schemas.person import PersonCSVImport
from app.schemas.skill import SkillCreate
from app.schemas.task import TaskCreate, TaskStatusUpdate


@pytest.mark.unit
class TestNoteSchemas:
    """Unit tests for note schemas."""

    def test_note_create_defaults(self):
        note = NoteCreate(title="Ohm's law", content="V = IR", category="Physics")

        assert note.note_type == NoteType.CONCEPT
        assert note.is_pinned is False
        assert note.tags is None

    def test_note_create_requires_content(self):
        with pytest.raises(ValidationError):
            NoteCreate(title="Empty", content="", category="Misc")

    def test_note_update_only_sets_given_fields(self):
        update = NoteUpdate(content="new body", expected_version=3)

        assert update.model_dump(exclude_unset=True) == {
            "content": "new body",
            "expected_version": 3,
        }

    def test_note_update_rejects_zero_version(self):
        with pytest.raises(ValidationError):
            NoteUpdate(expected_version=0)

    def test_note_type_values(self):
        assert NoteCreate(
            title="t", content="c", category="k", note_type="code-snippet"
        ).note_type == NoteType.CODE_SNIPPET

    def test_note_stats_defaults(self):
        stats = NoteStats()

        assert stats.total == 0
        assert stats.top_tags == []


@pytest.mark.unit
class TestTaskSchemas:
    def test_recurring_task_needs_pattern(self):
        with pytest.raises(ValidationError, match="recurrence_pattern"):
            TaskCreate(title="Gym", is_recurring=True)

    def test_due_time_format(self):
        assert TaskCreate(title="Call", due_time="09:30").due_time == "09:30"
        with pytest.raises(ValidationError):
            TaskCreate(title="Call", due_time="9:30pm")

    def test_progress_bounds(self):
        with pytest.raises(ValidationError):
            TaskCreate(title="Over", progress=101)

    def test_status_update(self):
        assert TaskStatusUpdate(status="blocked").status == TaskStatus.BLOCKED


@pytest.mark.unit
class TestEventSchemas:
    def test_end_before_start_is_rejected(self):
        with pytest.raises(ValidationError, match="end_date"):
            EventCreate(
                name="Hackathon",
                start_date=date(2024, 5, 2),
                end_date=date(2024, 5, 1),
            )

    def test_event_defaults(self):
        event = EventCreate(name="Meetup")

        assert event.event_type == EventType.SEMINAR
        assert event.cost == 0
        assert event.is_online is False

    def test_negative_cost_is_rejected(self):
        with pytest.raises(ValidationError):
            EventCreate(name="Paid", cost=-1)


@pytest.mark.unit
class TestOtherSchemas:
    def test_skill_progress_bounds(self):
        with pytest.raises(ValidationError):
            SkillCreate(name="Go", progress=-5)

    def test_skill_resources(self):
        skill = SkillCreate(
            name="Go",
            resources=[{"type": "book", "title": "The Go Programming Language"}],
        )

        assert skill.resources[0].url is None

    def test_csv_import_defaults_to_skipping_duplicates(self):
        assert PersonCSVImport(file_data="bmFtZQo=").skip_duplicates is True
