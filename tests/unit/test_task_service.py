"""Unit tests for the task service."""

from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import RecordValidationError
from app.models.task import RecurrencePattern, Task, TaskStatus
from app.models.user import User
from app.schemas.task import SubtaskIn, TaskCreate, TaskUpdate
from app.services.collection_query import build_predicates
from app.services.collections import TASKS
from app.services.task import task_service


class TestTaskService:
    """Test task lifecycle rules."""

    async def test_create_task_with_subtasks(self, db: AsyncSession, sample_user: User):
        """Test creating a task keeps subtasks in submitted order."""
        task_data = TaskCreate(
            title="Prepare talk",
            subtasks=[SubtaskIn(title="Outline"), SubtaskIn(title="Slides", is_completed=True)],
        )

        task = await task_service.create(db, task_data, sample_user.id)

        assert task.uuid is not None
        assert task.status == TaskStatus.NOT_STARTED.value
        assert [s.title for s in task.subtasks] == ["Outline", "Slides"]
        assert [s.order_index for s in task.subtasks] == [0, 1]
        assert task.completed_subtasks == 1

    async def test_done_sets_progress_and_completion(
        self, db: AsyncSession, sample_task: Task, sample_user: User
    ):
        task = await task_service.update_status(
            db, sample_task.uuid, TaskStatus.DONE, sample_user.id
        )

        assert task.status == "done"
        assert task.progress == 100
        assert task.completed_at is not None

    async def test_reopening_clears_completion(
        self, db: AsyncSession, sample_task: Task, sample_user: User
    ):
        await task_service.update_status(db, sample_task.uuid, TaskStatus.DONE, sample_user.id)

        task = await task_service.update(
            db, sample_task.uuid, TaskUpdate(status=TaskStatus.IN_PROGRESS), sample_user.id
        )

        assert task.completed_at is None

    async def test_turning_off_recurrence_clears_pattern(
        self, db: AsyncSession, sample_user: User
    ):
        task = await task_service.create(
            db,
            TaskCreate(
                title="Water plants",
                is_recurring=True,
                recurrence_pattern=RecurrencePattern.WEEKLY,
            ),
            sample_user.id,
        )
        assert task.recurrence_pattern == "weekly"

        task = await task_service.update(
            db, task.uuid, TaskUpdate(is_recurring=False), sample_user.id
        )

        assert task.is_recurring is False
        assert task.recurrence_pattern is None

    async def test_subtasks_are_replaced(
        self, db: AsyncSession, sample_task: Task, sample_user: User
    ):
        task = await task_service.update(
            db,
            sample_task.uuid,
            TaskUpdate(subtasks=[SubtaskIn(title="Only step")]),
            sample_user.id,
        )

        assert [s.title for s in task.subtasks] == ["Only step"]
        assert task.completed_subtasks == 0

    async def test_update_missing_task_returns_none(
        self, db: AsyncSession, sample_user: User
    ):
        assert await task_service.update(db, uuid4(), {"title": "x"}, sample_user.id) is None

    async def test_blank_title_is_rejected(
        self, db: AsyncSession, sample_task: Task, sample_user: User
    ):
        with pytest.raises(RecordValidationError):
            await task_service.update(db, sample_task.uuid, {"title": " "}, sample_user.id)

    async def test_query_overdue(self, db: AsyncSession, sample_user: User, fixed_now):
        from datetime import date

        for title, due, status in [
            ("late", date(2024, 5, 10), "in-progress"),
            ("finished", date(2024, 5, 10), "done"),
            ("upcoming", date(2024, 5, 20), "not-started"),
        ]:
            db.add(Task(user_id=sample_user.id, title=title, due_date=due, status=status))
        await db.commit()

        predicates = build_predicates(TASKS, timeline="overdue", now=fixed_now)
        result = await task_service.query(db, sample_user.id, predicates)

        assert [t.title for t in result.items] == ["late"]
        assert result.total == 3
        assert result.stats["done"] == 1

    async def test_delete_task(self, db: AsyncSession, sample_task: Task, sample_user: User):
        assert await task_service.delete(db, sample_task.uuid, sample_user.id) is True
        assert await task_service.get(db, sample_task.uuid, sample_user.id) is None
        assert await task_service.delete(db, sample_task.uuid, sample_user.id) is False
