from datetime import datetime, timezone
from typing import Any, Dict
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.task import Subtask, Task, TaskStatus
from app.services.base import OwnedRecordService
from app.services.collections import TASKS

logger = structlog.get_logger(__name__)


class TaskService(OwnedRecordService):
    """Service layer for tasks and their subtasks."""

    model = Task
    schema = TASKS
    required_fields = ("title",)

    def _prepare(self, values: Dict[str, Any], record=None) -> Dict[str, Any]:
        values.pop("completed_at", None)

        if "status" in values:
            if values["status"] == TaskStatus.DONE.value:
                values["progress"] = 100
                values["completed_at"] = datetime.now(timezone.utc)
            else:
                values["completed_at"] = None

        if "is_recurring" in values and not values["is_recurring"]:
            values["recurrence_pattern"] = None
            values["recurrence_end_date"] = None

        if "subtasks" in values:
            # The submitted list replaces the stored one; position is the order
            values["subtasks"] = [
                Subtask(
                    title=subtask["title"],
                    is_completed=subtask.get("is_completed", False),
                    order_index=index,
                )
                for index, subtask in enumerate(values["subtasks"] or [])
            ]
        return values

    async def update_status(
        self, db: AsyncSession, task_uuid: UUID, status: TaskStatus, user_id: int
    ):
        """Quick status change from the task list."""
        task = await self.update(db, task_uuid, {"status": status}, user_id)
        if task:
            logger.info(
                "Task status changed",
                task_uuid=task_uuid,
                status=task.status,
                user_id=user_id,
            )
        return task


task_service = TaskService()
