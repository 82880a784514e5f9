from datetime import datetime, timezone
from typing import Any, Dict

from app.models.project import Project, ProjectStatus
from app.services.base import OwnedRecordService
from app.services.collections import PROJECTS


class ProjectService(OwnedRecordService):
    """Service layer for projects."""

    model = Project
    schema = PROJECTS
    required_fields = ("title",)
    url_fields = ("github_url", "demo_url")

    def _prepare(self, values: Dict[str, Any], record=None) -> Dict[str, Any]:
        values.pop("completed_at", None)
        if "status" not in values:
            return values

        if values["status"] == ProjectStatus.COMPLETED.value:
            # Keep the original completion time when re-saving a finished project
            if record is None or record.completed_at is None:
                values["completed_at"] = datetime.now(timezone.utc)
        else:
            values["completed_at"] = None
        return values


project_service = ProjectService()
