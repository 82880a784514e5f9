from typing import Dict

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.event import Event
from app.models.note import Note
from app.models.person import Person
from app.models.project import Project
from app.models.skill import Skill
from app.models.task import Task

logger = structlog.get_logger(__name__)

COUNTED_MODELS = {
    "people": Person,
    "projects": Project,
    "skills": Skill,
    "events": Event,
    "tasks": Task,
    "notes": Note,
}


class DashboardService:
    """Headline numbers for the dashboard page."""

    async def get_counts(self, db: AsyncSession, user_id: int) -> Dict[str, int]:
        try:
            counts = {}
            for name, model in COUNTED_MODELS.items():
                result = await db.execute(
                    select(func.count(model.id)).where(model.user_id == user_id)
                )
                counts[name] = result.scalar() or 0

            logger.info("Dashboard counts computed", user_id=user_id, **counts)
            return counts

        except Exception as e:
            logger.error("Failed to get dashboard counts", user_id=user_id, error=str(e))
            raise


dashboard_service = DashboardService()
