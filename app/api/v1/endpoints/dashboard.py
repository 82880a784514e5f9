from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps.auth import get_current_user
from app.api.deps.database import get_db
from app.models.user import User
from app.schemas.common import DashboardCounts
from app.services.dashboard import dashboard_service

router = APIRouter()


@router.get("", response_model=DashboardCounts)
async def get_dashboard(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Counts of people, projects, skills, events, tasks and notes."""
    counts = await dashboard_service.get_counts(db, user.id)
    return DashboardCounts(**counts)
