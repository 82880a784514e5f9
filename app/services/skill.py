from app.models.skill import Skill
from app.services.base import OwnedRecordService
from app.services.collections import SKILLS


class SkillService(OwnedRecordService):
    """Service layer for skills and learning progress."""

    model = Skill
    schema = SKILLS
    required_fields = ("name",)
    url_fields = ("icon_url",)


skill_service = SkillService()
