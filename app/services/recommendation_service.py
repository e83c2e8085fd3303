"""
Category-affinity event recommendations
"""

from typing import List

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import UserRole
from app.models import Event
from app.services.errors import Forbidden
from app.services.repositories import EventRepo

class RecommendationService:
    """Suggests approved events in categories the student already joined"""

    def __init__(self, db: Session):
        self.events = EventRepo(db)

    def recommend(self, student_id: int, role: str) -> List[Event]:
        if role != UserRole.student.value:
            raise Forbidden("Recommendations are only available to students")

        categories = self.events.categories_joined_by(student_id)
        if categories:
            matches = self.events.approved_not_joined(
                student_id,
                limit=settings.RECOMMEND_AFFINITY_LIMIT,
                categories=categories,
            )
            if matches:
                return matches

        return self.events.approved_not_joined(student_id, limit=settings.RECOMMEND_GENERAL_LIMIT)
