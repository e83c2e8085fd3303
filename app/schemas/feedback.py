"""
Feedback schemas
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

class FeedbackCreate(BaseModel):
    comment: str = ""
    rating: int = Field(ge=1, le=5)

class FeedbackResponse(BaseModel):
    id: int
    event_id: int
    user_id: int
    user_name: Optional[str] = None
    comment: str
    rating: int
    created_at: Optional[datetime] = None

    @classmethod
    def from_feedback(cls, feedback) -> "FeedbackResponse":
        return cls(
            id=feedback.id,
            event_id=feedback.event_id,
            user_id=feedback.user_id,
            user_name=feedback.user.name if feedback.user else None,
            comment=feedback.comment or "",
            rating=feedback.rating,
            created_at=feedback.created_at,
        )
