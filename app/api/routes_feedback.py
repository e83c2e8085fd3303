"""
Feedback routes
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.schemas.feedback import FeedbackCreate, FeedbackResponse
from app.services.errors import NotFound
from app.services.repositories import EventRepo, FeedbackRepo
from app.utils.responses import success_response
from app.utils.security import CurrentUser, get_current_user

router = APIRouter()

@router.post("/{event_id}")
async def submit_feedback(
    event_id: int,
    feedback_data: FeedbackCreate,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Submit feedback for an event"""
    if not EventRepo(db).get_by_id(event_id):
        raise NotFound("Event not found")

    feedback = FeedbackRepo(db).create(
        event_id=event_id,
        user_id=user.id,
        comment=feedback_data.comment,
        rating=feedback_data.rating
    )
    return success_response(
        message="Feedback submitted",
        data=FeedbackResponse.from_feedback(feedback),
        status_code=201
    )

@router.get("/{event_id}")
async def list_feedback(
    event_id: int,
    db: Session = Depends(get_db)
):
    """All feedback for an event with author names"""
    feedback = FeedbackRepo(db).list_for_event(event_id)
    return success_response(
        message="Feedback retrieved",
        data=[FeedbackResponse.from_feedback(item) for item in feedback]
    )
