"""
Admin and organizer routes: analytics and certificate rosters
"""

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.constants import UserRole
from app.core.db import get_db
from app.models import Event, User
from app.services.event_service import EventService
from app.utils.responses import success_response
from app.utils.security import CurrentUser, get_current_user, require_roles

router = APIRouter()

@router.get("/analytics/summary")
async def analytics_summary(
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_roles(UserRole.admin))
):
    """Platform-wide counts for the admin dashboard"""
    total_events = db.query(func.count(Event.id)).scalar()
    total_users = db.query(func.count(User.id)).scalar()
    total_students = db.query(func.count(User.id)).filter(User.role == UserRole.student.value).scalar()
    total_clubs = db.query(func.count(User.id)).filter(User.role == UserRole.club.value).scalar()

    event_types = db.query(Event.category, func.count(Event.id)).group_by(Event.category).all()
    event_statuses = db.query(Event.status, func.count(Event.id)).group_by(Event.status).all()
    club_activity = db.query(
        User.id, User.name, func.count(Event.id)
    ).join(Event, Event.created_by == User.id).group_by(User.id, User.name).all()

    return success_response(
        message="Analytics summary",
        data={
            "total_events": total_events,
            "total_users": total_users,
            "total_students": total_students,
            "total_clubs": total_clubs,
            "event_types": [{"category": category, "count": count} for category, count in event_types],
            "event_statuses": [{"status": status, "count": count} for status, count in event_statuses],
            "club_activity": [
                {"club_id": club_id, "name": name, "count": count}
                for club_id, name, count in club_activity
            ]
        }
    )

@router.get("/certificates/{event_id}")
async def certificate_roster(
    event_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Attended students for certificate generation"""
    event, records = EventService(db).get_attendees(event_id, user.id, user.role, attended_only=True)
    return success_response(
        message="Certificate roster",
        data={
            "event_id": event.id,
            "event_title": event.title,
            "recipients": [
                {
                    "user_id": record.user_id,
                    "name": record.user.name if record.user else None,
                    "registered_college": record.registered_college
                }
                for record in records
            ]
        }
    )
