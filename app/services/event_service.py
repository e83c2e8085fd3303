"""
Event lifecycle service: creation, review status, registration and queries
"""

import logging
import secrets
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.constants import EventCategory, EventStatus, UserRole
from app.models import AttendanceRecord, Event
from app.schemas.event import AttendanceQuestionIn, EventCreate
from app.services.errors import Conflict, Forbidden, InvalidArgument, InvalidState, NotFound
from app.services.repositories import AttendanceRepo, EventRepo, UserRepo

logger = logging.getLogger(__name__)

def check_event_manager(event: Event, requester_id: int, requester_role: str) -> None:
    """Admins manage every event, clubs only the ones they created"""
    if requester_role == UserRole.admin.value:
        return
    if requester_role == UserRole.club.value and event.created_by == requester_id:
        return
    raise Forbidden("Only the organizing club or an admin can manage this event")

class EventService:
    """Owns event records and the registration guard"""

    def __init__(self, db: Session):
        self.db = db
        self.events = EventRepo(db)
        self.attendance = AttendanceRepo(db)
        self.users = UserRepo(db)

    def _generate_qr_code_id(self) -> str:
        qr_code_id = secrets.token_urlsafe(12)
        while self.events.qr_code_exists(qr_code_id):
            qr_code_id = secrets.token_urlsafe(12)
        return qr_code_id

    def get_event(self, event_id: int) -> Event:
        event = self.events.get_by_id(event_id)
        if not event:
            raise NotFound("Event not found")
        return event

    def create_event(
        self,
        creator_id: int,
        role: str,
        data: EventCreate,
        poster_url: Optional[str] = None,
    ) -> Event:
        """Create a pending event owned by a club, with a fresh check-in code"""
        if role != UserRole.club.value:
            raise Forbidden("Only clubs can create events")

        question = data.attendance_question
        event = self.events.create(
            title=data.title.strip(),
            description=data.description,
            category=EventCategory(data.category).value,
            date=data.date,
            time=data.time,
            venue=data.venue,
            status=EventStatus.pending.value,
            created_by=creator_id,
            poster_url=poster_url,
            qr_code_id=self._generate_qr_code_id(),
            question_text=question.question.strip() if question else None,
            question_options=question.options if question else None,
            correct_answer=question.correct_answer.strip() if question else None,
        )
        logger.info(f"Event {event.id} '{event.title}' created by club {creator_id}")
        return event

    def set_status(self, event_id: int, requester_role: str, new_status: str) -> Event:
        """Admin review: any of pending/approved/rejected may be set at any time"""
        if requester_role != UserRole.admin.value:
            raise Forbidden("Only admins can approve or reject events")

        valid = {s.value for s in EventStatus}
        if new_status not in valid:
            raise InvalidArgument(f"Invalid status '{new_status}'. Expected one of: {', '.join(sorted(valid))}")

        event = self.get_event(event_id)
        if event.status == new_status:
            return event

        if event.status == EventStatus.approved.value and event.attendees:
            logger.warning(
                f"Event {event.id} moved from approved to {new_status} with {len(event.attendees)} registrations"
            )
        previous = event.status
        event.status = new_status
        self.events.save(event)
        logger.info(f"Event {event.id} status {previous} -> {new_status}")
        return event

    def register(self, event_id: int, student_id: int, college_name: Optional[str] = None) -> Event:
        """Add the student to the attendee list of an approved event, at most once"""
        event = self.get_event(event_id)
        if event.status != EventStatus.approved.value:
            raise InvalidState("Cannot register for a non-approved event")
        if not self.users.get_by_id(student_id):
            raise NotFound("Student account not found")

        college = None
        if event.category == EventCategory.inter_college.value and college_name and college_name.strip():
            college = college_name.strip()

        # The unique (event_id, user_id) constraint makes this a single conditional insert
        record = self.attendance.add(event.id, student_id, registered_college=college)
        if record is None:
            raise Conflict("Already registered")

        self.db.refresh(event)
        logger.info(f"Student {student_id} registered for event {event.id}")
        return event

    def set_attendance_question(
        self,
        event_id: int,
        requester_id: int,
        requester_role: str,
        question: AttendanceQuestionIn,
    ) -> Event:
        event = self.get_event(event_id)
        check_event_manager(event, requester_id, requester_role)

        event.question_text = question.question.strip()
        event.question_options = question.options
        event.correct_answer = question.correct_answer.strip()
        self.events.save(event)
        logger.info(f"Attendance question set for event {event.id}")
        return event

    def list_events(self, status: Optional[str] = None) -> List[Event]:
        return self.events.list(status=status)

    def search(self, category: Optional[str] = None, keyword: Optional[str] = None) -> List[Event]:
        """Approved events, optionally by exact category and title substring"""
        return self.events.list(
            status=EventStatus.approved.value,
            category=category or None,
            keyword=keyword or None,
        )

    def list_owned(self, creator_id: int, role: str) -> List[Event]:
        if role != UserRole.club.value:
            raise Forbidden("Only clubs own events")
        return self.events.list(created_by=creator_id)

    def get_attendees(
        self,
        event_id: int,
        requester_id: int,
        requester_role: str,
        attended_only: bool = False,
    ) -> Tuple[Event, List[AttendanceRecord]]:
        """Attendee roster with linked identities, for organizers"""
        event = self.get_event(event_id)
        check_event_manager(event, requester_id, requester_role)
        return event, self.attendance.list_for_event(event.id, attended_only=attended_only)
