"""
Attendance check-in service with real-time broadcasting
"""

import logging
from datetime import datetime
from typing import Tuple

from sqlalchemy.orm import Session

from app.api.ws import WebSocketManager
from app.core.constants import STAFF_ROLES, EventStatus
from app.models import AttendanceRecord, Event
from app.services.errors import Conflict, Forbidden, InvalidArgument, InvalidState, NotFound, Unauthorized
from app.services.event_service import check_event_manager
from app.services.repositories import AttendanceRepo, EventRepo

logger = logging.getLogger(__name__)

def _normalize(value: str) -> str:
    return (value or "").strip().casefold()

class CheckInService:
    """Service for confirming attendance at approved events"""

    def __init__(self, db: Session, websocket_manager: WebSocketManager):
        self.db = db
        self.websocket_manager = websocket_manager
        self.events = EventRepo(db)
        self.attendance = AttendanceRepo(db)

    async def submit_qr_attendance(
        self,
        qr_code_id: str,
        email: str,
        name: str,
        answer: str,
    ) -> AttendanceRecord:
        """Public check-in: registrant identity plus the organizer's challenge answer"""
        event = self.events.get_by_qr_code(qr_code_id, status=EventStatus.approved.value)
        if not event:
            raise NotFound("Event not found or not open for attendance")

        if not event.has_attendance_question:
            raise InvalidState("No attendance question is configured for this event")

        record = self.attendance.find_by_identity(event.id, email, name)
        if not record:
            logger.info(f"QR check-in for event {event.id} rejected: no matching registrant")
            raise InvalidArgument("You are not registered for this event")

        if record.is_attended:
            raise Conflict("Attendance already submitted")

        if _normalize(answer) != _normalize(event.correct_answer):
            logger.info(f"QR check-in for event {event.id} rejected: wrong answer from user {record.user_id}")
            raise Unauthorized("Incorrect answer")

        if not self.attendance.mark_attended(record.id):
            raise Conflict("Attendance already submitted")

        self.db.refresh(record)
        logger.info(f"User {record.user_id} checked in to event {event.id} via QR")
        await self.broadcast_attendance(event, record)
        return record

    async def mark_attendance(
        self,
        event_id: int,
        requester_id: int,
        requester_role: str,
        student_id: int,
    ) -> Tuple[AttendanceRecord, bool]:
        """Staff check-in; returns the record and whether it was already attended"""
        if requester_role not in {role.value for role in STAFF_ROLES}:
            raise Forbidden("Only clubs and admins can mark attendance")

        event = self.events.get_by_id(event_id)
        if not event:
            raise NotFound("Event not found")
        check_event_manager(event, requester_id, requester_role)

        record = self.attendance.find(event.id, student_id)
        if not record:
            raise InvalidArgument("Student not registered for this event")

        was_already_attended = not self.attendance.mark_attended(record.id)
        self.db.refresh(record)

        if not was_already_attended:
            logger.info(f"User {student_id} marked present at event {event.id} by staff")
            await self.broadcast_attendance(event, record)
        return record, was_already_attended

    async def broadcast_attendance(self, event: Event, record: AttendanceRecord):
        """Push a check-in to everyone watching the event's live feed"""
        message = {
            "type": "attendance",
            "attendee": {
                "user_id": record.user_id,
                "name": record.user.name if record.user else None,
            },
            "attended_count": self.attendance.count_attended(event.id),
            "timestamp": datetime.utcnow().isoformat(),
        }

        await self.websocket_manager.broadcast_to_event(event.id, message)
