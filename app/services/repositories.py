"""
Repository layer over the SQLAlchemy session.

Every repository is built around a session handed in by the caller; nothing
here opens its own connection.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional, Set

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.constants import EventStatus
from app.models import AttendanceRecord, Event, Feedback, User


# -------- User repository --------

class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()

    def create(self, name: str, email: str, password_hash: str, role: str) -> Optional[User]:
        """Insert a user; returns None when the email is already taken"""
        user = User(name=name.strip(), email=email.strip().lower(), password_hash=password_hash, role=role)
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            return None
        self.db.refresh(user)
        return user


# -------- Event repository --------

class EventRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, event_id: int) -> Optional[Event]:
        return self.db.query(Event).filter(Event.id == event_id).first()

    def get_by_qr_code(self, qr_code_id: str, status: Optional[str] = None) -> Optional[Event]:
        query = self.db.query(Event).filter(Event.qr_code_id == qr_code_id)
        if status:
            query = query.filter(Event.status == status)
        return query.first()

    def qr_code_exists(self, qr_code_id: str) -> bool:
        return self.db.query(Event.id).filter(Event.qr_code_id == qr_code_id).first() is not None

    def create(self, **fields) -> Event:
        event = Event(**fields)
        self.db.add(event)
        self.db.commit()
        self.db.refresh(event)
        return event

    def save(self, event: Event) -> Event:
        event.updated_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(event)
        return event

    def list(
        self,
        status: Optional[str] = None,
        category: Optional[str] = None,
        keyword: Optional[str] = None,
        created_by: Optional[int] = None,
    ) -> List[Event]:
        query = self.db.query(Event)
        if status:
            query = query.filter(Event.status == status)
        if category:
            query = query.filter(Event.category == category)
        if keyword:
            query = query.filter(func.lower(Event.title).contains(keyword.lower(), autoescape=True))
        if created_by is not None:
            query = query.filter(Event.created_by == created_by)
        return query.order_by(Event.id).all()

    def categories_joined_by(self, user_id: int) -> Set[str]:
        """Categories of approved events whose attendee list contains the user"""
        rows = (
            self.db.query(Event.category)
            .join(AttendanceRecord, AttendanceRecord.event_id == Event.id)
            .filter(AttendanceRecord.user_id == user_id, Event.status == EventStatus.approved.value)
            .distinct()
            .all()
        )
        return {row[0] for row in rows}

    def approved_not_joined(
        self,
        user_id: int,
        limit: int,
        categories: Optional[Iterable[str]] = None,
    ) -> List[Event]:
        joined = select(AttendanceRecord.event_id).where(AttendanceRecord.user_id == user_id)
        query = self.db.query(Event).filter(
            Event.status == EventStatus.approved.value,
            ~Event.id.in_(joined),
        )
        if categories is not None:
            query = query.filter(Event.category.in_(list(categories)))
        return query.order_by(Event.id).limit(limit).all()


# -------- Attendance repository --------

class AttendanceRepo:
    def __init__(self, db: Session):
        self.db = db

    def add(self, event_id: int, user_id: int, registered_college: Optional[str] = None) -> Optional[AttendanceRecord]:
        """Insert a registration; returns None if the (event, user) pair already exists"""
        record = AttendanceRecord(
            event_id=event_id,
            user_id=user_id,
            registered_college=registered_college,
            is_attended=False,
        )
        self.db.add(record)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            return None
        self.db.refresh(record)
        return record

    def find(self, event_id: int, user_id: int) -> Optional[AttendanceRecord]:
        return self.db.query(AttendanceRecord).filter(
            AttendanceRecord.event_id == event_id,
            AttendanceRecord.user_id == user_id,
        ).first()

    def find_by_identity(self, event_id: int, email: str, name: str) -> Optional[AttendanceRecord]:
        """Case-insensitive match of a registrant's email and name"""
        # Emails are stored lowercased; names are folded here since SQLite's
        # lower() only handles ASCII
        records = (
            self.db.query(AttendanceRecord)
            .join(User, User.id == AttendanceRecord.user_id)
            .filter(
                AttendanceRecord.event_id == event_id,
                User.email == email.strip().lower(),
            )
            .all()
        )
        wanted = name.strip().casefold()
        for record in records:
            if record.user.name.strip().casefold() == wanted:
                return record
        return None

    def mark_attended(self, record_id: int) -> bool:
        """Flip is_attended false -> true; False means it was already set"""
        result = self.db.execute(
            update(AttendanceRecord)
            .where(AttendanceRecord.id == record_id, AttendanceRecord.is_attended.is_(False))
            .values(is_attended=True, attended_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount == 1

    def list_for_event(self, event_id: int, attended_only: bool = False) -> List[AttendanceRecord]:
        query = self.db.query(AttendanceRecord).filter(AttendanceRecord.event_id == event_id)
        if attended_only:
            query = query.filter(AttendanceRecord.is_attended.is_(True))
        return query.order_by(AttendanceRecord.id).all()

    def count_attended(self, event_id: int) -> int:
        return self.db.query(func.count(AttendanceRecord.id)).filter(
            AttendanceRecord.event_id == event_id,
            AttendanceRecord.is_attended.is_(True),
        ).scalar() or 0


# -------- Feedback repository --------

class FeedbackRepo:
    def __init__(self, db: Session):
        self.db = db

    def create(self, event_id: int, user_id: int, comment: str, rating: int) -> Feedback:
        feedback = Feedback(event_id=event_id, user_id=user_id, comment=comment, rating=rating)
        self.db.add(feedback)
        self.db.commit()
        self.db.refresh(feedback)
        return feedback

    def list_for_event(self, event_id: int) -> List[Feedback]:
        return self.db.query(Feedback).filter(Feedback.event_id == event_id).order_by(Feedback.id).all()
