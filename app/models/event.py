"""
Event and attendance record models
"""

from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Text, Boolean, DateTime, JSON, ForeignKey, UniqueConstraint
)
from sqlalchemy.orm import relationship

from app.core.db import Base

class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, default="")
    category = Column(String(50), nullable=False, default="Other")
    date = Column(String(50))
    time = Column(String(50))
    venue = Column(String(255))
    status = Column(String(20), nullable=False, default="pending", index=True)  # pending, approved, rejected
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    poster_url = Column(String(500), nullable=True)
    qr_code_id = Column(String(50), unique=True, nullable=False, index=True)

    # Attendance challenge
    question_text = Column(Text, nullable=True)
    question_options = Column(JSON, nullable=True)
    correct_answer = Column(String(255), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    creator = relationship("User", back_populates="created_events")
    attendees = relationship(
        "AttendanceRecord",
        back_populates="event",
        order_by="AttendanceRecord.id",
        cascade="all, delete-orphan",
    )

    @property
    def has_attendance_question(self) -> bool:
        return bool(self.question_text) and self.correct_answer is not None

class AttendanceRecord(Base):
    __tablename__ = "attendance_records"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    registered_college = Column(String(255), nullable=True)  # inter-college events only
    is_attended = Column(Boolean, nullable=False, default=False)
    registered_at = Column(DateTime, default=datetime.utcnow)
    attended_at = Column(DateTime, nullable=True)

    # Relationships
    event = relationship("Event", back_populates="attendees")
    user = relationship("User", back_populates="registrations")

    # One registration per (event, student)
    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_attendance_event_user"),
    )
