"""
Event-related Pydantic schemas
"""

from datetime import datetime
from typing import List, Optional
from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

from app.core.constants import EventCategory

class AttendanceQuestionIn(BaseModel):
    """Challenge configured by the organizer for QR check-in"""
    question: str
    options: List[str] = []
    correct_answer: str

    @field_validator("question", "correct_answer")
    @classmethod
    def strip_required_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("options")
    @classmethod
    def strip_options(cls, value: List[str]) -> List[str]:
        return [option.strip() for option in value if option and option.strip()]

    @model_validator(mode="after")
    def answer_among_options(self):
        if self.options:
            folded = [option.casefold() for option in self.options]
            if self.correct_answer.casefold() not in folded:
                raise ValueError("correct_answer must be one of the options")
        return self

class AttendanceQuestionPublic(BaseModel):
    """Question as shown to the person checking in (never carries the answer)"""
    question: str
    options: List[str] = []

class EventCreate(BaseModel):
    """Schema for creating an event"""
    title: str = Field(min_length=1, max_length=255)
    description: str = ""
    category: EventCategory = EventCategory.other
    date: Optional[str] = None
    time: Optional[str] = None
    venue: Optional[str] = None
    attendance_question: Optional[AttendanceQuestionIn] = None

class EventStatusUpdate(BaseModel):
    # Checked by the lifecycle service so an unknown value maps to invalid_argument
    status: str

class RegisterRequest(BaseModel):
    college_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("college_name", "collegeName")
    )

class QrAttendanceRequest(BaseModel):
    email: str = Field(min_length=1)
    name: str = Field(min_length=1)
    answer: str

class MarkAttendanceRequest(BaseModel):
    student_id: int = Field(validation_alias=AliasChoices("student_id", "studentId"))

class AttendeeResponse(BaseModel):
    user_id: int
    name: Optional[str] = None
    email: Optional[str] = None
    registered_college: Optional[str] = None
    is_attended: bool
    registered_at: Optional[datetime] = None
    attended_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record) -> "AttendeeResponse":
        user = record.user
        return cls(
            user_id=record.user_id,
            name=user.name if user else None,
            email=user.email if user else None,
            registered_college=record.registered_college,
            is_attended=bool(record.is_attended),
            registered_at=record.registered_at,
            attended_at=record.attended_at,
        )

class EventPublic(BaseModel):
    """Event as shown to anonymous visitors and students"""
    id: int
    title: str
    description: Optional[str] = None
    category: str
    date: Optional[str] = None
    time: Optional[str] = None
    venue: Optional[str] = None
    status: str
    poster_url: Optional[str] = None
    created_by: int
    creator_name: Optional[str] = None
    attendee_count: int = 0
    attendance_question: Optional[AttendanceQuestionPublic] = None
    created_at: Optional[datetime] = None

    @classmethod
    def _base_fields(cls, event) -> dict:
        question = None
        if event.question_text:
            question = AttendanceQuestionPublic(
                question=event.question_text,
                options=list(event.question_options or []),
            )
        return {
            "id": event.id,
            "title": event.title,
            "description": event.description,
            "category": event.category,
            "date": event.date,
            "time": event.time,
            "venue": event.venue,
            "status": event.status,
            "poster_url": event.poster_url,
            "created_by": event.created_by,
            "creator_name": event.creator.name if event.creator else None,
            "attendee_count": len(event.attendees),
            "attendance_question": question,
            "created_at": event.created_at,
        }

    @classmethod
    def from_event(cls, event) -> "EventPublic":
        return cls(**cls._base_fields(event))

class EventOwnerView(EventPublic):
    """Event as shown to its creating club and to admins"""
    qr_code_id: str
    correct_answer: Optional[str] = None
    attended_count: int = 0

    @classmethod
    def from_event(cls, event) -> "EventOwnerView":
        return cls(
            **cls._base_fields(event),
            qr_code_id=event.qr_code_id,
            correct_answer=event.correct_answer,
            attended_count=sum(1 for record in event.attendees if record.is_attended),
        )
