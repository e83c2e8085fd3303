"""
Pydantic schemas package
"""

from .common import *
from .user import *
from .event import *
from .feedback import *

__all__ = [
    "StandardResponse",
    "ErrorResponse",
    "UserCreate",
    "LoginRequest",
    "UserResponse",
    "TokenResponse",
    "AttendanceQuestionIn",
    "AttendanceQuestionPublic",
    "EventCreate",
    "EventStatusUpdate",
    "RegisterRequest",
    "QrAttendanceRequest",
    "MarkAttendanceRequest",
    "AttendeeResponse",
    "EventPublic",
    "EventOwnerView",
    "FeedbackCreate",
    "FeedbackResponse",
]
