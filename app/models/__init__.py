"""
Database models package
"""

from .user import User
from .event import Event, AttendanceRecord
from .feedback import Feedback

__all__ = ["User", "Event", "AttendanceRecord", "Feedback"]
