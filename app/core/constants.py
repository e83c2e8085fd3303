"""Enumerations for user roles, event statuses and event categories."""

from enum import Enum


class UserRole(str, Enum):
    """Roles a campus account can hold."""

    student = "student"
    club = "club"
    admin = "admin"


class EventStatus(str, Enum):
    """Review status of an event."""

    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class EventCategory(str, Enum):
    """Fixed set of event categories."""

    tech = "Tech"
    cultural = "Cultural"
    sports = "Sports"
    intra_college = "Intra College"
    inter_college = "Inter College"
    workshop = "Workshop"
    seminar = "Seminar"
    other = "Other"


STAFF_ROLES = (UserRole.club, UserRole.admin)
