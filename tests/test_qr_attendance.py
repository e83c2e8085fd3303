"""
Tests for QR check-in and staff attendance marking
"""

import asyncio

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.db import Base
from app.models import AttendanceRecord, User
from app.schemas.event import AttendanceQuestionIn, EventCreate
from app.services.checkin_service import CheckInService
from app.services.errors import Conflict, Forbidden, InvalidArgument, InvalidState, NotFound, Unauthorized
from app.services.event_service import EventService

# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///./test_checkin.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

class RecordingManager:
    """Collects broadcasts instead of sending them over websockets"""

    def __init__(self):
        self.messages = []

    async def broadcast_to_event(self, event_id, message):
        self.messages.append((event_id, message))

@pytest.fixture
def db_session():
    """Create test database session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)

@pytest.fixture
def manager():
    return RecordingManager()

@pytest.fixture
def checkin(db_session, manager):
    return CheckInService(db_session, manager)

@pytest.fixture
def scenario(db_session):
    """Approved Tech event with a question and one registered student"""
    club = User(name="Coding Club", email="coding@campus.edu", password_hash="x", role="club")
    student = User(name="Sara Thomas", email="sara@campus.edu", password_hash="x", role="student")
    outsider = User(name="Omar Diaz", email="omar@campus.edu", password_hash="x", role="student")
    rival = User(name="Chess Club", email="chess@campus.edu", password_hash="x", role="club")
    admin = User(name="Dean Admin", email="dean@campus.edu", password_hash="x", role="admin")
    db_session.add_all([club, student, outsider, rival, admin])
    db_session.commit()

    events = EventService(db_session)
    event = events.create_event(
        club.id,
        "club",
        EventCreate(
            title="Tech Talk",
            category="Tech",
            attendance_question=AttendanceQuestionIn(
                question="What language was the demo in?",
                options=["Python", "Rust", "Go"],
                correct_answer="Python"
            )
        )
    )
    events.set_status(event.id, "admin", "approved")
    events.register(event.id, student.id)
    return {
        "event": event, "club": club, "student": student,
        "outsider": outsider, "rival": rival, "admin": admin
    }

def record_for(db_session, event, user):
    db_session.expire_all()
    return db_session.query(AttendanceRecord).filter(
        AttendanceRecord.event_id == event.id,
        AttendanceRecord.user_id == user.id
    ).one()

def test_qr_attendance_success_then_conflict(checkin, scenario, db_session):
    """Correct identity and answer marks attendance once"""
    event = scenario["event"]

    record = asyncio.run(checkin.submit_qr_attendance(event.qr_code_id, "sara@campus.edu", "Sara Thomas", "Python"))
    assert record.is_attended is True
    assert record.attended_at is not None
    assert record_for(db_session, event, scenario["student"]).is_attended is True

    with pytest.raises(Conflict):
        asyncio.run(checkin.submit_qr_attendance(event.qr_code_id, "sara@campus.edu", "Sara Thomas", "Python"))

def test_identity_and_answer_match_case_insensitively(checkin, scenario):
    event = scenario["event"]
    record = asyncio.run(checkin.submit_qr_attendance(event.qr_code_id, "  SARA@Campus.EDU", "sara thomas ", " python"))
    assert record.is_attended is True

def test_wrong_answer_is_unauthorized_and_not_recorded(checkin, scenario, db_session, manager):
    event = scenario["event"]

    with pytest.raises(Unauthorized):
        asyncio.run(checkin.submit_qr_attendance(event.qr_code_id, "sara@campus.edu", "Sara Thomas", "Rust"))

    assert record_for(db_session, event, scenario["student"]).is_attended is False
    assert manager.messages == []

def test_unregistered_person_rejected(checkin, scenario):
    event = scenario["event"]
    with pytest.raises(InvalidArgument):
        asyncio.run(checkin.submit_qr_attendance(event.qr_code_id, "omar@campus.edu", "Omar Diaz", "Python"))

def test_name_must_match_email(checkin, scenario):
    event = scenario["event"]
    with pytest.raises(InvalidArgument):
        asyncio.run(checkin.submit_qr_attendance(event.qr_code_id, "sara@campus.edu", "Omar Diaz", "Python"))

def test_unknown_qr_code(checkin, scenario):
    with pytest.raises(NotFound):
        asyncio.run(checkin.submit_qr_attendance("no-such-code", "sara@campus.edu", "Sara Thomas", "Python"))

def test_event_must_be_approved(checkin, scenario, db_session):
    event = scenario["event"]
    EventService(db_session).set_status(event.id, "admin", "rejected")

    with pytest.raises(NotFound):
        asyncio.run(checkin.submit_qr_attendance(event.qr_code_id, "sara@campus.edu", "Sara Thomas", "Python"))

def test_question_required(checkin, scenario, db_session):
    events = EventService(db_session)
    bare = events.create_event(scenario["club"].id, "club", EventCreate(title="Open Mic", category="Cultural"))
    events.set_status(bare.id, "admin", "approved")
    events.register(bare.id, scenario["student"].id)

    with pytest.raises(InvalidState):
        asyncio.run(checkin.submit_qr_attendance(bare.qr_code_id, "sara@campus.edu", "Sara Thomas", "anything"))

def test_successful_checkin_is_broadcast(checkin, scenario, manager):
    event = scenario["event"]
    asyncio.run(checkin.submit_qr_attendance(event.qr_code_id, "sara@campus.edu", "Sara Thomas", "Python"))

    assert len(manager.messages) == 1
    event_id, message = manager.messages[0]
    assert event_id == event.id
    assert message["type"] == "attendance"
    assert message["attendee"]["name"] == "Sara Thomas"
    assert message["attended_count"] == 1

def test_staff_mark_attendance(checkin, scenario, db_session, manager):
    event = scenario["event"]

    record, was_already = asyncio.run(checkin.mark_attendance(event.id, scenario["club"].id, "club", scenario["student"].id))
    assert record.is_attended is True
    assert was_already is False
    assert len(manager.messages) == 1

    # Repeat is acknowledged without a second broadcast
    record, was_already = asyncio.run(checkin.mark_attendance(event.id, scenario["admin"].id, "admin", scenario["student"].id))
    assert was_already is True
    assert len(manager.messages) == 1

    # Self check-in afterwards conflicts
    with pytest.raises(Conflict):
        asyncio.run(checkin.submit_qr_attendance(event.qr_code_id, "sara@campus.edu", "Sara Thomas", "Python"))

def test_students_cannot_mark_attendance(checkin, scenario):
    with pytest.raises(Forbidden):
        asyncio.run(checkin.mark_attendance(scenario["event"].id, scenario["student"].id, "student", scenario["student"].id))

def test_mark_attendance_for_unregistered_student(checkin, scenario):
    with pytest.raises(InvalidArgument):
        asyncio.run(checkin.mark_attendance(scenario["event"].id, scenario["club"].id, "club", scenario["outsider"].id))

def test_mark_attendance_for_missing_event(checkin, scenario):
    with pytest.raises(NotFound):
        asyncio.run(checkin.mark_attendance(999, scenario["admin"].id, "admin", scenario["student"].id))

def test_other_club_cannot_mark_attendance(checkin, scenario, db_session, manager):
    """Only the organizing club or an admin may mark attendance"""
    event = scenario["event"]

    with pytest.raises(Forbidden):
        asyncio.run(checkin.mark_attendance(event.id, scenario["rival"].id, "club", scenario["student"].id))
    # Same error whether or not the student is registered
    with pytest.raises(Forbidden):
        asyncio.run(checkin.mark_attendance(event.id, scenario["rival"].id, "club", scenario["outsider"].id))

    assert record_for(db_session, event, scenario["student"]).is_attended is False
    assert manager.messages == []

def test_non_ascii_names_match_case_insensitively(checkin, scenario, db_session):
    event = scenario["event"]
    elodie = User(name="Élodie Martin", email="elodie@campus.edu", password_hash="x", role="student")
    db_session.add(elodie)
    db_session.commit()
    EventService(db_session).register(event.id, elodie.id)

    record = asyncio.run(checkin.submit_qr_attendance(event.qr_code_id, "elodie@campus.edu", "Élodie Martin", "Python"))
    assert record.user_id == elodie.id
    assert record.is_attended is True

def test_non_ascii_name_with_different_case(checkin, scenario, db_session):
    event = scenario["event"]
    ozge = User(name="Özge Şahin", email="ozge@campus.edu", password_hash="x", role="student")
    db_session.add(ozge)
    db_session.commit()
    EventService(db_session).register(event.id, ozge.id)

    record = asyncio.run(checkin.submit_qr_attendance(event.qr_code_id, "OZGE@campus.edu", "özge şahin", "python"))
    assert record.user_id == ozge.id
