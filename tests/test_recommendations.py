"""
Tests for category-affinity recommendations
"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.db import Base
from app.models import User
from app.schemas.event import EventCreate
from app.services.errors import Forbidden
from app.services.event_service import EventService
from app.services.recommendation_service import RecommendationService

# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///./test_recommend.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

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
def catalog(db_session):
    """A club, two students and a mix of events across categories"""
    club = User(name="Events Club", email="events@campus.edu", password_hash="x", role="club")
    veteran = User(name="Vera", email="vera@campus.edu", password_hash="x", role="student")
    newcomer = User(name="Nico", email="nico@campus.edu", password_hash="x", role="student")
    db_session.add_all([club, veteran, newcomer])
    db_session.commit()

    events = EventService(db_session)
    created = {}
    specs = [
        ("Tech Meetup", "Tech", "approved"),
        ("Robotics Demo", "Tech", "approved"),
        ("Cloud Workshop", "Tech", "approved"),
        ("Dance Night", "Cultural", "approved"),
        ("Cricket Cup", "Sports", "approved"),
        ("Debate", "Seminar", "approved"),
        ("Chess", "Other", "approved"),
        ("Film Fest", "Cultural", "approved"),
        ("Secret Hackathon", "Tech", "pending"),
        ("Cancelled Jam", "Tech", "rejected"),
    ]
    for title, category, status in specs:
        event = events.create_event(club.id, "club", EventCreate(title=title, category=category))
        if status != "pending":
            events.set_status(event.id, "admin", status)
        created[title] = event
    return {"club": club, "veteran": veteran, "newcomer": newcomer, "events": created, "service": events}

def test_only_students_get_recommendations(db_session, catalog):
    with pytest.raises(Forbidden):
        RecommendationService(db_session).recommend(catalog["club"].id, "club")

def test_no_history_returns_five_general_events(db_session, catalog):
    events = catalog["events"]
    catalog["service"].register(events["Tech Meetup"].id, catalog["newcomer"].id)
    catalog["service"].set_status(events["Tech Meetup"].id, "admin", "pending")

    results = RecommendationService(db_session).recommend(catalog["newcomer"].id, "student")

    assert len(results) == 5
    assert [e.title for e in results] == ["Robotics Demo", "Cloud Workshop", "Dance Night", "Cricket Cup", "Debate"]
    assert events["Tech Meetup"].id not in [e.id for e in results]

def test_history_drives_category_matches(db_session, catalog):
    events = catalog["events"]
    catalog["service"].register(events["Tech Meetup"].id, catalog["veteran"].id)

    results = RecommendationService(db_session).recommend(catalog["veteran"].id, "student")

    titles = [e.title for e in results]
    assert titles == ["Robotics Demo", "Cloud Workshop"]

def test_multiple_categories_combined(db_session, catalog):
    events = catalog["events"]
    catalog["service"].register(events["Tech Meetup"].id, catalog["veteran"].id)
    catalog["service"].register(events["Dance Night"].id, catalog["veteran"].id)

    titles = {e.title for e in RecommendationService(db_session).recommend(catalog["veteran"].id, "student")}
    assert titles == {"Robotics Demo", "Cloud Workshop", "Film Fest"}

def test_falls_back_when_category_exhausted(db_session, catalog):
    events = catalog["events"]
    for title in ("Tech Meetup", "Robotics Demo", "Cloud Workshop"):
        catalog["service"].register(events[title].id, catalog["veteran"].id)

    results = RecommendationService(db_session).recommend(catalog["veteran"].id, "student")

    joined = {events[t].id for t in ("Tech Meetup", "Robotics Demo", "Cloud Workshop")}
    assert 0 < len(results) <= 5
    assert not joined & {e.id for e in results}
    assert all(e.category != "Tech" for e in results)

def test_never_recommends_joined_events(db_session, catalog):
    events = catalog["events"]
    joined = ("Dance Night", "Cricket Cup", "Debate", "Chess")
    for title in joined:
        catalog["service"].register(events[title].id, catalog["newcomer"].id)

    results = RecommendationService(db_session).recommend(catalog["newcomer"].id, "student")

    joined_ids = {events[title].id for title in joined}
    assert results
    assert not joined_ids & {e.id for e in results}
