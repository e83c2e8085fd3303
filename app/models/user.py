"""
User model
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship

from app.core.db import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="student")  # student, club, admin
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    created_events = relationship("Event", back_populates="creator")
    registrations = relationship("AttendanceRecord", back_populates="user")
