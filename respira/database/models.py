"""SQLAlchemy ORM models for Respira."""

from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class BreathingSession(Base):
    """One logged run of the breathing player."""

    __tablename__ = "breathing_sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    exercise_kind = Column(String(20), nullable=False, default="coherence")  # coherence | square | triangle
    start_time = Column(DateTime, nullable=False, default=datetime.now)
    end_time = Column(DateTime, nullable=True)
    duration_seconds = Column(Integer, nullable=False, default=0)
    cycles_completed = Column(Integer, nullable=False, default=0)
    completed = Column(Boolean, nullable=False, default=False)
    inspire_seconds = Column(Integer, nullable=False, default=4)
    hold_seconds = Column(Integer, nullable=False, default=4)
    expire_seconds = Column(Integer, nullable=False, default=4)

    def __repr__(self) -> str:
        return (
            f"<BreathingSession id={self.id} kind={self.exercise_kind} "
            f"cycles={self.cycles_completed} completed={self.completed}>"
        )
