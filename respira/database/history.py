"""Read-only queries over the breathing session log."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta

from sqlalchemy import func

from .db import get_session
from .models import BreathingSession


def recent_sessions(limit: int = 5) -> list[BreathingSession]:
    """Most recent closed sessions, newest first."""
    with get_session() as db:
        return (
            db.query(BreathingSession)
            .filter(BreathingSession.end_time.isnot(None))
            .order_by(BreathingSession.start_time.desc(), BreathingSession.id.desc())
            .limit(limit)
            .all()
        )


def cycles_on(day: date) -> int:
    """Cycles completed in sessions that started on *day*."""
    start = datetime.combine(day, time.min)
    end = start + timedelta(days=1)
    with get_session() as db:
        total = (
            db.query(func.coalesce(func.sum(BreathingSession.cycles_completed), 0))
            .filter(
                BreathingSession.start_time >= start,
                BreathingSession.start_time < end,
            )
            .scalar()
        )
    return int(total)


def total_cycles() -> int:
    with get_session() as db:
        total = db.query(
            func.coalesce(func.sum(BreathingSession.cycles_completed), 0)
        ).scalar()
    return int(total)
