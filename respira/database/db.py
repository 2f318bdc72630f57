"""SQLite engine and unit-of-work sessions for the breathing history."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from ..settings import APP_SUPPORT_DIR
from .models import Base

DB_PATH = APP_SUPPORT_DIR / "respira.db"

# Built on first use so importing the package never touches the disk
_engine: Engine | None = None
_factory: sessionmaker[Session] | None = None


def _make_engine(url: str) -> Engine:
    return create_engine(url, connect_args={"check_same_thread": False})


def _factory_for_current_engine() -> sessionmaker[Session]:
    global _engine, _factory
    if _engine is None:
        DB_PATH.parent.mkdir(parents=True, exist_ok=True)
        _engine = _make_engine(f"sqlite:///{DB_PATH}")
    if _factory is None:
        _factory = sessionmaker(bind=_engine, expire_on_commit=False)
    return _factory


def configure_engine(url: str) -> None:
    """Point the history at *url* instead of the on-disk file.

    Tests use ``sqlite:///:memory:``.
    """
    global _engine, _factory
    _engine = _make_engine(url)
    _factory = None


def init_db() -> None:
    """Create missing tables."""
    _factory_for_current_engine()
    Base.metadata.create_all(_engine)


@contextmanager
def get_session() -> Iterator[Session]:
    """Session that commits when the block exits cleanly.

    Any exception rolls the transaction back and propagates.
    """
    db = _factory_for_current_engine()()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
