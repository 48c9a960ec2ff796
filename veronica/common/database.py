"""Database engine and session factory.

Uses SQLAlchemy 2.0+ with a synchronous engine: the simulation is a single
sequential pass, so every store call is a plain blocking query.

Usage:
    from veronica.common.database import get_session_factory

    store = SqlTimeSeriesStore(get_session_factory())
"""

from __future__ import annotations

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from veronica.common.config import get_settings
from veronica.common.models import Base

# Create engine lazily on first use
_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine and make sure all tables exist.

    In-memory SQLite URLs share one connection so every session sees the
    same database.
    """
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        engine = create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(database_url, echo=echo, pool_pre_ping=True)

    Base.metadata.create_all(engine)
    return engine


def _get_engine() -> Engine:
    """Get or create the engine (lazy singleton)."""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_db_engine(settings.database_url)
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    """Get or create the session factory (lazy singleton)."""
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(bind=_get_engine(), expire_on_commit=False)
    return _session_factory


def reset_engine() -> None:
    """Dispose the engine and forget the session factory. Used in tests."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
        _engine = None
    _session_factory = None
