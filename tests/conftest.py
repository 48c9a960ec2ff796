"""Root test configuration — shared fixtures for all test modules.

IMPORTANT: Environment variables are set BEFORE any veronica imports
so that config.py can load Settings without a .env file.
"""

from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")  # In-memory SQLite
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("FINMIND_TOKEN", "test-token")

# Now safe to import veronica modules
import pytest
from sqlalchemy.orm import sessionmaker

from veronica.common.config import Settings, get_settings
from veronica.common.database import create_db_engine, reset_engine
from veronica.storage.backend import SqlTimeSeriesStore

# ─── Clear cached settings so test env vars are used ───
get_settings.cache_clear()


# ─── Test Database ───


@pytest.fixture
def engine():
    """A fresh in-memory database per test, with all tables created."""
    test_engine = create_db_engine("sqlite://")
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def store(session_factory) -> SqlTimeSeriesStore:
    """An empty time-series store backed by the per-test database."""
    return SqlTimeSeriesStore(session_factory)


@pytest.fixture
def clean_engine():
    """Reset the module-level engine singleton around a test."""
    reset_engine()
    yield
    reset_engine()


# ─── Test Settings ───


@pytest.fixture
def test_settings() -> Settings:
    """Settings loaded from the test environment."""
    return get_settings()
