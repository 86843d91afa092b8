"""Pytest configuration and fixtures for test suite."""

import os
import random
import sys
from pathlib import Path

import pytest
import pytest_asyncio

# Set test environment BEFORE any other imports
os.environ.setdefault("APP_ENVIRONMENT", "test")
os.environ.setdefault("DB_DRIVER", "sqlite+aiosqlite")

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))


def _reset_db_modules():
    """Reset database module globals to ensure clean state."""
    import database.async_engine as module
    module._async_engine = None
    module._async_session_factory = None

    from services.review_service import reset_review_service
    reset_review_service()


@pytest.fixture(autouse=True)
def reset_database_globals():
    """Reset database module globals before and after each test."""
    _reset_db_modules()
    yield
    _reset_db_modules()


@pytest.fixture(autouse=True)
def restore_root_logging():
    """The app lifespan reconfigures the root logger; put it back afterwards."""
    import logging
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


# =============================================================================
# REAL DATABASE FIXTURES (temporary SQLite file per test)
# =============================================================================

@pytest.fixture
def db_settings(tmp_path):
    """Database settings pointing at a throwaway SQLite file."""
    from config.database import DatabaseSettings
    return DatabaseSettings(driver="sqlite+aiosqlite", sqlite_path=tmp_path / "test.db")


@pytest_asyncio.fixture
async def session_factory(db_settings):
    """Session factory bound to a freshly created schema."""
    from database.async_engine import create_engine, get_session_factory
    from database.models import Base

    engine = create_engine(db_settings)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield get_session_factory(engine)

    await engine.dispose()


@pytest.fixture
def uow_factory(session_factory):
    from database.unit_of_work import UnitOfWorkFactory
    return UnitOfWorkFactory(session_factory)


@pytest.fixture
def seeded_policy():
    """Assignment policy with a fixed seed."""
    from domain import ReviewerAssignmentPolicy
    return ReviewerAssignmentPolicy(rng=random.Random(1234))


@pytest.fixture
def review_service(uow_factory, seeded_policy):
    from services.review_service import ReviewService
    return ReviewService(uow_factory, policy=seeded_policy)


# =============================================================================
# HTTP CLIENT
# =============================================================================

@pytest.fixture
def api_client(tmp_path, monkeypatch):
    """
    TestClient running the full app lifespan against a temporary SQLite file.

    Usage:
        def test_my_endpoint(api_client):
            response = api_client.post("/team/add", json={...})
    """
    from fastapi.testclient import TestClient
    from config.database import get_database_settings
    from web.app import create_app

    monkeypatch.setenv("DB_DRIVER", "sqlite+aiosqlite")
    monkeypatch.setenv("DB_SQLITE_PATH", str(tmp_path / "api.db"))
    get_database_settings.cache_clear()

    with TestClient(create_app()) as client:
        yield client

    get_database_settings.cache_clear()
