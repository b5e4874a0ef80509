"""Integration test fixtures for SignSprout.

Provides an async HTTP client over the real application, backed by an
in-memory SQLite database and a temporary media directory.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from src.api.app import create_app
from src.core.config import get_settings
from src.services.storage import database


@pytest.fixture
def media_dir(tmp_path, monkeypatch):
    """Point MEDIA_DIR at a temp directory for the duration of the test."""
    path = tmp_path / "media"
    monkeypatch.setenv("MEDIA_DIR", str(path))
    monkeypatch.setenv("MEDIA_BASE_URL", "http://test/media")
    get_settings.cache_clear()
    yield path
    get_settings.cache_clear()


@pytest.fixture
def app(media_dir):
    """Create a fresh FastAPI application instance."""
    return create_app()


@pytest.fixture
async def async_client(app, db_engine):
    """AsyncClient backed by the in-memory test engine.

    Injects the test engine into the database module so that all routes
    use the same in-memory SQLite with tables already created.
    """
    database._engine = db_engine
    database._session_factory = None
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    database.reset_engine()
