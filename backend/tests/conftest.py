"""
Pytest configuration and fixtures
"""
import os
import sys
import tempfile
from pathlib import Path

import pytest
from sqlalchemy.orm import Session

# Add backend directory to path for imports
backend_dir = Path(__file__).parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

# Settings are cached on first use, so the test environment must be set before any folio import
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["ADMIN_API_KEY"] = ""
os.environ["MEDIA_ROOT"] = tempfile.mkdtemp(prefix="folio-media-")
os.environ["LOG_FORMAT"] = "text"
os.environ["LOG_FILE_ENABLED"] = "false"
for _key in ("LOVABLE_API_KEY", "OPENAI_API_KEY", "GEMINI_API_KEY", "RESEND_API_KEY",
             "UNSPLASH_ACCESS_KEY", "FIRECRAWL_API_KEY"):
    os.environ[_key] = ""

import folio.models  # noqa: E402,F401 - register all models
from folio.core.config import Settings  # noqa: E402
from folio.core.database import (Base, get_db, get_engine,  # noqa: E402
                                 get_session_local)


@pytest.fixture(scope="function")
def db() -> Session:
    """Fresh schema and session for every test"""
    engine = get_engine()
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    session = get_session_local()()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture(scope="function")
def client(db: Session):
    """Create test client with database dependency override"""
    from fastapi.testclient import TestClient

    from folio.main import app

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings with every third-party key configured"""
    return Settings(
        lovable_api_key="test-lovable-key",
        openai_api_key="test-openai-key",
        gemini_api_key="test-gemini-key",
        resend_api_key="re_test_key",
        unsplash_access_key="unsplash-test-key",
        firecrawl_api_key="fc-test-key",
        newsletter_batch_size=2,
        site_url="https://folio.example",
        media_root=str(tmp_path / "media"),
        media_base_url="/media",
    )
