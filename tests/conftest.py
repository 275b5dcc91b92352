"""
Global pytest fixtures for the URL shortener test suite.

Responsibilities:
    - Provide a fresh FastAPI TestClient via the app factory for integration tests
    - Provide isolated in-memory Storage, Analytics and UrlManager fixtures
    - Provide the reference SHA-256 strategy

Why an app factory?
    `create_app()` builds new in-memory storage each time, so every test starts
    from an empty store.
"""

import pytest
from fastapi.testclient import TestClient

from main import create_app
from url_shortener.analytics.analytics import Analytics
from url_shortener.config import Settings
from url_shortener.manager.url_manager import UrlManager
from url_shortener.shortener.strategies import SHA256Strategy
from url_shortener.storage.storage import Storage

TEST_HOST = "http://localhost:3000"


@pytest.fixture
def settings(monkeypatch) -> Settings:
    """Settings for an in-memory app on the test host, independent of the caller's env."""
    for name in ("STORAGE_BACKEND", "DATABASE_URL", "SHORTENER_DIGEST", "SHORTENER_LENGTH",
                 "SHORTENER_MAX_ATTEMPTS"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOST", TEST_HOST)
    return Settings()


@pytest.fixture
def storage() -> Storage:
    """Fresh in-memory Storage backend."""
    return Storage()


@pytest.fixture
def strategy() -> SHA256Strategy:
    return SHA256Strategy(length=8)


@pytest.fixture
def manager(storage: Storage, strategy: SHA256Strategy) -> UrlManager:
    """UrlManager wired to the storage fixture."""
    return UrlManager(storage, strategy, host=TEST_HOST, max_attempts=100)


@pytest.fixture
def analytics(storage: Storage) -> Analytics:
    """Analytics sharing the storage fixture with `manager`."""
    return Analytics(storage)


@pytest.fixture
def client(settings: Settings, storage: Storage) -> TestClient:
    """
    Fresh TestClient over a new app instance.

    The app shares the `storage` fixture so tests can seed or inspect it directly.
    """
    app = create_app(settings=settings, storage=storage)
    with TestClient(app) as c:
        yield c
