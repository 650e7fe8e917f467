"""
API Tests Fixtures

Shared fixtures for API unit tests.
"""
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from podbridge.api.dependencies import get_feed_fetcher
from podbridge.database import get_db
from podbridge.main import app

USER_HEADERS = {"X-User-Id": "alice"}


@pytest.fixture
def api_fetcher(fake_fetcher):
    """Offline fetcher injected into the feed endpoints"""
    return fake_fetcher()


@pytest.fixture(autouse=True)
def override_dependencies(test_session, api_fetcher):
    """Route every request to the test database and the offline fetcher"""

    def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_feed_fetcher] = lambda: api_fetcher
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """
    FastAPI test client with dependency overrides.

    Not entered as a context manager, so startup (file logging, table
    creation on the configured database) does not run.
    """
    yield TestClient(app)


@pytest.fixture
def user_headers() -> dict:
    return dict(USER_HEADERS)
