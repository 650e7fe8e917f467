"""
Poll API Tests
"""
from unittest.mock import Mock

import pytest

from podbridge.api.dependencies import get_poll_orchestrator
from podbridge.api.poll import parse_bearer
from podbridge.main import app
from podbridge.models import FeedSubscription
from podbridge.workflows.poll_orchestrator import PollOrchestrator


@pytest.fixture
def orchestrator(session_factory, fake_fetcher, rss):
    fetcher = fake_fetcher({"https://a.example.com/feed": rss("Show A", [{"guid": "1", "title": "One"}])})
    orchestrator = PollOrchestrator(session_factory, fetcher=fetcher, max_workers=2)
    app.dependency_overrides[get_poll_orchestrator] = lambda: orchestrator
    return orchestrator


class TestParseBearer:
    """Test parse_bearer()."""

    @pytest.mark.parametrize(
        "header, expected",
        [
            ("Bearer abc", "abc"),
            ("bearer abc", "abc"),
            ("Basic abc", None),
            ("Bearer ", None),
            (None, None),
        ],
    )
    def test_parse(self, header, expected):
        assert parse_bearer(header) == expected


class TestTriggerPoll:
    """Test POST /api/v1/poll"""

    def test_authorized_poll_returns_summary(self, client, orchestrator, monkeypatch):
        """Given: POLL_CRON_SECRET set and one registered feed
        When: POST /poll with the matching bearer credential
        Then: 200 with the poll summary
        """
        monkeypatch.setenv("POLL_CRON_SECRET", "cron-secret")
        session = orchestrator.session_factory()
        session.add(FeedSubscription(user_id="alice", feed_url="https://a.example.com/feed", title="a"))
        session.commit()
        session.close()

        response = client.post("/api/v1/poll", headers={"Authorization": "Bearer cron-secret"})

        assert response.status_code == 200
        body = response.json()
        assert body["attempted"] == 1
        assert body["new_post_count"] == 1
        assert body["failures"] == []

    def test_wrong_credential_401(self, client, orchestrator, monkeypatch):
        monkeypatch.setenv("POLL_CRON_SECRET", "cron-secret")
        orchestrator.poll_all = Mock()

        response = client.post("/api/v1/poll", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401
        orchestrator.poll_all.assert_not_called()

    def test_missing_header_401(self, client, orchestrator, monkeypatch):
        monkeypatch.setenv("POLL_CRON_SECRET", "cron-secret")

        assert client.post("/api/v1/poll").status_code == 401

    def test_unset_secret_401(self, client, orchestrator, monkeypatch):
        monkeypatch.delenv("POLL_CRON_SECRET", raising=False)

        response = client.post("/api/v1/poll", headers={"Authorization": "Bearer anything"})

        assert response.status_code == 401
