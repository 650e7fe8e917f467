"""
PollOrchestrator Unit Tests

Uses a file-backed SQLite database so pool threads can each open their own
session.

Test Naming Convention (BDD):
- test_<behavior>_<expected_result>
"""
from unittest.mock import Mock

import pytest

from podbridge.exceptions import AuthorizationError, FetchError
from podbridge.models import FeedSubscription, Post
from podbridge.workflows.ingestion_worker import IngestionWorker
from podbridge.workflows.poll_orchestrator import PollOrchestrator, authorize_poll_trigger

GOOD_A = "https://a.example.com/feed"
GOOD_B = "https://b.example.com/feed"
SLOW = "https://slow.example.com/feed"


def _subscribe(session_factory, *pairs):
    session = session_factory()
    for user_id, url in pairs:
        session.add(FeedSubscription(user_id=user_id, feed_url=url, title=url))
    session.commit()
    session.close()


@pytest.fixture
def feeds(rss):
    return {
        GOOD_A: rss("Show A", [{"guid": "a1", "title": "A1"}, {"guid": "a2", "title": "A2"}]),
        GOOD_B: rss("Show B", [{"guid": "b1", "title": "B1"}]),
        SLOW: FetchError(SLOW, "timed out after 15s"),
    }


class TestAuthorizePollTrigger:
    """Test authorize_poll_trigger()."""

    def test_matching_credential_passes(self):
        authorize_poll_trigger("s3cret", "s3cret")

    @pytest.mark.parametrize("credential", [None, "", "wrong", "s3cret "])
    def test_bad_credential_rejected(self, credential):
        with pytest.raises(AuthorizationError):
            authorize_poll_trigger(credential, "s3cret")

    @pytest.mark.parametrize("expected", [None, ""])
    def test_unset_secret_denies_everything(self, expected):
        with pytest.raises(AuthorizationError):
            authorize_poll_trigger("anything", expected)


class TestPollAll:
    """Test PollOrchestrator.poll_all()."""

    def test_distinct_urls_processed_once(self, session_factory, fake_fetcher, feeds):
        """Given: Two users registered the same URL
        When: Polling
        Then: The URL is fetched once
        """
        _subscribe(session_factory, ("alice", GOOD_A), ("bob", GOOD_A))
        fetcher = fake_fetcher(feeds)

        summary = PollOrchestrator(session_factory, fetcher=fetcher, max_workers=2).poll_all()

        assert summary.attempted == 1
        assert fetcher.calls == [GOOD_A]
        assert summary.new_post_count == 2

    def test_timed_out_url_isolated(self, session_factory, fake_fetcher, feeds):
        """Given: Three URLs, one of which times out
        When: Polling
        Then: The other two are ingested; the slow one is reported failed
        with last_fetched_at unchanged
        """
        _subscribe(session_factory, ("alice", GOOD_A), ("alice", GOOD_B), ("alice", SLOW))

        summary = PollOrchestrator(session_factory, fetcher=fake_fetcher(feeds), max_workers=3).poll_all()

        assert summary.attempted == 3
        assert summary.new_post_count == 3
        assert [f.feed_url for f in summary.failures] == [SLOW]
        assert summary.failures[0].error_type == "FetchError"

        session = session_factory()
        try:
            slow = session.query(FeedSubscription).filter_by(feed_url=SLOW).one()
            assert slow.last_fetched_at is None
            assert "timed out" in slow.last_error
            good = session.query(FeedSubscription).filter_by(feed_url=GOOD_A).one()
            assert good.last_fetched_at is not None
            assert session.query(Post).count() == 3
        finally:
            session.close()

    def test_unexpected_exception_isolated(self, session_factory, fake_fetcher, feeds):
        """Given: A worker that crashes with a non-pipeline exception for one URL
        When: Polling
        Then: The crash is a per-URL failure and siblings still succeed
        """
        _subscribe(session_factory, ("alice", GOOD_A), ("alice", GOOD_B))
        fetcher = fake_fetcher(feeds)

        def worker_factory(session):
            worker = IngestionWorker(session, fetcher=fetcher)
            original_run = worker.run

            def run(url):
                if url == GOOD_B:
                    raise RuntimeError("bug")
                return original_run(url)

            worker.run = run
            return worker

        summary = PollOrchestrator(
            session_factory, fetcher=fetcher, max_workers=2, worker_factory=worker_factory
        ).poll_all()

        assert summary.attempted == 2
        assert [(f.feed_url, f.error_type) for f in summary.failures] == [(GOOD_B, "RuntimeError")]
        assert summary.new_post_count == 2

    def test_repeated_runs_converge(self, session_factory, fake_fetcher, feeds):
        _subscribe(session_factory, ("alice", GOOD_A), ("alice", GOOD_B))
        orchestrator = PollOrchestrator(session_factory, fetcher=fake_fetcher(feeds), max_workers=2)

        first = orchestrator.poll_all()
        second = orchestrator.poll_all()

        assert first.new_post_count == 3
        assert second.new_post_count == 0
        assert not second.failures

    def test_no_feeds(self, session_factory, fake_fetcher):
        summary = PollOrchestrator(session_factory, fetcher=fake_fetcher()).poll_all()

        assert summary.attempted == 0
        assert summary.failures == []

    def test_results_in_url_order(self, session_factory, fake_fetcher, feeds):
        _subscribe(session_factory, ("alice", SLOW), ("alice", GOOD_B), ("alice", GOOD_A))

        summary = PollOrchestrator(session_factory, fetcher=fake_fetcher(feeds), max_workers=3).poll_all()

        assert [r.feed_url for r in summary.results] == sorted([GOOD_A, GOOD_B, SLOW])

    def test_invalid_pool_size(self, session_factory):
        with pytest.raises(ValueError):
            PollOrchestrator(session_factory, max_workers=0)


class TestTrigger:
    """Test PollOrchestrator.trigger()."""

    def test_rejected_before_any_work(self, session_factory):
        orchestrator = PollOrchestrator(session_factory, fetcher=Mock())
        orchestrator.poll_all = Mock()

        with pytest.raises(AuthorizationError):
            orchestrator.trigger("wrong", expected="right")

        orchestrator.poll_all.assert_not_called()

    def test_env_secret_used_by_default(self, session_factory, fake_fetcher, monkeypatch):
        monkeypatch.setenv("POLL_CRON_SECRET", "from-env")
        orchestrator = PollOrchestrator(session_factory, fetcher=fake_fetcher())

        summary = orchestrator.trigger("from-env")

        assert summary.attempted == 0

    def test_unset_env_secret_denies(self, session_factory, monkeypatch):
        monkeypatch.delenv("POLL_CRON_SECRET", raising=False)

        with pytest.raises(AuthorizationError):
            PollOrchestrator(session_factory, fetcher=Mock()).trigger("anything")
