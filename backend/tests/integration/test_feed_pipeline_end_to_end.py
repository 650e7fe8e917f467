"""
Feed Pipeline End-to-End Tests

Manual import, scheduled polling and federation on one database, with the
network replaced by an offline fetcher.
"""
from io import StringIO

import pytest
from rich.console import Console

from podbridge.enums.federation_status import FederationStatus
from podbridge.enums.import_status import ImportStatus
from podbridge.models import ConnectedAccount, FeedSubscription, Post, ShowIdentity
from podbridge.services.import_service import FeedImportService
from podbridge.services.post_service import PostService
from podbridge.services.publishers.base import MultiPlatformPublisher, PublishOutcome, Publisher
from podbridge.services.show_service import ShowService
from podbridge.workflows.federation_runner import FederationPublishRunner
from podbridge.workflows.poll_orchestrator import PollOrchestrator

FEED_URL = "https://example.com/my-show.xml"


class EchoPublisher(Publisher):
    def publish(self, post, account):
        return PublishOutcome.published(f"{account.platform}-{post.id}")


@pytest.mark.integration
class TestMyShowScenario:
    """A 'My Show' feed imported by hand, then kept fresh by polling."""

    def test_import_then_poll(self, session_factory, fake_fetcher, rss, my_show_feed):
        """Given: A feed titled 'My Show' with items ep-1 and ep-2
        When: The user imports it, the poll runs twice and the feed gains ep-3
        Then: Show 'my-show' holds ep-1..ep-3 exactly once each
        """
        fetcher = fake_fetcher({FEED_URL: my_show_feed})

        # Manual import
        session = session_factory()
        try:
            results = FeedImportService(session, fetcher=fetcher).import_feeds("alice", [FEED_URL])
            assert results[0].status is ImportStatus.SUCCESS
            assert results[0].new_post_count == 2
        finally:
            session.close()

        orchestrator = PollOrchestrator(session_factory, fetcher=fetcher, max_workers=4)

        # Poll with nothing new
        assert orchestrator.poll_all().new_post_count == 0

        # Feed gains an item
        fetcher.feeds[FEED_URL] = rss("My Show", [
            {"guid": "ep-3", "title": "Episode 3", "pub_date": "Mon, 20 Jan 2025 10:00:00 GMT"},
            {"guid": "ep-2", "title": "Episode 2"},
            {"guid": "ep-1", "title": "Episode 1"},
        ])
        summary = orchestrator.poll_all()
        assert summary.new_post_count == 1
        assert summary.failures == []

        session = session_factory()
        try:
            show = session.query(ShowIdentity).filter_by(slug="my-show").one()
            guids = sorted(p.external_guid for p in session.query(Post).filter_by(show_id=show.id))
            assert guids == ["ep-1", "ep-2", "ep-3"]

            subscription = session.query(FeedSubscription).one()
            assert subscription.title == "My Show"
            assert subscription.last_error is None

            posts = ShowService(session).get_posts(show)
            assert posts[0].external_guid == "ep-3"
        finally:
            session.close()

    def test_alias_assigned_between_polls(self, session_factory, fake_fetcher, rss, my_show_feed):
        """Given: 'my-show' ingested, then made an alias of 'the-show'
        When: The feed gains an item and is polled
        Then: Old items are not re-ingested, the new post lands on 'the-show'
              and its timeline shows all three
        """
        fetcher = fake_fetcher({FEED_URL: my_show_feed})
        session = session_factory()
        try:
            FeedImportService(session, fetcher=fetcher).import_feeds("alice", [FEED_URL])
            canonical = ShowIdentity(slug="the-show", name="The Show")
            session.add(canonical)
            session.commit()
            service = ShowService(session)
            service.set_canonical(service.resolver.get_by_slug("my-show").id, canonical.id)
        finally:
            session.close()

        orchestrator = PollOrchestrator(session_factory, fetcher=fetcher)

        # Unchanged feed: items stored under the alias are already ingested
        assert orchestrator.poll_all().new_post_count == 0

        fetcher.feeds[FEED_URL] = rss("My Show", [
            {"guid": "ep-3", "title": "Episode 3"},
            {"guid": "ep-2", "title": "Episode 2"},
            {"guid": "ep-1", "title": "Episode 1"},
        ])
        assert orchestrator.poll_all().new_post_count == 1

        session = session_factory()
        try:
            service = ShowService(session)
            show = service.get_show("my-show")
            assert show.slug == "the-show"
            assert service.count_posts(show) == 3
            newest = session.query(Post).filter_by(external_guid="ep-3").one()
            assert newest.show_id == show.id
        finally:
            session.close()


@pytest.mark.integration
class TestFederationScenario:
    """A post fanned out to two accounts and published by the runner."""

    def test_author_and_publish(self, test_session, make_show):
        make_show("my-show")
        accounts = [
            ConnectedAccount(user_id="alice", platform="mastodon"),
            ConnectedAccount(user_id="alice", platform="bluesky"),
        ]
        test_session.add_all(accounts)
        test_session.commit()

        post, targets = PostService(test_session).create_post(
            "alice", "my-show", "Hello", target_account_ids=[a.id for a in accounts]
        )
        assert {t.status for t in targets} == {FederationStatus.PENDING.value}

        publisher = MultiPlatformPublisher({"mastodon": EchoPublisher()})
        runner = FederationPublishRunner(test_session, publisher, console=Console(file=StringIO()))
        runner.publish_pending(post.id)

        summary = runner.dispatcher.summary(post.id)
        assert (summary.pending, summary.published, summary.failed) == (0, 1, 1)
