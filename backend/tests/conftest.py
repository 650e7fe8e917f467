"""
Pytest Configuration Fixtures

Sets up test environment with isolated databases and an offline feed fetcher.
"""
import threading
from typing import Callable, Dict, List, Optional, Union
from xml.sax.saxutils import escape

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from podbridge.database import create_session_factory, create_sqlite_engine
from podbridge.exceptions import FetchError
from podbridge.models import FeedSubscription, ShowIdentity
from podbridge.models.base import Base
from podbridge.services.feed_fetcher import ParsedFeed, parse_feed


@pytest.fixture(scope="function")
def test_engine():
    """
    Create an isolated in-memory SQLite engine for testing.

    Each test function gets a fresh database. StaticPool shares the single
    connection with the TestClient's worker thread.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def test_session(test_engine):
    """
    Create a database session for testing.

    All tables are created before the test and dropped after.
    """
    Base.metadata.create_all(test_engine)

    SessionFactory = sessionmaker(bind=test_engine)

    session = SessionFactory()
    yield session

    session.close()
    Base.metadata.drop_all(test_engine)


@pytest.fixture(scope="function")
def session_factory(tmp_path):
    """
    File-backed SQLite session factory for multi-threaded tests.

    Configured like the production engine (WAL, busy timeout), one session
    per unit of work.
    """
    engine = create_sqlite_engine(str(tmp_path / "pipeline.db"))
    Base.metadata.create_all(engine)
    yield create_session_factory(engine)
    engine.dispose()


# ==================== Feed Fixtures ====================


def build_rss(title: str, items: List[dict], image_url: Optional[str] = None) -> bytes:
    """
    Build an RSS 2.0 document.

    Each item dict may hold: guid, title, link, author, description, pub_date.
    """
    parts = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<rss version="2.0" xmlns:itunes="http://www.itunes.com/dtds/podcast-1.0.dtd">',
        "<channel>",
        f"<title>{escape(title)}</title>",
        "<link>https://example.com/</link>",
        "<description>Test feed</description>",
    ]
    if image_url:
        parts.append(f'<itunes:image href="{escape(image_url)}"/>')

    for item in items:
        parts.append("<item>")
        if "title" in item:
            parts.append(f"<title>{escape(item['title'])}</title>")
        if "guid" in item:
            parts.append(f"<guid isPermaLink=\"false\">{escape(item['guid'])}</guid>")
        if "link" in item:
            parts.append(f"<link>{escape(item['link'])}</link>")
        if "author" in item:
            parts.append(f"<author>{escape(item['author'])}</author>")
        if "description" in item:
            parts.append(f"<description>{escape(item['description'])}</description>")
        if "pub_date" in item:
            parts.append(f"<pubDate>{item['pub_date']}</pubDate>")
        parts.append("</item>")

    parts.extend(["</channel>", "</rss>"])
    return "\n".join(parts).encode("utf-8")


class FakeFetcher:
    """
    Offline FeedFetcher stand-in.

    Maps URLs to a raw document (parsed with the real parser), a ParsedFeed,
    or an exception to raise. Unknown URLs fail like an HTTP 404.
    """

    def __init__(self, feeds: Optional[Dict[str, Union[bytes, ParsedFeed, Exception]]] = None):
        self.feeds = dict(feeds or {})
        self.calls: List[str] = []
        self._lock = threading.Lock()

    def fetch(self, url: str) -> ParsedFeed:
        with self._lock:
            self.calls.append(url)
        source = self.feeds.get(url)
        if source is None:
            raise FetchError(url, "HTTP 404", status_code=404)
        if isinstance(source, Exception):
            raise source
        if isinstance(source, ParsedFeed):
            return source
        return parse_feed(source)


@pytest.fixture
def rss() -> Callable[..., bytes]:
    """RSS document builder"""
    return build_rss


@pytest.fixture
def fake_fetcher() -> Callable[..., FakeFetcher]:
    """FakeFetcher factory"""
    return FakeFetcher


@pytest.fixture
def my_show_feed() -> bytes:
    """Two-episode feed titled 'My Show'"""
    return build_rss(
        "My Show",
        [
            {
                "guid": "ep-1",
                "title": "Episode 1",
                "link": "https://example.com/ep1",
                "author": "Host",
                "description": "<p>First episode</p><p>More detail</p>",
                "pub_date": "Mon, 06 Jan 2025 10:00:00 GMT",
            },
            {
                "guid": "ep-2",
                "title": "Episode 2",
                "link": "https://example.com/ep2",
                "pub_date": "Mon, 13 Jan 2025 10:00:00 GMT",
            },
        ],
        image_url="https://example.com/art.png",
    )


# ==================== Data Fixtures ====================


@pytest.fixture
def make_subscription(test_session) -> Callable[..., FeedSubscription]:
    """Create a FeedSubscription in the test database"""

    def _make(feed_url: str, user_id: str = "user-1", title: Optional[str] = None) -> FeedSubscription:
        subscription = FeedSubscription(user_id=user_id, feed_url=feed_url, title=title or feed_url)
        test_session.add(subscription)
        test_session.commit()
        test_session.refresh(subscription)
        return subscription

    return _make


@pytest.fixture
def make_show(test_session) -> Callable[..., ShowIdentity]:
    """Create a ShowIdentity in the test database"""

    def _make(slug: str, name: Optional[str] = None, canonical_id: Optional[int] = None) -> ShowIdentity:
        show = ShowIdentity(slug=slug, name=name or slug, canonical_id=canonical_id)
        test_session.add(show)
        test_session.commit()
        test_session.refresh(show)
        return show

    return _make
