"""
Feed Fetcher

Retrieves one syndication document and parses it into plain data.

Pure transform of URL -> ParsedFeed: no persistence, no shared state, and no
retry (retry policy belongs to the caller; a failed URL is simply attempted
again on the next poll).

Dependencies: requests, feedparser, beautifulsoup4
"""
import calendar
import io
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

import feedparser
import requests
from bs4 import BeautifulSoup
from loguru import logger

from podbridge.config import FEED_FETCH_TIMEOUT, FEED_USER_AGENT
from podbridge.exceptions import FetchError, ParseError

DEFAULT_FEED_TITLE = "Untitled Feed"


@dataclass
class ParsedEntry:
    """One feed item, reduced to the fields ingestion needs."""
    guid: str
    title: str
    author: Optional[str] = None
    published_at: Optional[datetime] = None  # naive UTC; None when the feed omits it
    summary: Optional[str] = None
    link: Optional[str] = None
    image_url: Optional[str] = None


@dataclass
class ParsedFeed:
    """A parsed syndication document."""
    title: str
    image_url: Optional[str] = None
    link: Optional[str] = None
    entries: List[ParsedEntry] = field(default_factory=list)


def _to_datetime(parsed_time) -> Optional[datetime]:
    """Convert a feedparser UTC struct_time into a naive UTC datetime."""
    if not parsed_time:
        return None
    try:
        return datetime.fromtimestamp(calendar.timegm(parsed_time), timezone.utc).replace(tzinfo=None)
    except (OverflowError, ValueError, TypeError):
        return None


def _first_text_line(raw: Optional[str]) -> Optional[str]:
    """Strip markup from an item description and keep its first non-empty line."""
    if not raw:
        return None
    text = BeautifulSoup(raw, "html.parser").get_text("\n")
    for line in text.splitlines():
        line = line.strip()
        if line:
            return line
    return None


def _image_href(node) -> Optional[str]:
    """Read an image URL from a feedparser image node (itunes:image or <image>)."""
    if not node:
        return None
    href = node.get("href") or node.get("url")
    return href.strip() if href else None


def _parse_entry(entry) -> Optional[ParsedEntry]:
    """Build a ParsedEntry, or None when the item has no identifier or no title."""
    link = (entry.get("link") or "").strip() or None
    guid = (entry.get("id") or "").strip() or link
    title = (entry.get("title") or "").strip()

    if not guid or not title:
        return None

    image_url = _image_href(entry.get("image"))
    if not image_url and entry.get("media_thumbnail"):
        image_url = entry["media_thumbnail"][0].get("url")

    return ParsedEntry(
        guid=guid,
        title=title,
        author=(entry.get("author") or "").strip() or None,
        published_at=_to_datetime(entry.get("published_parsed") or entry.get("updated_parsed")),
        summary=_first_text_line(entry.get("summary")),
        link=link,
        image_url=image_url,
    )


def parse_feed(content: bytes) -> ParsedFeed:
    """
    Parse a syndication document (RSS 0.9x/1.0/2.0, Atom, podcast RSS).

    Args:
        content: Raw response body

    Returns:
        ParsedFeed: Title is never empty; entries keep document order and
        exclude items lacking an identifier or a title

    Raises:
        ParseError: The document is malformed and nothing could be recovered
    """
    if isinstance(content, str):
        content = content.encode("utf-8")

    # Wrap in a stream so feedparser never mistakes the body for a URL or path
    parsed = feedparser.parse(io.BytesIO(content))
    feed_data = parsed.get("feed", {})

    if parsed.get("bozo") and not parsed.get("entries") and not feed_data.get("title"):
        reason = parsed.get("bozo_exception")
        raise ParseError(f"Malformed syndication document: {reason}")

    entries = []
    dropped = 0
    for entry in parsed.get("entries", []):
        parsed_entry = _parse_entry(entry)
        if parsed_entry is None:
            dropped += 1
            continue
        entries.append(parsed_entry)

    if dropped:
        logger.debug(f"[FeedFetcher] Dropped {dropped} entries without identifier or title")

    return ParsedFeed(
        title=(feed_data.get("title") or "").strip() or DEFAULT_FEED_TITLE,
        image_url=_image_href(feed_data.get("image")),
        link=(feed_data.get("link") or "").strip() or None,
        entries=entries,
    )


class FeedFetcher:
    """
    Feed retrieval service.

    Attributes:
        timeout: Seconds before a retrieval is abandoned
        user_agent: User-Agent header sent with every request
    """

    def __init__(self, timeout: float = FEED_FETCH_TIMEOUT, user_agent: str = FEED_USER_AGENT):
        self.timeout = timeout
        self.user_agent = user_agent

    def fetch(self, url: str) -> ParsedFeed:
        """
        Retrieve and parse one feed.

        Args:
            url: Feed URL

        Returns:
            ParsedFeed

        Raises:
            FetchError: Network failure, timeout, or non-2xx status
            ParseError: Malformed document
        """
        headers = {
            "User-Agent": self.user_agent,
            "Accept": "application/rss+xml, application/atom+xml, application/xml;q=0.9, */*;q=0.8",
        }

        try:
            response = requests.get(url, headers=headers, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise FetchError(url, f"timed out after {self.timeout}s") from e
        except requests.exceptions.RequestException as e:
            raise FetchError(url, str(e)) from e

        if not 200 <= response.status_code < 300:
            raise FetchError(
                url,
                f"HTTP {response.status_code}",
                status_code=response.status_code,
            )

        feed = parse_feed(response.content)
        logger.debug(f"[FeedFetcher] {url}: '{feed.title}' with {len(feed.entries)} entries")
        return feed


__all__ = ["FeedFetcher", "ParsedFeed", "ParsedEntry", "parse_feed", "DEFAULT_FEED_TITLE"]
