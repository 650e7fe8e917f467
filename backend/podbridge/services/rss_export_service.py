"""
RSS re-export

Renders a show's newest posts as an RSS 2.0 document, so a show tag can be
followed from any feed reader.
"""
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Optional, Sequence

from podbridge.config import RSS_EXPORT_LIMIT, SITE_URL
from podbridge.models import Post, ShowIdentity, utcnow

ITEM_TITLE_LENGTH = 100
FEED_TTL_MINUTES = 60
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'


def _rfc822(value: datetime) -> str:
    return format_datetime(value.replace(tzinfo=timezone.utc))


def _text(parent: ET.Element, tag: str, value: str, **attrib) -> ET.Element:
    element = ET.SubElement(parent, tag, attrib)
    element.text = value
    return element


class RssExportService:
    """Builds RSS 2.0 documents for shows."""

    def __init__(self, site_url: str = SITE_URL, limit: int = RSS_EXPORT_LIMIT):
        self.site_url = site_url.rstrip("/")
        self.limit = limit

    def post_link(self, post: Post) -> str:
        return post.external_url or f"{self.site_url}/post/{post.id}"

    def render(self, show: ShowIdentity, posts: Sequence[Post], built_at: Optional[datetime] = None) -> str:
        """
        Render a show feed.

        Args:
            show: Canonical show
            posts: Posts newest first; only the first `limit` are included
            built_at: Channel publication time (default now)

        Returns:
            str: RSS 2.0 XML document
        """
        rss = ET.Element("rss", {"version": "2.0"})
        channel = ET.SubElement(rss, "channel")

        _text(channel, "title", f"#{show.slug} - {show.name} on PodBridge")
        _text(channel, "description", f"Posts and discussions for the tag #{show.slug} on PodBridge.")
        _text(channel, "link", f"{self.site_url}/show/{show.slug}")
        _text(channel, "language", "en")
        _text(channel, "pubDate", _rfc822(built_at or utcnow()))
        _text(channel, "ttl", str(FEED_TTL_MINUTES))
        _text(channel, "generator", "PodBridge")

        for post in list(posts)[:self.limit]:
            item = ET.SubElement(channel, "item")
            _text(item, "title", post.content[:ITEM_TITLE_LENGTH])
            _text(item, "description", post.content)
            _text(item, "link", self.post_link(post))
            _text(item, "guid", str(post.id), isPermaLink="false")
            if post.author_name:
                _text(item, "author", post.author_name)
            _text(item, "pubDate", _rfc822(post.created_at))

        ET.indent(rss)
        return XML_DECLARATION + ET.tostring(rss, encoding="unicode")


__all__ = ["RssExportService", "FEED_TTL_MINUTES"]
