"""
OPML subscription-list parsing

Turns an OPML export (podcast apps, feed readers) into {title, url} pairs
ready for manual import.
"""
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import List

from podbridge.exceptions import ParseError

DEFAULT_OUTLINE_TITLE = "Untitled Show"


@dataclass
class OpmlFeed:
    """One feed entry of an OPML document."""
    title: str
    url: str


def parse_opml(xml_string: str) -> List[OpmlFeed]:
    """
    Parse an OPML document into feed entries.

    Only outlines with type="rss" and a non-empty xmlUrl are returned, at any
    nesting depth (folders are flattened). The title comes from the `title`
    attribute, then `text`, then DEFAULT_OUTLINE_TITLE. Repeated URLs are kept
    once, in document order.

    Args:
        xml_string: OPML document text

    Returns:
        List[OpmlFeed]: Feeds in document order

    Raises:
        ParseError: The document is not well-formed XML
    """
    try:
        root = ET.fromstring(xml_string)
    except ET.ParseError as e:
        raise ParseError(f"Invalid OPML document: {e}") from e

    feeds: List[OpmlFeed] = []
    seen = set()

    for outline in root.iter("outline"):
        if (outline.get("type") or "").lower() != "rss":
            continue

        url = (outline.get("xmlUrl") or "").strip()
        if not url or url in seen:
            continue

        title = outline.get("title") or outline.get("text") or DEFAULT_OUTLINE_TITLE
        feeds.append(OpmlFeed(title=title.strip() or DEFAULT_OUTLINE_TITLE, url=url))
        seen.add(url)

    return feeds
