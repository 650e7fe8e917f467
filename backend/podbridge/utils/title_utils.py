"""
Title and slug utilities

Derives show slugs from free-text titles and cleans display titles.
"""

import re
from typing import Optional

SLUG_MAX_LENGTH = 50
PLACEHOLDER_SLUG = "untitled-show"

# Column width of display names (ShowIdentity.name, FeedSubscription.title)
DISPLAY_TITLE_MAX_LENGTH = 255
DISPLAY_TITLE_ELLIPSIS = "..."

_WHITESPACE_RE = re.compile(r"\s+")
_INVALID_SLUG_CHARS_RE = re.compile(r"[^a-z0-9-]")
_REPEATED_HYPHENS_RE = re.compile(r"-{2,}")


def derive_slug(title: Optional[str]) -> str:
    """
    Derive a canonical slug from a show title.

    Rules, applied in order:
    1. Lowercase
    2. Whitespace runs become a single hyphen
    3. Characters outside [a-z0-9-] are removed
    4. Repeated hyphens collapse to one
    5. Leading/trailing hyphens are trimmed
    6. Truncated to 50 characters

    Never fails: a title that reduces to nothing yields PLACEHOLDER_SLUG.

    Args:
        title: Free-text show title

    Returns:
        str: Slug

    Examples:
        >>> derive_slug("The Daily Show!")
        'the-daily-show'
        >>> derive_slug("  ")
        'untitled-show'
    """
    if not title:
        return PLACEHOLDER_SLUG

    slug = title.lower()
    slug = _WHITESPACE_RE.sub("-", slug)
    slug = _INVALID_SLUG_CHARS_RE.sub("", slug)
    slug = _REPEATED_HYPHENS_RE.sub("-", slug)
    slug = slug.strip("-")
    # A cut in the middle of "a-b" can leave a dangling hyphen
    slug = slug[:SLUG_MAX_LENGTH].rstrip("-")

    return slug or PLACEHOLDER_SLUG


def sanitize_title(title: Optional[str], max_length: Optional[int] = None) -> str:
    """
    Clean a display title.

    Rules:
    1. Newlines and carriage returns become spaces
    2. Leading/trailing whitespace is removed
    3. Internal whitespace runs collapse to one space
    4. Titles longer than the limit are cut and end with an ellipsis

    Args:
        title: Raw title
        max_length: Maximum length (default DISPLAY_TITLE_MAX_LENGTH)

    Returns:
        str: Cleaned title, empty string for empty input
    """
    if not title:
        return ""

    cleaned = re.sub(r"[\n\r]+", " ", title)
    cleaned = cleaned.strip()
    cleaned = re.sub(r"\s+", " ", cleaned)

    limit = max_length or DISPLAY_TITLE_MAX_LENGTH
    if len(cleaned) > limit:
        truncate_length = limit - len(DISPLAY_TITLE_ELLIPSIS)
        cleaned = cleaned[:truncate_length] + DISPLAY_TITLE_ELLIPSIS

    return cleaned
