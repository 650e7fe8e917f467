"""
Show query service

Canonical-routed reads of shows and their posts. Requesting an alias slug
yields the canonical show, and a canonical show's timeline includes posts
stored under its aliases.
"""
from typing import List, Optional

from sqlalchemy.orm import Session

from podbridge.models import Post, ShowIdentity
from podbridge.services.show_resolver import ShowResolver

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class ShowService:
    """Show read model."""

    def __init__(self, db: Session):
        self.db = db
        self.resolver = ShowResolver(db)

    def get_show(self, slug: str) -> Optional[ShowIdentity]:
        """Canonical show for a slug, or None if the slug is unknown."""
        return self.resolver.resolve_slug(slug)

    def get_posts(self, show: ShowIdentity, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0) -> List[Post]:
        """
        Newest-first posts of a canonical show, including its aliases' posts.

        Args:
            show: Canonical show
            limit: Page size (capped at MAX_PAGE_SIZE)
            offset: Number of posts to skip

        Returns:
            List[Post]
        """
        show_ids = [show.id] + self.resolver.get_alias_ids(show)
        limit = max(1, min(limit, MAX_PAGE_SIZE))
        return (
            self.db.query(Post)
            .filter(Post.show_id.in_(show_ids))
            .order_by(Post.created_at.desc(), Post.id.desc())
            .offset(max(offset, 0))
            .limit(limit)
            .all()
        )

    def count_posts(self, show: ShowIdentity) -> int:
        show_ids = [show.id] + self.resolver.get_alias_ids(show)
        return self.db.query(Post).filter(Post.show_id.in_(show_ids)).count()

    def set_canonical(self, identity_id: int, canonical_id: Optional[int]) -> ShowIdentity:
        """Administrative alias assignment (see ShowResolver.set_canonical)."""
        return self.resolver.set_canonical(identity_id, canonical_id)


__all__ = ["ShowService", "DEFAULT_PAGE_SIZE", "MAX_PAGE_SIZE"]
