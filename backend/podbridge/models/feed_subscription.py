"""
FeedSubscription Model

A (user, feed URL) registration.
"""
from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from podbridge.models.base import Base, TimestampMixin


class FeedSubscription(Base, TimestampMixin):
    """
    Represents one user's registration of a feed URL.

    Several users may register the same URL; ingestion work is deduplicated
    by URL across the whole system, so tracking columns are updated on every
    registration of a URL at once.

    Attributes:
        id: Primary key
        user_id: Owning user
        feed_url: Feed URL (dedup key for "already tracked")
        title: Display title (refreshed from the feed on first successful fetch)
        image_url: Feed artwork (nullable)
        last_fetched_at: Last successful ingestion run (nullable)
        last_attempted_at: Last ingestion attempt, successful or not (nullable)
        last_error: Reason of the last failed attempt (nullable)
    """

    __tablename__ = "feed_subscriptions"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    feed_url: Mapped[str] = mapped_column(String(2048), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    image_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)

    # Tracking
    last_fetched_at: Mapped[datetime | None] = mapped_column(
        DateTime,
        nullable=True,
        doc="Last successful ingestion of this URL"
    )
    last_attempted_at: Mapped[datetime | None] = mapped_column(
        DateTime,
        nullable=True,
        doc="Last ingestion attempt of this URL"
    )
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("user_id", "feed_url", name="uq_feed_subscriptions_user_url"),
        Index("idx_feed_subscriptions_url", "feed_url"),
    )

    def __repr__(self) -> str:
        return f"<FeedSubscription(id={self.id}, user_id='{self.user_id}', feed_url='{self.feed_url}')>"
