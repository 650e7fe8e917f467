"""
Post Model

Local posts. Ingestion-origin posts carry the feed item's external identifier.
"""
from sqlalchemy import ForeignKey, Integer, String, Text, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from podbridge.models.base import Base, TimestampMixin


class Post(Base, TimestampMixin):
    """
    Represents a post attributed to a show.

    Posts created by the ingestion pipeline always have `external_guid` set
    (feed item guid, falling back to its link). User-authored posts leave it
    NULL. The (show_id, external_guid) unique constraint is the dedup backstop
    for concurrent ingestion of the same feed.

    Attributes:
        id: Primary key
        show_id: Foreign key to ShowIdentity
        user_id: Attributed user (nullable)
        content: Post text
        author_name: Author label
        author_avatar: Author avatar URL (nullable)
        external_guid: Dedup key for ingested posts (nullable)
        external_url: Link to the original item (nullable)
        image_url: Artwork (nullable)
        created_at: Feed item publish time, or ingestion time if absent
    """

    __tablename__ = "posts"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Foreign key
    show_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("show_identities.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        doc="Foreign key to ShowIdentity"
    )
    user_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)

    # Content
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author_name: Mapped[str] = mapped_column(String(255), nullable=False)
    author_avatar: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    # Ingestion origin
    external_guid: Mapped[str | None] = mapped_column(
        String(1024),
        nullable=True,
        doc="Feed item guid or link (dedup key)"
    )
    external_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)

    # Relationships
    show = relationship("ShowIdentity", back_populates="posts")
    federation_targets = relationship(
        "FederationTarget", back_populates="post", cascade="all, delete-orphan"
    )

    __table_args__ = (
        UniqueConstraint("show_id", "external_guid", name="uq_posts_show_external_guid"),
        Index("idx_posts_show_created", "show_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, show_id={self.show_id}, external_guid='{self.external_guid}')>"
