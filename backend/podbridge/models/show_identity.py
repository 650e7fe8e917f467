"""
ShowIdentity Model

Represents one show/topic channel, addressed by a unique slug.
"""
from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from podbridge.models.base import Base, TimestampMixin


class ShowIdentity(Base, TimestampMixin):
    """
    Represents a show identity (a "show tag").

    An identity may be an alias of another identity through `canonical_id`.
    Alias depth is capped at one hop: the canonical target never has a
    canonical pointer of its own. The invariant is enforced at write time by
    ShowResolver.set_canonical().

    Attributes:
        id: Primary key
        slug: Lowercase hyphenated handle, unique, at most 50 characters
        name: Display name
        category: Optional grouping (e.g. 'RSS Imports')
        canonical_id: Self-reference to the canonical identity (nullable)
    """

    __tablename__ = "show_identities"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    slug: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        doc="Unique slug derived from the show title"
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Alias pointer
    canonical_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("show_identities.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        doc="Canonical identity this one is an alias of"
    )

    # Relationships
    canonical = relationship("ShowIdentity", remote_side=[id], back_populates="aliases")
    aliases = relationship("ShowIdentity", back_populates="canonical")
    posts = relationship("Post", back_populates="show")

    @property
    def is_alias(self) -> bool:
        return self.canonical_id is not None

    def __repr__(self) -> str:
        return f"<ShowIdentity(id={self.id}, slug='{self.slug}', canonical_id={self.canonical_id})>"
