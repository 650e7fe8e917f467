"""
FederationTarget Model

Tracks the fan-out of one local post to one external account.
"""
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from podbridge.enums.federation_status import FederationStatus
from podbridge.models.base import Base, TimestampMixin


class FederationTarget(Base, TimestampMixin):
    """
    Represents one (local post, external account) fan-out unit.

    Status moves pending -> published or pending -> failed exactly once.
    Terminal fields are only written together with that transition.

    Attributes:
        id: Primary key
        post_id: Foreign key to Post
        account_id: Foreign key to ConnectedAccount
        status: 'pending', 'published' or 'failed'
        external_post_id: Platform's post ID (set on published)
        external_url: Platform URL of the post (set on published)
        error_message: Error detail (set on failed)
        published_at: When publication completed (set on published)
    """

    __tablename__ = "federation_targets"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Foreign keys
    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
        doc="Foreign key to Post"
    )
    account_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("connected_accounts.id", ondelete="CASCADE"),
        nullable=False,
        doc="Foreign key to ConnectedAccount"
    )

    # Status
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=FederationStatus.PENDING.value,
        doc="Federation status"
    )
    external_post_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    external_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    published_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    # Relationships
    post = relationship("Post", back_populates="federation_targets")
    account = relationship("ConnectedAccount", back_populates="federation_targets")

    __table_args__ = (
        UniqueConstraint("post_id", "account_id", name="uq_fed_post_account"),
        Index("idx_fed_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<FederationTarget(id={self.id}, post_id={self.post_id}, status='{self.status}')>"
