"""
ConnectedAccount Model

External platform account a user has linked for federation.
"""
from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from podbridge.models.base import Base, TimestampMixin


class ConnectedAccount(Base, TimestampMixin):
    """
    Represents an external account that posts can be fanned out to.

    Account linking itself (OAuth, tokens) is handled outside the pipeline;
    this table is only the registry federation targets point at.

    Attributes:
        id: Primary key
        user_id: Owning user
        platform: Platform name ('mastodon', 'bluesky', ...)
        platform_username: Handle on the platform (nullable)
        is_active: Whether the account accepts new fan-out
    """

    __tablename__ = "connected_accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    platform: Mapped[str] = mapped_column(String(50), nullable=False)
    platform_username: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    federation_targets = relationship("FederationTarget", back_populates="account")

    def __repr__(self) -> str:
        return f"<ConnectedAccount(id={self.id}, platform='{self.platform}', username='{self.platform_username}')>"
