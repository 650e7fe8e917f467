"""
Models Module

Exports all ORM models for the PodBridge feed pipeline.
"""

from podbridge.models.base import Base, TimestampMixin, utcnow

from podbridge.models.show_identity import ShowIdentity
from podbridge.models.post import Post
from podbridge.models.feed_subscription import FeedSubscription
from podbridge.models.connected_account import ConnectedAccount
from podbridge.models.federation_target import FederationTarget

__all__ = [
    "Base",
    "TimestampMixin",
    "utcnow",
    "ShowIdentity",
    "Post",
    "FeedSubscription",
    "ConnectedAccount",
    "FederationTarget",
]
