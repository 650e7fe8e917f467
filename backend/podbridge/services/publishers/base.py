# Publisher Interface
"""
External platform publisher interface for PodBridge federation.

A Publisher performs the actual external publish call for one fan-out
target. The FederationDispatcher never calls publishers itself; the
FederationPublishRunner drives pending targets through a Publisher and
hands each PublishOutcome back to the dispatcher.
"""
import importlib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional

from podbridge.enums.federation_status import FederationStatus
from podbridge.models import ConnectedAccount, Post


@dataclass(frozen=True)
class PublishOutcome:
    """Result of one external publish attempt."""
    status: FederationStatus
    external_post_id: Optional[str] = None
    external_url: Optional[str] = None
    error_message: Optional[str] = None

    @classmethod
    def published(cls, external_post_id: Optional[str] = None, external_url: Optional[str] = None) -> "PublishOutcome":
        return cls(
            status=FederationStatus.PUBLISHED,
            external_post_id=external_post_id,
            external_url=external_url,
        )

    @classmethod
    def failed(cls, error_message: str) -> "PublishOutcome":
        return cls(status=FederationStatus.FAILED, error_message=error_message)


class Publisher(ABC):
    """
    Publisher for one external platform.

    Implementations may raise; the runner converts exceptions into failed
    outcomes.
    """

    @abstractmethod
    def publish(self, post: Post, account: ConnectedAccount) -> PublishOutcome:
        """
        Publish a local post to an external account.

        Args:
            post: Local post to publish
            account: Target external account

        Returns:
            PublishOutcome with the platform's result
        """
        raise NotImplementedError


class MultiPlatformPublisher(Publisher):
    """Routes each publish call to the publisher registered for the account's platform."""

    def __init__(self, publishers: Optional[Dict[str, Publisher]] = None):
        self.publishers: Dict[str, Publisher] = dict(publishers or {})

    def register(self, platform: str, publisher: Publisher) -> None:
        self.publishers[platform] = publisher

    @property
    def platforms(self) -> List[str]:
        return sorted(self.publishers)

    def publish(self, post: Post, account: ConnectedAccount) -> PublishOutcome:
        publisher = self.publishers.get(account.platform)
        if publisher is None:
            return PublishOutcome.failed(f"No publisher registered for platform '{account.platform}'")
        return publisher.publish(post, account)


def load_publisher(path: str) -> Publisher:
    """
    Instantiate a publisher from a "module:attribute" path.

    The attribute is a Publisher subclass or a zero-argument factory
    returning a Publisher.

    Args:
        path: Import path, e.g. "mypkg.mastodon:MastodonPublisher"

    Returns:
        Publisher: New publisher instance

    Raises:
        ValueError: Malformed path or unknown attribute
        TypeError: The attribute does not produce a Publisher
    """
    module_name, _, attribute = path.partition(":")
    if not module_name or not attribute:
        raise ValueError(f"Publisher path must look like 'module:attribute', got '{path}'")

    module = importlib.import_module(module_name)
    factory = getattr(module, attribute, None)
    if factory is None:
        raise ValueError(f"Module '{module_name}' has no attribute '{attribute}'")

    publisher = factory()
    if not isinstance(publisher, Publisher):
        raise TypeError(f"'{path}' did not produce a Publisher (got {type(publisher).__name__})")
    return publisher


__all__ = ["Publisher", "PublishOutcome", "MultiPlatformPublisher", "load_publisher"]
