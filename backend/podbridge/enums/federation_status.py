"""
Federation Status Enumeration

Defines the lifecycle states of a FederationTarget.
"""
from enum import Enum


class FederationStatus(str, Enum):
    """
    FederationTarget status enumeration.

    Each fan-out target goes through exactly one transition:
    - pending: Created at post-authorship time, waiting for a publish attempt
    - published: The external platform accepted the post (terminal)
    - failed: The publish attempt failed (terminal)
    """

    PENDING = "pending"
    PUBLISHED = "published"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Whether no further transition is permitted."""
        return self is not FederationStatus.PENDING

    def can_transition_to(self, target: "FederationStatus") -> bool:
        """
        Check whether moving to the given status is legal.

        Only pending -> published and pending -> failed are allowed.

        Args:
            target: Status to move to

        Returns:
            bool: True if the transition is allowed
        """
        return self is FederationStatus.PENDING and target.is_terminal

    @property
    def label(self) -> str:
        """
        Get human-readable label for the status.

        Returns:
            str: Label for display
        """
        labels = {
            "pending": "Publishing",
            "published": "Published",
            "failed": "Failed",
        }
        return labels.get(self.value, "Unknown")
