"""
Ingestion State Enumeration

Defines the states of one IngestionWorker run over a single feed URL.
"""
from enum import Enum


class IngestionState(str, Enum):
    """
    Ingestion worker state enumeration.

    A run progresses through these states in order:
    - fetching: Retrieving and parsing the feed document
    - resolving: Resolving the show identity from the feed title
    - deduplicating: Filtering out already-ingested entries
    - persisting: Inserting new entries as posts
    - done: Tracking timestamps updated, run succeeded

    `failed` is terminal and reachable from any non-terminal state.
    """

    FETCHING = "fetching"
    RESOLVING = "resolving"
    DEDUPLICATING = "deduplicating"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"

    def get_next_state(self) -> "IngestionState":
        """
        Get the next state on the success path.

        Returns:
            IngestionState: The next state, or self if already terminal
        """
        order = [
            IngestionState.FETCHING,
            IngestionState.RESOLVING,
            IngestionState.DEDUPLICATING,
            IngestionState.PERSISTING,
            IngestionState.DONE,
        ]
        if self not in order or self is IngestionState.DONE:
            return self
        return order[order.index(self) + 1]
