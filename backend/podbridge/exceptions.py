"""
Pipeline Exceptions

Error taxonomy for feed ingestion and federation.

Ingestion errors (FetchError, ParseError, ResolutionError, PersistenceError)
are caught at the IngestionWorker boundary and reported per feed URL.
AuthorizationError aborts a poll trigger before any work starts.
AlreadyTerminal is a benign no-op returned to federation resolution callers.
"""


class PipelineError(Exception):
    """Base class for all pipeline errors."""
    pass


class IngestionError(PipelineError):
    """Base class for errors that fail a single feed URL."""
    pass


class FetchError(IngestionError):
    """Network failure, timeout or non-2xx response while retrieving a feed."""

    def __init__(self, url: str, reason: str, status_code: int | None = None):
        self.url = url
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Failed to fetch feed {url}: {reason}")


class ParseError(IngestionError):
    """Malformed syndication document."""
    pass


class ResolutionError(IngestionError):
    """Show identity upsert conflict that survived its single retry."""
    pass


class PersistenceError(IngestionError):
    """Post insert failure other than the expected dedup-key conflict."""
    pass


class AuthorizationError(PipelineError):
    """Poll trigger invoked without a valid credential."""
    pass


class AlreadyTerminal(PipelineError):
    """Resolution attempted on a FederationTarget that already reached a terminal state."""

    def __init__(self, target_id: int, status: str):
        self.target_id = target_id
        self.status = status
        super().__init__(f"Federation target {target_id} is already {status}")


class AliasError(PipelineError, ValueError):
    """Canonical pointer assignment that would break the single-hop alias invariant."""
    pass


__all__ = [
    "PipelineError",
    "IngestionError",
    "FetchError",
    "ParseError",
    "ResolutionError",
    "PersistenceError",
    "AuthorizationError",
    "AlreadyTerminal",
    "AliasError",
]
