"""
API Dependencies

Shared FastAPI dependencies: caller identity, feed fetcher and poll orchestrator.
"""
from typing import Optional

from fastapi import Header, HTTPException, status

from podbridge.database import get_session_factory
from podbridge.services.feed_fetcher import FeedFetcher
from podbridge.workflows.poll_orchestrator import PollOrchestrator


def get_current_user_id(x_user_id: Optional[str] = Header(None, description="Caller identity set by the auth gateway")) -> str:
    """Caller identity from the X-User-Id header; 401 when absent."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing caller identity",
        )
    return x_user_id.strip()


def get_feed_fetcher() -> FeedFetcher:
    return FeedFetcher()


def get_poll_orchestrator() -> PollOrchestrator:
    return PollOrchestrator(get_session_factory(), fetcher=get_feed_fetcher())
