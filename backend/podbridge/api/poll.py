"""
Poll API Routes

Scheduled poll trigger endpoint, called by an external scheduler.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Header

from podbridge.api.dependencies import get_poll_orchestrator
from podbridge.schemas.poll import PollSummaryResponse
from podbridge.workflows.poll_orchestrator import PollOrchestrator


router = APIRouter()


def parse_bearer(authorization: Optional[str]) -> Optional[str]:
    """Extract the credential of an 'Authorization: Bearer <token>' header."""
    if not authorization:
        return None
    scheme, _, credential = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return credential.strip() or None


@router.post("/poll", response_model=PollSummaryResponse)
def trigger_poll(
    authorization: Optional[str] = Header(None),
    orchestrator: PollOrchestrator = Depends(get_poll_orchestrator),
):
    """
    Poll every registered feed once

    Requires `Authorization: Bearer <POLL_CRON_SECRET>`. Per-URL failures are
    reported in the summary and never fail the request.
    """
    summary = orchestrator.trigger(parse_bearer(authorization))
    return PollSummaryResponse.model_validate(summary)
