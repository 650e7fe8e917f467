"""
Poll Schemas

Pydantic models for the scheduled poll trigger response.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class PollFailureResponse(BaseModel):
    """A feed URL that failed during the run"""

    feed_url: str
    error: str
    error_type: Optional[str] = None

    model_config = {"from_attributes": True}


class PollSummaryResponse(BaseModel):
    """Poll run summary"""

    attempted: int
    new_post_count: int
    failures: list[PollFailureResponse]
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
