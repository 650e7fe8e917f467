"""
Feed Schemas

Pydantic models for feed import and subscription API request/response validation.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from podbridge.enums.import_status import ImportStatus

MAX_IMPORT_URLS = 200


class FeedImportRequest(BaseModel):
    """Import feed URLs request"""

    urls: list[str] = Field(..., description="Feed URLs", max_length=MAX_IMPORT_URLS)

    @field_validator("urls")
    @classmethod
    def validate_urls(cls, v: list[str]) -> list[str]:
        """At least one non-blank URL"""
        if not any(url and url.strip() for url in v):
            raise ValueError("At least one feed URL is required")
        return v


class OpmlImportRequest(BaseModel):
    """Import OPML subscription list request"""

    opml: str = Field(..., description="OPML document", min_length=1)


class ImportResultResponse(BaseModel):
    """Per-URL import outcome"""

    url: str
    status: ImportStatus
    title: Optional[str] = None
    message: Optional[str] = None
    new_post_count: int = 0

    model_config = {"from_attributes": True}


class FeedImportResponse(BaseModel):
    """Import response"""

    results: list[ImportResultResponse]


class FeedSubscriptionResponse(BaseModel):
    """Feed subscription response"""

    id: int
    feed_url: str
    title: str
    image_url: Optional[str]
    last_fetched_at: Optional[datetime]
    last_attempted_at: Optional[datetime]
    last_error: Optional[str]
    created_at: datetime

    model_config = {"from_attributes": True}
