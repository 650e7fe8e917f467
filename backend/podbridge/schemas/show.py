"""
Show Schemas

Pydantic models for show read and alias administration endpoints.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ShowResponse(BaseModel):
    """Show identity response"""

    id: int
    slug: str
    name: str
    category: Optional[str]
    canonical_id: Optional[int]
    created_at: datetime

    model_config = {"from_attributes": True}


class ShowDetailResponse(ShowResponse):
    """Show with post statistics"""

    post_count: int = 0
    alias_slugs: list[str] = []


class CanonicalUpdate(BaseModel):
    """Set or clear an alias pointer"""

    canonical_id: Optional[int] = Field(None, description="Canonical show ID; null makes the show canonical")
