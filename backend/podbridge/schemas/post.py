"""
Post Schemas

Pydantic models for post authoring and federation status.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class PostCreate(BaseModel):
    """Create post request"""

    show_slug: str = Field(..., description="Show slug (alias slugs route to the canonical show)", min_length=1)
    content: str = Field(..., description="Post text", min_length=1)
    author_name: Optional[str] = Field(None, description="Author label")
    author_avatar: Optional[str] = Field(None, description="Author avatar URL")
    target_account_ids: list[int] = Field(default_factory=list, description="Connected accounts to fan out to")


class PostResponse(BaseModel):
    """Post response"""

    id: int
    show_id: int
    user_id: Optional[str]
    content: str
    author_name: str
    author_avatar: Optional[str]
    external_guid: Optional[str]
    external_url: Optional[str]
    image_url: Optional[str]
    created_at: datetime

    model_config = {"from_attributes": True}


class PostListResponse(BaseModel):
    """Post page response"""

    total: int
    limit: int
    offset: int
    items: list[PostResponse]


class FederationTargetResponse(BaseModel):
    """Federation target response"""

    id: int
    account_id: int
    status: str
    external_post_id: Optional[str]
    external_url: Optional[str]
    error_message: Optional[str]
    published_at: Optional[datetime]

    model_config = {"from_attributes": True}


class PostCreateResponse(PostResponse):
    """Created post with its federation targets"""

    federation_targets: list[FederationTargetResponse] = []


class FederationStatusResponse(BaseModel):
    """Federation summary of one post"""

    post_id: int
    total: int
    pending: int
    published: int
    failed: int
    targets: list[FederationTargetResponse]

    model_config = {"from_attributes": True}
