"""
API Schemas Package

Pydantic models for API request/response validation.
"""

# Feed Schemas
from podbridge.schemas.feed import (
    FeedImportRequest,
    OpmlImportRequest,
    ImportResultResponse,
    FeedImportResponse,
    FeedSubscriptionResponse,
)

# Poll Schemas
from podbridge.schemas.poll import (
    PollFailureResponse,
    PollSummaryResponse,
)

# Show Schemas
from podbridge.schemas.show import (
    ShowResponse,
    ShowDetailResponse,
    CanonicalUpdate,
)

# Post Schemas
from podbridge.schemas.post import (
    PostCreate,
    PostResponse,
    PostListResponse,
    PostCreateResponse,
    FederationTargetResponse,
    FederationStatusResponse,
)

__all__ = [
    "FeedImportRequest",
    "OpmlImportRequest",
    "ImportResultResponse",
    "FeedImportResponse",
    "FeedSubscriptionResponse",
    "PollFailureResponse",
    "PollSummaryResponse",
    "ShowResponse",
    "ShowDetailResponse",
    "CanonicalUpdate",
    "PostCreate",
    "PostResponse",
    "PostListResponse",
    "PostCreateResponse",
    "FederationTargetResponse",
    "FederationStatusResponse",
]
