"""
Feeds API Routes

Manual feed import and subscription management endpoints.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from podbridge.api.dependencies import get_current_user_id, get_feed_fetcher
from podbridge.database import get_db
from podbridge.exceptions import ParseError
from podbridge.schemas.feed import (
    FeedImportRequest,
    OpmlImportRequest,
    FeedImportResponse,
    ImportResultResponse,
    FeedSubscriptionResponse,
)
from podbridge.services.feed_fetcher import FeedFetcher
from podbridge.services.import_service import FeedImportService


router = APIRouter()


@router.post("/feeds/import", response_model=FeedImportResponse)
def import_feeds(
    data: FeedImportRequest,
    user_id: str = Depends(get_current_user_id),
    fetcher: FeedFetcher = Depends(get_feed_fetcher),
    db: Session = Depends(get_db),
):
    """
    Import feed URLs

    Registers each URL for the caller and ingests it immediately.
    Every URL gets its own status: success, skipped or failed.

    - **urls**: Feed URLs
    """
    service = FeedImportService(db, fetcher=fetcher)
    results = service.import_feeds(user_id, data.urls)
    return FeedImportResponse(
        results=[ImportResultResponse.model_validate(r) for r in results]
    )


@router.post("/feeds/import-opml", response_model=FeedImportResponse)
def import_opml(
    data: OpmlImportRequest,
    user_id: str = Depends(get_current_user_id),
    fetcher: FeedFetcher = Depends(get_feed_fetcher),
    db: Session = Depends(get_db),
):
    """
    Import an OPML subscription list

    Every `outline` with type="rss" and an xmlUrl is imported like /feeds/import.
    """
    service = FeedImportService(db, fetcher=fetcher)
    try:
        results = service.import_opml(user_id, data.opml)
    except ParseError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if not results:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No RSS feeds found in OPML document",
        )

    return FeedImportResponse(
        results=[ImportResultResponse.model_validate(r) for r in results]
    )


@router.get("/feeds", response_model=list[FeedSubscriptionResponse])
async def list_feeds(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """List the caller's feed subscriptions"""
    return FeedImportService(db).list_subscriptions(user_id)


@router.delete("/feeds/{subscription_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_feed(
    subscription_id: int,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Remove one of the caller's feed subscriptions (posts already ingested are kept)"""
    if not FeedImportService(db).remove_subscription(user_id, subscription_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Feed subscription {subscription_id} not found",
        )
