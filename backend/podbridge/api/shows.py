"""
Shows API Routes

Canonical-routed show reads, RSS re-export and alias administration.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from podbridge.database import get_db
from podbridge.models import ShowIdentity
from podbridge.schemas.post import PostListResponse, PostResponse
from podbridge.schemas.show import CanonicalUpdate, ShowDetailResponse, ShowResponse
from podbridge.services.rss_export_service import RssExportService
from podbridge.services.show_service import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, ShowService


router = APIRouter()


def _get_show_or_404(service: ShowService, slug: str) -> ShowIdentity:
    show = service.get_show(slug)
    if show is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Show not found: {slug}",
        )
    return show


@router.get("/shows/{slug}", response_model=ShowDetailResponse)
async def get_show(slug: str, db: Session = Depends(get_db)):
    """
    Get a show

    Alias slugs return the canonical show.
    """
    service = ShowService(db)
    show = _get_show_or_404(service, slug)

    response = ShowDetailResponse.model_validate(show)
    response.post_count = service.count_posts(show)
    response.alias_slugs = sorted(alias.slug for alias in show.aliases)
    return response


@router.get("/shows/{slug}/posts", response_model=PostListResponse)
async def list_show_posts(
    slug: str,
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Page size"),
    offset: int = Query(0, ge=0, description="Posts to skip"),
    db: Session = Depends(get_db),
):
    """Newest-first posts of the canonical show, including posts stored under its aliases"""
    service = ShowService(db)
    show = _get_show_or_404(service, slug)

    posts = service.get_posts(show, limit=limit, offset=offset)
    return PostListResponse(
        total=service.count_posts(show),
        limit=limit,
        offset=offset,
        items=[PostResponse.model_validate(p) for p in posts],
    )


@router.get("/shows/{slug}/rss")
async def get_show_rss(slug: str, db: Session = Depends(get_db)):
    """RSS 2.0 feed of the show's newest posts"""
    service = ShowService(db)
    show = _get_show_or_404(service, slug)

    exporter = RssExportService()
    posts = service.get_posts(show, limit=exporter.limit)
    return Response(
        content=exporter.render(show, posts),
        media_type="application/xml; charset=utf-8",
    )


@router.put("/shows/{show_id}/canonical", response_model=ShowResponse)
async def set_canonical(show_id: int, data: CanonicalUpdate, db: Session = Depends(get_db)):
    """
    Make a show an alias of another show, or clear its alias pointer

    Returns 400 when the assignment would create an alias chain or a self-alias.
    """
    if db.get(ShowIdentity, show_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Show not found: id={show_id}",
        )
    return ShowService(db).set_canonical(show_id, data.canonical_id)
