"""
Posts API Routes

Post authoring with federation fan-out, and federation status.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from podbridge.api.dependencies import get_current_user_id
from podbridge.database import get_db
from podbridge.models import Post
from podbridge.schemas.post import (
    PostCreate,
    PostCreateResponse,
    FederationStatusResponse,
    FederationTargetResponse,
)
from podbridge.services.federation_service import FederationDispatcher
from podbridge.services.post_service import PostService
from podbridge.services.show_service import ShowService


router = APIRouter()


@router.post("/posts", response_model=PostCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    data: PostCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Author a post on a show

    The post lands on the canonical show and a pending federation target is
    created for each selected connected account.
    """
    if ShowService(db).get_show(data.show_slug) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Show not found: {data.show_slug}",
        )

    post, targets = PostService(db).create_post(
        user_id,
        data.show_slug,
        data.content,
        author_name=data.author_name,
        author_avatar=data.author_avatar,
        target_account_ids=data.target_account_ids,
    )

    response = PostCreateResponse.model_validate(post)
    response.federation_targets = [FederationTargetResponse.model_validate(t) for t in targets]
    return response


@router.get("/posts/{post_id}/federation-status", response_model=FederationStatusResponse)
async def get_federation_status(post_id: int, db: Session = Depends(get_db)):
    """Pending / published / failed counts of a post's federation targets"""
    if db.get(Post, post_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Post not found: id={post_id}",
        )
    return FederationStatusResponse.model_validate(FederationDispatcher(db).summary(post_id))
