"""
Post authoring service

Creates a user-authored post on a show and fans it out to the author's
connected accounts. Federation target creation is part of authorship.
"""
from typing import Iterable, Optional, Tuple, List

from loguru import logger
from sqlalchemy.orm import Session

from podbridge.models import ConnectedAccount, FederationTarget, Post
from podbridge.services.federation_service import FederationDispatcher
from podbridge.services.show_resolver import ShowResolver


class PostService:
    """Post authoring."""

    def __init__(self, db: Session):
        self.db = db
        self.resolver = ShowResolver(db)
        self.dispatcher = FederationDispatcher(db)

    def create_post(
        self,
        user_id: str,
        show_slug: str,
        content: str,
        author_name: Optional[str] = None,
        author_avatar: Optional[str] = None,
        target_account_ids: Iterable[int] = (),
    ) -> Tuple[Post, List[FederationTarget]]:
        """
        Author a post on the canonical show behind `show_slug`.

        The post text is prefixed with the show tag, matching ingested posts.

        Args:
            user_id: Author
            show_slug: Slug of the show (alias slugs route to the canonical show)
            content: Post text
            author_name: Author label (defaults to user_id)
            author_avatar: Author avatar URL
            target_account_ids: Connected accounts to fan out to

        Returns:
            Tuple[Post, List[FederationTarget]]

        Raises:
            ValueError: Unknown show, empty content, or an account that is not
                one of the author's active connected accounts
        """
        text = (content or "").strip()
        if not text:
            raise ValueError("Post content must not be empty")

        account_ids = list(dict.fromkeys(target_account_ids))
        self._check_accounts(user_id, account_ids)

        show = self.resolver.resolve_slug(show_slug)
        if show is None:
            raise ValueError(f"Show not found: slug='{show_slug}'")

        tag = f"#{show.slug}"
        if not text.startswith(tag):
            text = f"{tag} {text}"

        post = Post(
            show_id=show.id,
            user_id=user_id,
            content=text,
            author_name=author_name or user_id,
            author_avatar=author_avatar,
        )
        self.db.add(post)
        try:
            self.db.flush()
            targets = self.dispatcher.dispatch(post.id, account_ids, commit=False)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(post)

        logger.info(
            f"[PostService] User {user_id} posted {post.id} to '{show.slug}' "
            f"with {len(targets)} federation targets"
        )
        return post, targets

    def _check_accounts(self, user_id: str, account_ids: List[int]) -> None:
        if not account_ids:
            return
        owned = {
            row[0]
            for row in self.db.query(ConnectedAccount.id)
            .filter(
                ConnectedAccount.id.in_(account_ids),
                ConnectedAccount.user_id == user_id,
                ConnectedAccount.is_active.is_(True),
            )
            .all()
        }
        invalid = [account_id for account_id in account_ids if account_id not in owned]
        if invalid:
            raise ValueError(f"Not an active connected account of {user_id}: ids={invalid}")


__all__ = ["PostService"]
