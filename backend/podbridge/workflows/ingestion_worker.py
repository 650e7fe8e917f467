"""
Ingestion Worker

Drives one feed URL through fetch -> resolve -> dedupe -> persist.

Shared by the manual import path and the poll orchestrator; the worker does
not know which caller invoked it. Ingestion errors never escape run(): they
end the run in the FAILED state and are reported in the IngestionResult.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from podbridge.config import INGESTION_CATEGORY
from podbridge.enums.ingestion_state import IngestionState
from podbridge.exceptions import IngestionError, PersistenceError, ResolutionError
from podbridge.models import FeedSubscription, Post, ShowIdentity, utcnow
from podbridge.services.dedup_gate import DeduplicationGate
from podbridge.services.feed_fetcher import FeedFetcher, ParsedEntry, ParsedFeed
from podbridge.services.show_resolver import ShowResolver
from podbridge.utils.title_utils import sanitize_title

# Stored error details are cut to keep the tracking row small
MAX_ERROR_LENGTH = 1000


@dataclass
class IngestionResult:
    """Outcome of one worker run over one feed URL."""

    feed_url: str
    state: IngestionState = IngestionState.FETCHING
    states: List[IngestionState] = field(default_factory=list)
    feed_title: Optional[str] = None
    show_id: Optional[int] = None
    show_slug: Optional[str] = None
    new_post_count: int = 0
    skipped_count: int = 0
    error: Optional[str] = None
    error_type: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.state is IngestionState.DONE


class IngestionWorker:
    """
    Ingestion state machine for a single feed URL.

    States: FETCHING -> RESOLVING -> DEDUPLICATING -> PERSISTING -> DONE,
    with FAILED reachable from any of them.
    """

    def __init__(
        self,
        db: Session,
        fetcher: Optional[FeedFetcher] = None,
        resolver: Optional[ShowResolver] = None,
        dedup_gate: Optional[DeduplicationGate] = None,
        category: str = INGESTION_CATEGORY,
    ):
        """
        Args:
            db: Database session owned by this worker for the run
            fetcher: Feed fetcher (default FeedFetcher())
            resolver: Show resolver (default bound to `db`)
            dedup_gate: Deduplication gate (default bound to `db`)
            category: Category assigned to newly created shows
        """
        self.db = db
        self.fetcher = fetcher or FeedFetcher()
        self.resolver = resolver or ShowResolver(db)
        self.dedup_gate = dedup_gate or DeduplicationGate(db)
        self.category = category

    def run(self, feed_url: str) -> IngestionResult:
        """
        Ingest one feed URL.

        Args:
            feed_url: Feed URL

        Returns:
            IngestionResult: DONE with counts, or FAILED with the error
        """
        result = IngestionResult(feed_url=feed_url)

        try:
            self._enter(result, IngestionState.FETCHING)
            feed = self.fetcher.fetch(feed_url)
            result.feed_title = feed.title

            self._advance(result)
            show = self._resolve_show(feed)
            result.show_id = show.id
            result.show_slug = show.slug
            self._refresh_subscriptions(feed_url, feed)

            self._advance(result)
            alias_ids = self.resolver.get_alias_ids(show)
            new_entries = self.dedup_gate.filter_new(show.id, feed.entries, alias_ids)

            self._advance(result)
            user_id = self._attributed_user_id(feed_url)
            inserted, skipped = self._persist_entries(show, feed, new_entries, user_id, alias_ids)
            result.new_post_count = inserted
            result.skipped_count = skipped

            self._mark_fetched(feed_url)
            self._advance(result)

        except IngestionError as e:
            return self._fail(result, e)
        except SQLAlchemyError as e:
            # Reads outside the wrapped write steps (dedup set, attribution)
            return self._fail(result, PersistenceError(f"Database error for {feed_url}: {e}"))

        logger.info(
            f"[IngestionWorker] {feed_url} done: show='{result.show_slug}', "
            f"new={result.new_post_count}, skipped={result.skipped_count}"
        )
        return result

    # ========================================================================
    # Steps
    # ========================================================================

    def _enter(self, result: IngestionResult, state: IngestionState) -> None:
        result.state = state
        result.states.append(state)

    def _advance(self, result: IngestionResult) -> None:
        self._enter(result, result.state.get_next_state())

    def _fail(self, result: IngestionResult, error: IngestionError) -> IngestionResult:
        self.db.rollback()
        result.error = str(error)
        result.error_type = type(error).__name__
        logger.warning(
            f"[IngestionWorker] {result.feed_url} failed while {result.state.value}: "
            f"{result.error_type}: {error}"
        )
        self._enter(result, IngestionState.FAILED)
        self._mark_attempt_failed(result.feed_url, result.error)
        return result

    def _resolve_show(self, feed: ParsedFeed) -> ShowIdentity:
        """Resolve the feed title to the canonical identity that owns its posts."""
        try:
            identity = self.resolver.resolve(feed.title, category=self.category)
            return self.resolver.canonicalize(identity)
        except SQLAlchemyError as e:
            raise ResolutionError(f"Show resolution failed for '{feed.title}': {e}") from e

    def _refresh_subscriptions(self, feed_url: str, feed: ParsedFeed) -> None:
        """Copy feed title and artwork onto registrations never fetched successfully."""
        try:
            updated = (
                self.db.query(FeedSubscription)
                .filter(
                    FeedSubscription.feed_url == feed_url,
                    FeedSubscription.last_fetched_at.is_(None),
                )
                .update(
                    {
                        FeedSubscription.title: sanitize_title(feed.title),
                        FeedSubscription.image_url: feed.image_url,
                    }
                )
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(f"Subscription refresh failed for {feed_url}: {e}") from e

        if updated:
            logger.debug(f"[IngestionWorker] Refreshed title of {updated} subscriptions for {feed_url}")

    def _attributed_user_id(self, feed_url: str) -> Optional[str]:
        """Ingested posts are attributed to the earliest registrant of the URL."""
        row = (
            self.db.query(FeedSubscription.user_id)
            .filter(FeedSubscription.feed_url == feed_url)
            .order_by(FeedSubscription.created_at, FeedSubscription.id)
            .first()
        )
        return row[0] if row else None

    def _build_posts(
        self,
        show: ShowIdentity,
        feed: ParsedFeed,
        entries: Sequence[ParsedEntry],
        user_id: Optional[str],
        ingested_at: datetime,
    ) -> List[Post]:
        posts = []
        for entry in entries:
            content = f"#{show.slug} {entry.title}"
            if entry.summary:
                content = f"{content}\n\n{entry.summary}"

            posts.append(Post(
                show_id=show.id,
                user_id=user_id,
                content=content,
                author_name=sanitize_title(entry.author or feed.title),
                external_guid=entry.guid,
                external_url=entry.link,
                image_url=entry.image_url or feed.image_url,
                created_at=entry.published_at or ingested_at,
            ))
        return posts

    def _persist_entries(
        self,
        show: ShowIdentity,
        feed: ParsedFeed,
        entries: Sequence[ParsedEntry],
        user_id: Optional[str],
        alias_ids: Sequence[int] = (),
    ) -> Tuple[int, int]:
        """
        Insert new entries in feed order.

        The batch is inserted in one transaction. If a concurrent worker won a
        race on some dedup keys, the batch is replayed row by row and the
        conflicting rows are counted as skipped.

        Returns:
            Tuple[int, int]: (inserted, skipped)
        """
        if not entries:
            return 0, 0

        ingested_at = utcnow()

        try:
            self.db.add_all(self._build_posts(show, feed, entries, user_id, ingested_at))
            self.db.commit()
            return len(entries), 0
        except IntegrityError:
            self.db.rollback()
            logger.info(
                f"[IngestionWorker] Dedup-key conflict for show '{show.slug}', "
                f"replaying {len(entries)} entries one by one"
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(f"Post insert failed for show '{show.slug}': {e}") from e

        return self._persist_row_by_row(show, feed, entries, user_id, ingested_at, alias_ids)

    def _persist_row_by_row(
        self,
        show: ShowIdentity,
        feed: ParsedFeed,
        entries: Sequence[ParsedEntry],
        user_id: Optional[str],
        ingested_at: datetime,
        alias_ids: Sequence[int] = (),
    ) -> Tuple[int, int]:
        inserted = 0
        skipped = 0

        for post in self._build_posts(show, feed, entries, user_id, ingested_at):
            guid = post.external_guid
            self.db.add(post)
            try:
                self.db.commit()
                inserted += 1
            except IntegrityError as e:
                self.db.rollback()
                if not self._guid_exists([show.id, *alias_ids], guid):
                    raise PersistenceError(
                        f"Post insert failed for show '{show.slug}' (guid={guid}): {e.orig}"
                    ) from e
                skipped += 1
            except SQLAlchemyError as e:
                self.db.rollback()
                raise PersistenceError(f"Post insert failed for show '{show.slug}': {e}") from e

        return inserted, skipped

    def _guid_exists(self, show_ids: Sequence[int], guid: str) -> bool:
        return (
            self.db.query(Post.id)
            .filter(Post.show_id.in_(show_ids), Post.external_guid == guid)
            .first()
            is not None
        )

    def _mark_fetched(self, feed_url: str) -> None:
        """Advance last_fetched_at on every registration of the URL."""
        now = utcnow()
        try:
            self.db.query(FeedSubscription).filter(
                FeedSubscription.feed_url == feed_url
            ).update(
                {
                    FeedSubscription.last_fetched_at: now,
                    FeedSubscription.last_attempted_at: now,
                    FeedSubscription.last_error: None,
                }
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(f"Could not update fetch tracking for {feed_url}: {e}") from e

    def _mark_attempt_failed(self, feed_url: str, error: str) -> None:
        """Record a failed attempt; last_fetched_at stays where it was."""
        try:
            self.db.query(FeedSubscription).filter(
                FeedSubscription.feed_url == feed_url
            ).update(
                {
                    FeedSubscription.last_attempted_at: utcnow(),
                    FeedSubscription.last_error: error[:MAX_ERROR_LENGTH],
                }
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"[IngestionWorker] Could not record failed attempt for {feed_url}: {e}")


__all__ = ["IngestionWorker", "IngestionResult"]
