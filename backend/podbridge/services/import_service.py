"""
Feed Import Service

Manual feed import for one caller:
1. import_feeds() - register URLs and ingest them immediately
2. import_opml() - same, from an OPML subscription list
3. list_subscriptions() / remove_subscription() - manage registrations

Each URL gets its own outcome (success / skipped / failed); one URL's failure
never affects the others in the same request.
"""
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional
from urllib.parse import urlparse

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from podbridge.enums.import_status import ImportStatus
from podbridge.models import FeedSubscription
from podbridge.services.feed_fetcher import FeedFetcher
from podbridge.utils.opml_utils import parse_opml
from podbridge.utils.title_utils import sanitize_title
from podbridge.workflows.ingestion_worker import IngestionWorker


@dataclass
class ImportResult:
    """Outcome of importing one feed URL."""
    url: str
    status: ImportStatus
    title: Optional[str] = None
    message: Optional[str] = None
    new_post_count: int = 0


def _is_http_url(url: str) -> bool:
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class FeedImportService:
    """
    Manual import service.

    A new registration is created before ingestion so the worker attributes
    the ingested posts to the caller; if that first ingestion fails, the
    registration is removed again and the URL is reported failed.
    """

    def __init__(self, db: Session, fetcher: Optional[FeedFetcher] = None):
        """
        Args:
            db: Database session
            fetcher: Feed fetcher handed to the ingestion worker
        """
        self.db = db
        self.fetcher = fetcher or FeedFetcher()

    def _worker(self) -> IngestionWorker:
        return IngestionWorker(self.db, fetcher=self.fetcher)

    def get_subscription(self, user_id: str, feed_url: str) -> Optional[FeedSubscription]:
        return (
            self.db.query(FeedSubscription)
            .filter(FeedSubscription.user_id == user_id, FeedSubscription.feed_url == feed_url)
            .first()
        )

    def import_feeds(
        self,
        user_id: str,
        urls: Iterable[str],
        titles: Optional[Dict[str, str]] = None,
    ) -> List[ImportResult]:
        """
        Import feed URLs for a user.

        Blank entries are ignored; a URL repeated within the request is
        reported skipped after its first occurrence.

        Args:
            user_id: Caller identity
            urls: Feed URLs in request order
            titles: Optional provisional titles keyed by URL (e.g. from OPML)

        Returns:
            List[ImportResult]: One result per non-blank URL, in request order
        """
        titles = titles or {}
        results = []
        seen = set()

        for raw_url in urls:
            url = (raw_url or "").strip()
            if not url:
                continue

            if url in seen:
                results.append(ImportResult(
                    url=url,
                    status=ImportStatus.SKIPPED,
                    message="Duplicate URL in request",
                ))
                continue
            seen.add(url)

            if not _is_http_url(url):
                results.append(ImportResult(
                    url=url,
                    status=ImportStatus.FAILED,
                    message="Invalid feed URL",
                ))
                continue

            try:
                results.append(self._import_one(user_id, url, titles.get(url)))
            except Exception as e:
                # One URL's unexpected error must not discard the other results
                self.db.rollback()
                logger.exception(f"[FeedImportService] Unexpected error importing {url}: {e}")
                results.append(ImportResult(
                    url=url,
                    status=ImportStatus.FAILED,
                    message=f"Import failed: {e}",
                ))

        imported = sum(1 for r in results if r.status is ImportStatus.SUCCESS)
        logger.info(f"[FeedImportService] User {user_id}: {imported}/{len(results)} feeds imported")
        return results

    def import_opml(self, user_id: str, opml: str) -> List[ImportResult]:
        """
        Import every RSS outline of an OPML document.

        Raises:
            ParseError: The document is not well-formed XML
        """
        feeds = parse_opml(opml)
        return self.import_feeds(
            user_id,
            [feed.url for feed in feeds],
            titles={feed.url: feed.title for feed in feeds},
        )

    def _import_one(self, user_id: str, url: str, title: Optional[str]) -> ImportResult:
        existing = self.get_subscription(user_id, url)
        if existing:
            return self._refresh_existing(existing)

        subscription = FeedSubscription(
            user_id=user_id,
            feed_url=url,
            title=sanitize_title(title) or url[:255],
        )
        self.db.add(subscription)
        try:
            self.db.commit()
        except IntegrityError:
            # Registered by a concurrent request from the same caller
            self.db.rollback()
            existing = self.get_subscription(user_id, url)
            if existing is None:
                raise
            return self._refresh_existing(existing)

        try:
            result = self._worker().run(url)
        except Exception:
            self.db.rollback()
            self._discard(subscription)
            raise

        if not result.succeeded:
            self._discard(subscription)
            return ImportResult(
                url=url,
                status=ImportStatus.FAILED,
                message=result.error,
            )

        return ImportResult(
            url=url,
            status=ImportStatus.SUCCESS,
            title=result.feed_title,
            new_post_count=result.new_post_count,
        )

    def _discard(self, subscription: FeedSubscription) -> None:
        """Remove a registration whose first ingestion did not succeed."""
        self.db.delete(subscription)
        self.db.commit()

    def _refresh_existing(self, subscription: FeedSubscription) -> ImportResult:
        """The caller already tracks the URL: refresh it, report skipped."""
        result = self._worker().run(subscription.feed_url)
        self.db.refresh(subscription)
        return ImportResult(
            url=subscription.feed_url,
            status=ImportStatus.SKIPPED,
            title=subscription.title,
            message="Feed already imported",
            new_post_count=result.new_post_count,
        )

    def list_subscriptions(self, user_id: str) -> List[FeedSubscription]:
        return (
            self.db.query(FeedSubscription)
            .filter(FeedSubscription.user_id == user_id)
            .order_by(FeedSubscription.created_at, FeedSubscription.id)
            .all()
        )

    def remove_subscription(self, user_id: str, subscription_id: int) -> bool:
        """
        Remove one of the caller's registrations.

        Posts already ingested from the feed are kept.

        Returns:
            bool: False if the caller has no such registration
        """
        subscription = self.db.get(FeedSubscription, subscription_id)
        if not subscription or subscription.user_id != user_id:
            return False

        self.db.delete(subscription)
        self.db.commit()
        logger.info(f"[FeedImportService] User {user_id} removed subscription {subscription_id}")
        return True


__all__ = ["FeedImportService", "ImportResult"]
