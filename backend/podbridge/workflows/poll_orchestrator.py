"""
Poll Orchestrator

Sweeps every distinct feed URL registered system-wide through the
IngestionWorker with bounded concurrency.

One URL's failure never affects another URL or the run as a whole. Failed
URLs are not retried within a run; the next scheduled run picks them up again.
"""
import secrets
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional

from loguru import logger
from sqlalchemy.orm import Session, sessionmaker

from podbridge.config import POLL_MAX_WORKERS, get_poll_cron_secret
from podbridge.enums.ingestion_state import IngestionState
from podbridge.exceptions import AuthorizationError
from podbridge.models import FeedSubscription, utcnow
from podbridge.services.feed_fetcher import FeedFetcher
from podbridge.workflows.ingestion_worker import IngestionResult, IngestionWorker


@dataclass
class PollFailure:
    """A feed URL that failed during a poll run."""
    feed_url: str
    error: str
    error_type: Optional[str] = None


@dataclass
class PollSummary:
    """Aggregate outcome of one poll run."""

    attempted: int = 0
    new_post_count: int = 0
    failures: List[PollFailure] = field(default_factory=list)
    results: List[IngestionResult] = field(default_factory=list)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    def add(self, result: IngestionResult) -> None:
        self.attempted += 1
        self.results.append(result)
        if result.succeeded:
            self.new_post_count += result.new_post_count
        else:
            self.failures.append(PollFailure(
                feed_url=result.feed_url,
                error=result.error or "Unknown error",
                error_type=result.error_type,
            ))


def authorize_poll_trigger(credential: Optional[str], expected: Optional[str]) -> None:
    """
    Check the poll trigger credential.

    Args:
        credential: Bearer credential presented by the caller
        expected: Configured pre-shared secret

    Raises:
        AuthorizationError: Secret unset, credential missing, or mismatch
    """
    if not expected:
        raise AuthorizationError("Poll trigger secret is not configured")
    if not credential or not secrets.compare_digest(credential.encode(), expected.encode()):
        raise AuthorizationError("Invalid poll trigger credential")


class PollOrchestrator:
    """
    Scheduled poll runner.

    Each URL is processed on a pool thread with its own session from the
    injected session factory; the database is the only shared state.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        fetcher: Optional[FeedFetcher] = None,
        max_workers: int = POLL_MAX_WORKERS,
        worker_factory: Optional[Callable[[Session], IngestionWorker]] = None,
    ):
        """
        Args:
            session_factory: Creates one Session per unit of work
            fetcher: Feed fetcher shared by all workers (stateless)
            max_workers: Worker pool size
            worker_factory: Builds the IngestionWorker for a session
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")

        self.session_factory = session_factory
        self.fetcher = fetcher or FeedFetcher()
        self.max_workers = max_workers
        self.worker_factory = worker_factory or (
            lambda session: IngestionWorker(session, fetcher=self.fetcher)
        )

    def list_feed_urls(self) -> List[str]:
        """Distinct feed URLs across all subscriptions, independent of subscriber count."""
        session = self.session_factory()
        try:
            rows = (
                session.query(FeedSubscription.feed_url)
                .distinct()
                .order_by(FeedSubscription.feed_url)
                .all()
            )
            return [row[0] for row in rows]
        finally:
            session.close()

    def trigger(self, credential: Optional[str], expected: Optional[str] = None) -> PollSummary:
        """
        Authorized entry point: check the credential, then run poll_all().

        Args:
            credential: Bearer credential presented by the caller
            expected: Secret to compare against (default: POLL_CRON_SECRET)

        Raises:
            AuthorizationError: Before any work is done
        """
        if expected is None:
            expected = get_poll_cron_secret()
        try:
            authorize_poll_trigger(credential, expected)
        except AuthorizationError as e:
            logger.error(f"[PollOrchestrator] Unauthorized poll trigger: {e}")
            raise
        return self.poll_all()

    def poll_all(self) -> PollSummary:
        """
        Ingest every registered feed URL once.

        Returns:
            PollSummary: attempted count, new post count, per-URL failures
        """
        summary = PollSummary(started_at=utcnow())
        urls = self.list_feed_urls()

        if not urls:
            logger.info("[PollOrchestrator] No feeds to process")
            summary.finished_at = utcnow()
            return summary

        logger.info(f"[PollOrchestrator] Polling {len(urls)} feeds with {self.max_workers} workers")

        results = {}
        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="feed_poll") as executor:
            futures = {executor.submit(self._poll_one, url): url for url in urls}
            for future in as_completed(futures):
                url = futures[future]
                try:
                    results[url] = future.result()
                except Exception as e:
                    # A bug in one URL's processing must not abort the sweep
                    logger.exception(f"[PollOrchestrator] Unexpected error for {url}: {e}")
                    results[url] = IngestionResult(
                        feed_url=url,
                        state=IngestionState.FAILED,
                        states=[IngestionState.FAILED],
                        error=str(e),
                        error_type=type(e).__name__,
                    )

        # Report in enumeration order, not completion order
        for url in urls:
            summary.add(results[url])

        summary.finished_at = utcnow()
        logger.info(
            f"[PollOrchestrator] Polling complete: attempted={summary.attempted}, "
            f"new_posts={summary.new_post_count}, failures={len(summary.failures)}"
        )
        return summary

    def _poll_one(self, url: str) -> IngestionResult:
        session = self.session_factory()
        try:
            return self.worker_factory(session).run(url)
        finally:
            session.close()


__all__ = ["PollOrchestrator", "PollSummary", "PollFailure", "authorize_poll_trigger"]
