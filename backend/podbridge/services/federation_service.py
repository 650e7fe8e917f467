"""
Federation Dispatcher

Fans a local post out to connected external accounts and tracks the
delivery state of each target independently.

1. dispatch() - create one pending FederationTarget per distinct account
2. resolve() - apply the single legal terminal transition of one target
3. summary() - per-post counts by status, plus the target rows

Publishing itself happens elsewhere (see FederationPublishRunner).
"""
from dataclasses import dataclass, field
from typing import Iterable, List

from loguru import logger
from sqlalchemy.orm import Session

from podbridge.enums.federation_status import FederationStatus
from podbridge.exceptions import AlreadyTerminal
from podbridge.models import ConnectedAccount, FederationTarget, Post, utcnow
from podbridge.services.publishers.base import PublishOutcome


@dataclass
class FederationSummary:
    """Federation state of one post."""
    post_id: int
    pending: int = 0
    published: int = 0
    failed: int = 0
    targets: List[FederationTarget] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.pending + self.published + self.failed


class FederationDispatcher:
    """
    Federation fan-out service.

    Each target is an independent unit: one target's outcome never changes
    another's. Transitions are pending -> published and pending -> failed,
    applied with a conditional update so a terminal row is never rewritten.
    """

    def __init__(self, db: Session):
        """
        Args:
            db: Database session
        """
        self.db = db

    def dispatch(self, post_id: int, account_ids: Iterable[int], commit: bool = True) -> List[FederationTarget]:
        """
        Create pending targets for a post.

        Repeated account IDs produce a single target, and an account the post
        already targets keeps its existing row. No external call is made.

        Args:
            post_id: Post ID
            account_ids: Connected account IDs to fan out to
            commit: Commit the new targets; False only flushes them so the
                caller can commit them together with its own writes

        Returns:
            List[FederationTarget]: Targets in request order

        Raises:
            ValueError: Post or account not found
        """
        post = self.db.get(Post, post_id)
        if not post:
            raise ValueError(f"Post not found: id={post_id}")

        distinct_ids = list(dict.fromkeys(account_ids))
        if not distinct_ids:
            return []

        found = {
            row[0]
            for row in self.db.query(ConnectedAccount.id)
            .filter(ConnectedAccount.id.in_(distinct_ids))
            .all()
        }
        missing = [account_id for account_id in distinct_ids if account_id not in found]
        if missing:
            raise ValueError(f"Connected account not found: ids={missing}")

        existing = {
            target.account_id: target
            for target in self.db.query(FederationTarget)
            .filter(FederationTarget.post_id == post_id, FederationTarget.account_id.in_(distinct_ids))
            .all()
        }
        created = [
            FederationTarget(
                post_id=post_id,
                account_id=account_id,
                status=FederationStatus.PENDING.value,
            )
            for account_id in distinct_ids
            if account_id not in existing
        ]
        self.db.add_all(created)
        if commit:
            self.db.commit()
        else:
            self.db.flush()

        by_account = {**existing, **{target.account_id: target for target in created}}
        targets = [by_account[account_id] for account_id in distinct_ids]

        logger.info(
            f"[FederationDispatcher] Post {post_id} dispatched to {len(created)} new accounts "
            f"({len(existing)} already targeted)"
        )
        return targets

    def resolve(self, target_id: int, outcome: PublishOutcome) -> FederationTarget:
        """
        Record the terminal outcome of one target.

        Args:
            target_id: FederationTarget ID
            outcome: PublishOutcome.published(...) or PublishOutcome.failed(...)

        Returns:
            FederationTarget: The updated target

        Raises:
            ValueError: Target not found, or outcome is not terminal
            AlreadyTerminal: The target was already published or failed
        """
        if not FederationStatus.PENDING.can_transition_to(outcome.status):
            raise ValueError(f"Outcome status must be terminal, got '{outcome.status.value}'")

        if outcome.status is FederationStatus.PUBLISHED:
            values = {
                FederationTarget.status: FederationStatus.PUBLISHED.value,
                FederationTarget.external_post_id: outcome.external_post_id,
                FederationTarget.external_url: outcome.external_url,
                FederationTarget.published_at: utcnow(),
            }
        else:
            values = {
                FederationTarget.status: FederationStatus.FAILED.value,
                FederationTarget.error_message: outcome.error_message,
            }
        values[FederationTarget.updated_at] = utcnow()

        # Conditional on pending so a concurrent resolution cannot overwrite a terminal row
        updated = (
            self.db.query(FederationTarget)
            .filter(
                FederationTarget.id == target_id,
                FederationTarget.status == FederationStatus.PENDING.value,
            )
            .update(values, synchronize_session="fetch")
        )
        self.db.commit()

        target = self.db.get(FederationTarget, target_id)
        if target is None:
            raise ValueError(f"Federation target not found: id={target_id}")

        if not updated:
            logger.warning(
                f"[FederationDispatcher] Target {target_id} already {target.status}, "
                f"ignoring '{outcome.status.value}' outcome"
            )
            raise AlreadyTerminal(target_id, target.status)

        self.db.refresh(target)
        logger.info(f"[FederationDispatcher] Target {target_id} -> {target.status}")
        return target

    def pending_targets(self, post_id: int | None = None) -> List[FederationTarget]:
        """Targets still waiting for a publish attempt, oldest first."""
        query = self.db.query(FederationTarget).filter(
            FederationTarget.status == FederationStatus.PENDING.value
        )
        if post_id is not None:
            query = query.filter(FederationTarget.post_id == post_id)
        return query.order_by(FederationTarget.id).all()

    def summary(self, post_id: int) -> FederationSummary:
        """
        Count targets of a post by status.

        Raises:
            ValueError: Post not found
        """
        if not self.db.get(Post, post_id):
            raise ValueError(f"Post not found: id={post_id}")

        targets = (
            self.db.query(FederationTarget)
            .filter(FederationTarget.post_id == post_id)
            .order_by(FederationTarget.id)
            .all()
        )

        result = FederationSummary(post_id=post_id, targets=targets)
        for target in targets:
            if target.status == FederationStatus.PUBLISHED.value:
                result.published += 1
            elif target.status == FederationStatus.FAILED.value:
                result.failed += 1
            else:
                result.pending += 1
        return result


__all__ = ["FederationDispatcher", "FederationSummary"]
