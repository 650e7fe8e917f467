"""
Federation Publish Runner

Drives pending federation targets through a Publisher and records each
outcome with the FederationDispatcher. Targets are resolved one at a time
and independently; a publisher exception fails only its own target.
"""
from typing import Iterable, List, Optional

from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from sqlalchemy.orm import Session

from podbridge.enums.federation_status import FederationStatus
from podbridge.exceptions import AlreadyTerminal
from podbridge.models import FederationTarget
from podbridge.services.federation_service import FederationDispatcher
from podbridge.services.publishers.base import PublishOutcome, Publisher


class FederationPublishRunner:
    """
    Publish workflow for pending federation targets.

    Handles:
    1. Collecting pending targets (optionally for a single post)
    2. Calling the publisher for each target
    3. Resolving each target to published or failed
    """

    def __init__(self, db: Session, publisher: Publisher, console: Optional[Console] = None):
        """
        Args:
            db: Database session
            publisher: Publisher performing the external calls
            console: Rich Console for output
        """
        self.db = db
        self.publisher = publisher
        self.console = console or Console()
        self.dispatcher = FederationDispatcher(db)

    def publish_pending(
        self,
        post_id: Optional[int] = None,
        platforms: Optional[Iterable[str]] = None,
    ) -> List[FederationTarget]:
        """
        Publish every pending target.

        Args:
            post_id: Restrict to one post's targets
            platforms: Restrict to accounts on these platforms; targets on
                other platforms stay pending

        Returns:
            List[FederationTarget]: Targets resolved by this run
        """
        pending = self.dispatcher.pending_targets(post_id)
        if platforms is not None:
            allowed = set(platforms)
            pending = [t for t in pending if t.account.platform in allowed]
        if not pending:
            self.console.print("[dim]No pending federation targets[/dim]")
            return []

        self.console.print(f"[cyan]Publishing {len(pending)} federation targets...[/cyan]")

        resolved = []
        for target in pending:
            outcome = self._attempt(target)
            try:
                resolved.append(self.dispatcher.resolve(target.id, outcome))
            except AlreadyTerminal:
                # Resolved concurrently by another runner; its outcome stands
                continue

        self._display_results(resolved)
        return resolved

    def _attempt(self, target: FederationTarget) -> PublishOutcome:
        try:
            return self.publisher.publish(target.post, target.account)
        except Exception as e:
            logger.warning(
                f"[FederationPublishRunner] Publish failed for target {target.id} "
                f"({target.account.platform}): {e}"
            )
            return PublishOutcome.failed(str(e))

    def _display_results(self, targets: List[FederationTarget]):
        """Display summary of publish results"""
        table = Table(show_header=True, box=None)
        table.add_column("Target", style="cyan")
        table.add_column("Platform")
        table.add_column("Status", style="bold")
        table.add_column("Detail")

        for target in targets:
            status = FederationStatus(target.status)
            status_style = "green" if status is FederationStatus.PUBLISHED else "red"
            detail = target.external_url or target.error_message or ""
            table.add_row(
                str(target.id),
                target.account.platform,
                f"[{status_style}]{status.label}[/{status_style}]",
                detail[:60],
            )

        panel = Panel(table, title="Federation Results", border_style="cyan")
        self.console.print(panel)


__all__ = ["FederationPublishRunner"]
