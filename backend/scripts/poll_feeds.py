#!/usr/bin/env python3
"""
Scheduled Poll Script

Runs one poll sweep over every registered feed URL and prints a summary.
Meant to be called by cron or any other scheduler.

This is a local operator tool: it calls PollOrchestrator.poll_all() directly
and does not go through the POLL_CRON_SECRET check. Remote triggers must use
the POST /api/v1/poll endpoint, which does.

Usage:
    python scripts/poll_feeds.py [--workers N] [--log-level LEVEL]

Exit code is 0 even when some feeds failed; failed feeds are retried on the
next run.
"""
import argparse
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from podbridge.config import POLL_MAX_WORKERS, configure_logging
from podbridge.database import create_tables, get_session_factory
from podbridge.workflows.poll_orchestrator import PollOrchestrator, PollSummary


def display_summary(console: Console, summary: PollSummary) -> None:
    """Display poll results"""
    table = Table(show_header=True, box=None)
    table.add_column("Feed", style="cyan", overflow="fold")
    table.add_column("Show")
    table.add_column("New", justify="right")
    table.add_column("Status", style="bold")

    for result in summary.results:
        if result.succeeded:
            status = "[green]done[/green]"
        else:
            status = f"[red]{result.error_type}[/red]"
        table.add_row(
            result.feed_url,
            result.show_slug or "-",
            str(result.new_post_count),
            status,
        )

    title = (
        f"Polled {summary.attempted} feeds: {summary.new_post_count} new posts, "
        f"{len(summary.failures)} failures"
    )
    console.print(Panel(table, title=title, border_style="cyan"))

    for failure in summary.failures:
        console.print(f"  [red]x[/red] {failure.feed_url}: {failure.error}")


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(description="Poll every registered feed once")
    parser.add_argument("--workers", type=int, default=POLL_MAX_WORKERS, help="Worker pool size")
    parser.add_argument("--log-level", default=None, help="Override logging.level")
    args = parser.parse_args()

    configure_logging(args.log_level)
    console = Console()

    create_tables()
    orchestrator = PollOrchestrator(get_session_factory(), max_workers=args.workers)

    console.print("[bold cyan]PodBridge - feed poll[/bold cyan]")
    summary = orchestrator.poll_all()
    display_summary(console, summary)


if __name__ == "__main__":
    main()
