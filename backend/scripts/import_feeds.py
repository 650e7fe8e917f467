#!/usr/bin/env python3
"""
Feed Import Script

Imports feed URLs, or an OPML subscription list, for one user.

Usage:
    python scripts/import_feeds.py --user-id USER URL [URL ...]
    python scripts/import_feeds.py --user-id USER --opml subscriptions.opml
"""
import argparse
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from rich.console import Console
from rich.table import Table

from podbridge.config import configure_logging
from podbridge.database import create_tables, get_session
from podbridge.enums.import_status import ImportStatus
from podbridge.exceptions import ParseError
from podbridge.services.import_service import FeedImportService

STATUS_STYLES = {
    ImportStatus.SUCCESS: "green",
    ImportStatus.SKIPPED: "yellow",
    ImportStatus.FAILED: "red",
}


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(
        description="Import feeds for a user",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/import_feeds.py --user-id alice https://example.com/feed.xml
  python scripts/import_feeds.py --user-id alice --opml subscriptions.opml
""",
    )
    parser.add_argument("urls", nargs="*", help="Feed URLs")
    parser.add_argument("--user-id", required=True, help="User the subscriptions belong to")
    parser.add_argument("--opml", metavar="FILE", help="OPML file to import")
    args = parser.parse_args()

    if not args.urls and not args.opml:
        parser.error("provide feed URLs or --opml FILE")

    configure_logging()
    console = Console()
    create_tables()

    with get_session() as db:
        service = FeedImportService(db)
        results = []
        if args.opml:
            try:
                opml = Path(args.opml).read_text(encoding="utf-8")
                results.extend(service.import_opml(args.user_id, opml))
            except (OSError, ParseError) as e:
                console.print(f"[red]Could not read OPML file: {e}[/red]")
                sys.exit(1)
        if args.urls:
            results.extend(service.import_feeds(args.user_id, args.urls))

    table = Table(show_header=True, box=None)
    table.add_column("URL", style="cyan", overflow="fold")
    table.add_column("Status", style="bold")
    table.add_column("Title")
    table.add_column("New", justify="right")
    table.add_column("Message")

    for result in results:
        style = STATUS_STYLES[result.status]
        table.add_row(
            result.url,
            f"[{style}]{result.status.value}[/{style}]",
            result.title or "",
            str(result.new_post_count),
            result.message or "",
        )
    console.print(table)

    if any(r.status is ImportStatus.FAILED for r in results):
        sys.exit(1)


if __name__ == "__main__":
    main()
