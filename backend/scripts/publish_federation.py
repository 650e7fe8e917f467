#!/usr/bin/env python3
"""
Federation Publish Script

Drives pending federation targets through the platform publishers given on
the command line and prints the results. Targets on platforms without a
publisher stay pending for a later run.

Usage:
    python scripts/publish_federation.py --publisher PLATFORM=module:attribute [--post-id ID]

Examples:
    python scripts/publish_federation.py --publisher mastodon=mypkg.mastodon:MastodonPublisher
    python scripts/publish_federation.py --publisher mastodon=mypkg.mastodon:build --post-id 42
"""
import argparse
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from rich.console import Console

from podbridge.config import configure_logging
from podbridge.database import get_session
from podbridge.enums.federation_status import FederationStatus
from podbridge.services.publishers.base import MultiPlatformPublisher, load_publisher
from podbridge.workflows.federation_runner import FederationPublishRunner


def build_publisher(entries) -> MultiPlatformPublisher:
    """Build a MultiPlatformPublisher from PLATFORM=module:attribute entries."""
    publisher = MultiPlatformPublisher()
    for entry in entries:
        platform, _, path = entry.partition("=")
        if not platform or not path:
            raise ValueError(f"Expected PLATFORM=module:attribute, got '{entry}'")
        publisher.register(platform, load_publisher(path))
    return publisher


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(
        description="Publish pending federation targets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/publish_federation.py --publisher mastodon=mypkg.mastodon:MastodonPublisher
  python scripts/publish_federation.py --publisher bluesky=mypkg.bsky:build --post-id 42
        """
    )
    parser.add_argument("--publisher", action="append", required=True, metavar="PLATFORM=module:attribute",
                        help="Publisher for one platform (repeatable)")
    parser.add_argument("--post-id", type=int, default=None, help="Only publish this post's targets")
    parser.add_argument("--log-level", default=None, help="Override logging.level")

    args = parser.parse_args()

    configure_logging(args.log_level)
    console = Console()

    try:
        publisher = build_publisher(args.publisher)
    except (ValueError, TypeError, ImportError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 2

    console.print("[bold cyan]PodBridge - federation publish[/bold cyan]")
    console.print(f"[dim]Platforms: {', '.join(publisher.platforms)}[/dim]")

    with get_session() as db:
        runner = FederationPublishRunner(db, publisher, console)
        resolved = runner.publish_pending(args.post_id, platforms=publisher.platforms)
        failed = sum(1 for target in resolved if target.status == FederationStatus.FAILED.value)

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
