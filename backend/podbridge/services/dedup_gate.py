"""
Deduplication Gate

Decides which parsed feed entries have not been ingested yet for a show.

Read-then-filter only: the gate never writes. The (show_id, external_guid)
unique constraint on posts is what keeps concurrent ingestion correct.

A canonical show owns the posts stored under its aliases too, so lookups
cover the show and every alias ID passed alongside it.
"""
from typing import Iterable, List, Sequence, Set

from sqlalchemy.orm import Session

from podbridge.models import Post
from podbridge.services.feed_fetcher import ParsedEntry


class DeduplicationGate:
    """Filters parsed entries against the external identifiers already recorded."""

    def __init__(self, db: Session):
        self.db = db

    def existing_guids(self, show_id: int, alias_ids: Iterable[int] = ()) -> Set[str]:
        """
        Read the external identifiers already recorded for a show.

        Args:
            show_id: ShowIdentity ID
            alias_ids: IDs of identities aliased to the show

        Returns:
            Set[str]: Non-null external_guid values
        """
        show_ids = [show_id, *alias_ids]
        rows = (
            self.db.query(Post.external_guid)
            .filter(Post.show_id.in_(show_ids), Post.external_guid.is_not(None))
            .all()
        )
        return {row[0] for row in rows}

    def filter_new(
        self,
        show_id: int,
        entries: Sequence[ParsedEntry],
        alias_ids: Iterable[int] = (),
    ) -> List[ParsedEntry]:
        """
        Return entries whose identifier is not yet recorded for the show.

        Feed order is preserved. An entry without an identifier is never new.
        When a feed repeats an identifier, only its first occurrence is kept.

        Args:
            show_id: ShowIdentity ID
            entries: Parsed entries in feed order
            alias_ids: IDs of identities aliased to the show

        Returns:
            List[ParsedEntry]: New entries in feed order
        """
        existing = self.existing_guids(show_id, alias_ids)

        new_entries = []
        seen = set()
        for entry in entries:
            if not entry.guid or entry.guid in existing or entry.guid in seen:
                continue
            seen.add(entry.guid)
            new_entries.append(entry)

        return new_entries


__all__ = ["DeduplicationGate"]
