"""
Show Resolver

Resolves free-text show titles to ShowIdentity records and follows alias
pointers to canonical identities.

Alias depth is capped at one hop, so canonicalization never walks a chain.
"""
from typing import List, Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from podbridge.exceptions import AliasError, ResolutionError
from podbridge.models import ShowIdentity
from podbridge.utils.title_utils import derive_slug, sanitize_title

DEFAULT_SHOW_NAME = "Untitled Show"

# First attempt plus one retry after a write conflict
UPSERT_ATTEMPTS = 2


class ShowResolver:
    """
    Show identity resolution service.

    Responsibilities:
    1. Slug upsert: title -> ShowIdentity (created on first encounter)
    2. Canonicalization: alias -> canonical identity (at most one hop)
    3. Alias administration with write-time invariant checks
    """

    def __init__(self, db: Session):
        """
        Args:
            db: Database session
        """
        self.db = db

    def get_by_slug(self, slug: str) -> Optional[ShowIdentity]:
        return self.db.query(ShowIdentity).filter(ShowIdentity.slug == slug).first()

    def resolve(self, title: Optional[str], category: Optional[str] = None) -> ShowIdentity:
        """
        Upsert a ShowIdentity keyed by the slug derived from `title`.

        An existing identity is returned unchanged. A new identity gets the
        cleaned title as display name and no canonical pointer. Aliases are
        never created here.

        Args:
            title: Show title (free text)
            category: Category for newly created identities

        Returns:
            ShowIdentity: Existing or newly created identity

        Raises:
            ResolutionError: Insert conflicted again after one fresh read
        """
        slug = derive_slug(title)
        name = sanitize_title(title) or DEFAULT_SHOW_NAME

        for attempt in range(UPSERT_ATTEMPTS):
            existing = self.get_by_slug(slug)
            if existing:
                return existing

            identity = ShowIdentity(slug=slug, name=name, category=category)
            self.db.add(identity)
            try:
                self.db.commit()
            except IntegrityError as e:
                # Another writer created the slug between our read and insert
                self.db.rollback()
                logger.warning(
                    f"[ShowResolver] Slug conflict for '{slug}' "
                    f"(attempt {attempt + 1}/{UPSERT_ATTEMPTS}): {e.orig}"
                )
                continue

            self.db.refresh(identity)
            logger.info(f"[ShowResolver] Created show identity: id={identity.id}, slug='{slug}'")
            return identity

        raise ResolutionError(f"Could not upsert show identity for slug '{slug}'")

    def canonicalize(self, identity: ShowIdentity) -> ShowIdentity:
        """
        Return the canonical identity for `identity`.

        Args:
            identity: Any identity (alias or canonical)

        Returns:
            ShowIdentity: The canonical target if a pointer is set, else `identity`
        """
        if not identity.is_alias:
            return identity

        canonical = self.db.get(ShowIdentity, identity.canonical_id)
        return canonical or identity

    def resolve_slug(self, slug: str) -> Optional[ShowIdentity]:
        """
        Look up a slug and route it to its canonical identity.

        Returns:
            ShowIdentity or None if the slug is unknown
        """
        identity = self.get_by_slug(slug)
        if identity is None:
            return None
        return self.canonicalize(identity)

    def get_alias_ids(self, identity: ShowIdentity) -> List[int]:
        """IDs of identities whose canonical pointer targets `identity`."""
        rows = (
            self.db.query(ShowIdentity.id)
            .filter(ShowIdentity.canonical_id == identity.id)
            .all()
        )
        return [row[0] for row in rows]

    def set_canonical(self, identity_id: int, canonical_id: Optional[int]) -> ShowIdentity:
        """
        Make `identity_id` an alias of `canonical_id`, or clear its pointer.

        Rejected assignments (AliasError):
        - an identity pointing at itself
        - a target that is itself an alias (would create a chain)
        - an identity that other identities already point at (would create a chain)

        Args:
            identity_id: Identity to update
            canonical_id: Canonical target, or None to make the identity canonical

        Returns:
            ShowIdentity: Updated identity

        Raises:
            ValueError: Identity or target not found
            AliasError: Assignment would break the single-hop invariant
        """
        identity = self.db.get(ShowIdentity, identity_id)
        if not identity:
            raise ValueError(f"Show identity not found: id={identity_id}")

        if canonical_id is None:
            identity.canonical_id = None
            self.db.commit()
            self.db.refresh(identity)
            logger.info(f"[ShowResolver] Cleared alias pointer of '{identity.slug}'")
            return identity

        if canonical_id == identity_id:
            raise AliasError(f"Show '{identity.slug}' cannot be an alias of itself")

        canonical = self.db.get(ShowIdentity, canonical_id)
        if not canonical:
            raise ValueError(f"Show identity not found: id={canonical_id}")

        if canonical.is_alias:
            raise AliasError(
                f"Show '{canonical.slug}' is itself an alias and cannot be a canonical target"
            )

        if self.get_alias_ids(identity):
            raise AliasError(
                f"Show '{identity.slug}' has aliases pointing to it and cannot become an alias"
            )

        identity.canonical_id = canonical.id
        self.db.commit()
        self.db.refresh(identity)

        logger.info(f"[ShowResolver] '{identity.slug}' is now an alias of '{canonical.slug}'")
        return identity


__all__ = ["ShowResolver", "DEFAULT_SHOW_NAME"]
