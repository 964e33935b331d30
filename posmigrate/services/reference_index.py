"""Reference index: lookups for relationships the source does not encode by id."""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple

from ..extractors.base import BaseExtractor
from ..loaders.base import BaseLoader
from ..models.record import SourceDocument

logger = logging.getLogger(__name__)


class ReferenceIndexError(RuntimeError):
    """The target state needed for relationship resolution could not be read."""


def actor_uid(user: SourceDocument) -> str:
    """Source auth uid of a user document (``uid`` field, else document id)."""
    return str(user.first("uid", default=user.id))


def derive_profile_email(user: SourceDocument, placeholder_domain: str) -> str:
    """Email of a user document, or a placeholder built from its uid."""
    email = user.first("email")
    if email:
        return str(email)
    return f"{actor_uid(user)}@{placeholder_domain}"


@dataclass
class ReferenceIndex:
    """
    Natural-key lookups resolved against the target store.

    Built once before any entity is migrated. During the run it is only
    appended to (newly loaded stores, categories and profiles). Lookups that
    admit several candidates (the fallback store, duplicate category names)
    resolve to the smallest id.
    """
    profiles_by_email: Dict[str, str] = field(default_factory=dict)
    actors: Dict[str, str] = field(default_factory=dict)  # Source uid -> identity id
    categories: Dict[Tuple[str, str], str] = field(default_factory=dict)
    valid_scopes: Set[str] = field(default_factory=set)

    @property
    def fallback_scope(self) -> Optional[str]:
        """Store that orphaned staff are moved to: the smallest valid store id."""
        return min(self.valid_scopes) if self.valid_scopes else None

    def is_valid_scope(self, scope_id: Optional[str]) -> bool:
        return scope_id is not None and scope_id in self.valid_scopes

    def profile_id(self, email: Optional[str]) -> Optional[str]:
        if not email:
            return None
        return self.profiles_by_email.get(email)

    def actor_id(self, uid: Optional[str]) -> Optional[str]:
        if not uid:
            return None
        return self.actors.get(str(uid))

    def category_id(self, scope_id: Optional[str], name: Optional[str]) -> Optional[str]:
        if not scope_id or not name:
            return None
        return self.categories.get((scope_id, str(name)))

    def add_scope(self, scope_id: str) -> None:
        """Register a store that now exists in the target."""
        self.valid_scopes.add(scope_id)

    def add_category(self, scope_id: Optional[str], name: Optional[str], category_id: str) -> None:
        """Register a category for (scope, name) lookups; duplicates keep the smallest id."""
        if not scope_id or not name:
            return
        key = (scope_id, str(name))
        existing = self.categories.get(key)
        if existing is None or category_id < existing:
            self.categories[key] = category_id

    def add_profile(self, email: Optional[str], profile_id: str, uid: Optional[str] = None) -> None:
        """Register a profile by email, and by source uid when known."""
        if email:
            self.profiles_by_email.setdefault(email, profile_id)
        if uid:
            self.actors.setdefault(str(uid), profile_id)

    def summary(self) -> str:
        return (
            f"{len(self.profiles_by_email)} profiles, {len(self.actors)} linked actors, "
            f"{len(self.categories)} categories, {len(self.valid_scopes)} stores"
        )


class ReferenceIndexBuilder:
    """
    Builds the reference index from the target store's current state.

    Relationships resolve against what already exists in the destination,
    so every lookup except the actor links reads the target. Actor links
    join source users to target profiles by email.
    """

    def __init__(
        self,
        loader: BaseLoader,
        extractor: BaseExtractor,
        placeholder_domain: str
    ):
        """
        Initialize the builder.

        Args:
            loader: Target store access
            extractor: Source store access (for the users collection)
            placeholder_domain: Domain of emails derived for users without one
        """
        self.loader = loader
        self.extractor = extractor
        self.placeholder_domain = placeholder_domain

    def build(self) -> ReferenceIndex:
        """
        Build the index.

        Raises:
            ReferenceIndexError: If any of the reads fails
        """
        logger.info("Fetching existing target data for linking...")

        try:
            profiles = self.loader.fetch_all("profiles", "id,email")
            categories = self.loader.fetch_all("categories", "id,name,store_id")
            stores = self.loader.fetch_all("stores", "id")
            users = self.extractor.fetch("users")
        except Exception as e:
            raise ReferenceIndexError(f"Failed to build reference index: {e}") from e

        index = ReferenceIndex()

        for profile in profiles:
            index.add_profile(profile.get("email"), profile["id"])

        self._link_actors(index, users)

        for category in categories:
            index.add_category(category.get("store_id"), category.get("name"), category["id"])

        self._add_scopes(index, stores)

        logger.info(f"Reference index ready: {index.summary()}")
        return index

    def _link_actors(self, index: ReferenceIndex, users: Iterable[SourceDocument]) -> None:
        """Map source uids to existing profiles sharing the same email."""
        for user in users:
            profile_id = index.profile_id(derive_profile_email(user, self.placeholder_domain))
            if profile_id:
                index.actors.setdefault(actor_uid(user), profile_id)
        logger.info(f"Mapped {len(index.actors)} profiles for linking")

    def _add_scopes(self, index: ReferenceIndex, stores: List[dict]) -> None:
        for store in stores:
            index.add_scope(store["id"])
        if index.fallback_scope is None:
            logger.warning("No stores found in target; orphans cannot be rehomed until a store is loaded")
        else:
            logger.info(f"Using store {index.fallback_scope} as fallback scope for orphans")
