"""Deterministic translation of source document ids into target UUIDs."""

import hashlib
import logging
import re
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def is_canonical(value: str) -> bool:
    """Check if a value already has the canonical UUID shape."""
    return bool(UUID_PATTERN.match(value))


def derive_uuid(source_id: str) -> str:
    """
    Derive a UUID-shaped identifier from a source id.

    The MD5 digest of the UTF-8 bytes is regrouped as 8-4-4-4-12. Rows already
    migrated carry ids produced this way, so the digest must not change.
    """
    digest = hashlib.md5(source_id.encode("utf-8")).hexdigest()
    return f"{digest[0:8]}-{digest[8:12]}-{digest[12:16]}-{digest[16:20]}-{digest[20:32]}"


class IdentifierTranslator:
    """
    Maps source-native ids to canonical target ids.

    The mapping is a pure function of the source id; the per-instance cache
    only avoids recomputing digests for ids referenced many times in a run.
    """

    def __init__(self):
        """Initialize the translator with an empty cache."""
        self._cache: Dict[str, str] = {}

    def translate(self, source_id: Any) -> Optional[str]:
        """
        Translate a source id to its canonical identifier.

        Args:
            source_id: Source document id (or a reference to one)

        Returns:
            Canonical UUID string, or None for a missing reference
        """
        if source_id is None:
            return None

        key = str(source_id)
        if not key:
            return None

        cached = self._cache.get(key)
        if cached is not None:
            return cached

        canonical = key if is_canonical(key) else derive_uuid(key)
        self._cache[key] = canonical
        return canonical

    __call__ = translate

    @property
    def cache_size(self) -> int:
        """Number of distinct source ids translated so far."""
        return len(self._cache)
