"""Provisioning of target auth identities for source auth users."""

import logging
import secrets
from datetime import datetime, timezone
from typing import Any, Dict, Union

from .identifiers import IdentifierTranslator
from ..extractors.base import BaseExtractor, IDENTITY_COLLECTION
from ..loaders.base import BaseLoader
from ..models.migration import EntityTally, MigrationConfig
from ..models.record import RecordOutcome, SourceDocument, Skip

logger = logging.getLogger(__name__)

ALREADY_REGISTERED_MARKERS = ("already been registered", "already registered")


class IdentityMigrator:
    """
    Creates one target identity per source auth user.

    The identity id is the canonical translation of the source uid, so the
    profiles migrated afterwards and every cashier reference land on the same
    id. Users that already exist in the target count as succeeded, which
    makes the step safe to repeat.
    """

    def __init__(self, config: MigrationConfig, extractor: BaseExtractor, loader: BaseLoader):
        self.config = config
        self.extractor = extractor
        self.loader = loader
        self.translator = IdentifierTranslator()

    def run(self) -> EntityTally:
        """
        Provision identities for every source auth user.

        Returns:
            Tally of the identity step

        Raises:
            Exception: If the source auth users cannot be listed
        """
        tally = EntityTally(entity=IDENTITY_COLLECTION, table="auth.users")
        tally.started_at = datetime.now(timezone.utc)

        users = self.extractor.fetch_identities()
        tally.fetched = len(users)
        logger.info(f"Provisioning {len(users)} identities...")

        for user in users:
            tally.attempted += 1
            payload = self.build_payload(user)

            if isinstance(payload, Skip):
                tally.record(RecordOutcome.SKIPPED, user.id, payload.reason)
                logger.info(f"Skipping identity {user.id}: {payload.reason}")
                continue

            result = self.loader.create_identity(payload)
            if result.success:
                tally.record(RecordOutcome.SUCCEEDED, user.id)
            elif self._is_already_registered(result.error):
                tally.record(RecordOutcome.SUCCEEDED, user.id)
                logger.debug(f"Identity {payload['email']} already exists")
            else:
                tally.record(RecordOutcome.ERRORED, user.id, result.error or "unknown error")
                logger.error(f"Error creating identity {payload['email']}: {result.error}")

        tally.completed_at = datetime.now(timezone.utc)
        logger.info(tally.summary_line())
        return tally

    def build_payload(self, user: SourceDocument) -> Union[Dict[str, Any], Skip]:
        """Build the identity creation payload for a source auth user."""
        email = user.first("email")
        if not email:
            return Skip("no email")

        uid = user.first("uid", default=user.id)
        return {
            "id": self.translator.translate(uid),
            "email": str(email),
            "password": self.config.temporary_password or secrets.token_urlsafe(16),
            "email_confirm": True,
            "user_metadata": {
                "name": user.first("displayName", "name", default=""),
                "source_uid": str(uid),
            },
        }

    @staticmethod
    def _is_already_registered(error: Any) -> bool:
        if not error:
            return False
        message = str(error).lower()
        return any(marker in message for marker in ALREADY_REGISTERED_MARKERS)
