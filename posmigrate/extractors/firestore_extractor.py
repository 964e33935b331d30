"""Firestore data extractor using the Firebase Admin SDK."""

import logging
from typing import Any, List, Optional

import firebase_admin
from firebase_admin import auth, credentials, firestore

from .base import BaseExtractor, IDENTITY_COLLECTION
from ..models.record import SourceDocument

logger = logging.getLogger(__name__)


class FirestoreExtractor(BaseExtractor):
    """
    Extractor for Firestore collections and Firebase Auth users.

    Uses a dedicated named Firebase app so that the migration never clashes
    with a default app initialized elsewhere in the process. Access is
    read-only: collections are streamed whole, users are listed page by page.
    """

    APP_NAME = "posmigrate-source"

    def __init__(
        self,
        credentials_path: Optional[str] = None,
        project_id: Optional[str] = None,
        client: Optional[Any] = None,
        app: Optional[Any] = None
    ):
        """
        Initialize the Firestore extractor.

        Args:
            credentials_path: Service account JSON file; application default
                credentials are used when omitted
            project_id: Firebase project id override
            client: Pre-built Firestore client
            app: Pre-built Firebase app
        """
        super().__init__()
        self.credentials_path = credentials_path
        self.project_id = project_id
        self._client = client
        self._app = app

    def _get_app(self):
        """Get or initialize the Firebase app."""
        if self._app is not None:
            return self._app

        try:
            self._app = firebase_admin.get_app(self.APP_NAME)
        except ValueError:
            if self.credentials_path:
                cred = credentials.Certificate(self.credentials_path)
            else:
                cred = credentials.ApplicationDefault()
            options = {"projectId": self.project_id} if self.project_id else None
            self._app = firebase_admin.initialize_app(cred, options, name=self.APP_NAME)
            logger.info(f"Initialized Firebase app for project {self.project_id or '(from credentials)'}")

        return self._app

    @property
    def client(self):
        """Firestore client bound to the migration app."""
        if self._client is None:
            self._client = firestore.client(app=self._get_app())
        return self._client

    def fetch(self, collection: str) -> List[SourceDocument]:
        """Stream every document of a collection."""
        documents = []

        for snapshot in self.client.collection(collection).stream():
            documents.append(self.create_document(snapshot.id, collection, snapshot.to_dict()))

        logger.info(f"Fetched {len(documents)} {collection} documents from Firestore")
        return documents

    def fetch_identities(self) -> List[SourceDocument]:
        """List every Firebase Auth user."""
        documents = []

        for user in auth.list_users(app=self._get_app()).iterate_all():
            documents.append(self.create_document(user.uid, IDENTITY_COLLECTION, {
                "uid": user.uid,
                "email": user.email,
                "displayName": user.display_name,
                "disabled": user.disabled,
            }))

        logger.info(f"Fetched {len(documents)} users from Firebase Auth")
        return documents
