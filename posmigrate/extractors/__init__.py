"""Source store readers."""

from .base import BaseExtractor
from .firestore_extractor import FirestoreExtractor
from .json_extractor import JSONExportExtractor

__all__ = [
    "BaseExtractor",
    "FirestoreExtractor",
    "JSONExportExtractor",
]
