"""Target store writers."""

from .base import BaseLoader
from .postgrest_loader import PostgRESTLoader

__all__ = [
    "BaseLoader",
    "PostgRESTLoader",
]
