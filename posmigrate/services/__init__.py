"""Service layer for the migration engine.

Only the leaf helpers are re-exported here; the context, reference index and
identity provisioner depend on the models package and are imported from
their own modules.
"""

from .identifiers import IdentifierTranslator
from .timestamps import normalize_timestamp
from .fields import first_defined

__all__ = [
    "IdentifierTranslator",
    "normalize_timestamp",
    "first_defined",
]
