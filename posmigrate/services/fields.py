"""Field resolution helpers for loosely-typed source documents.

Source documents carry the same logical attribute under several names
(``storeId`` / ``store_id``, ``sellPrice`` / ``sell_price`` / ``price``).
Every mapper resolves such attributes through an explicit, ordered chain so
that the behaviour for a missing field can be read off the mapper itself.
"""

from typing import Any, Dict, List, Mapping, Optional


def first_defined(data: Mapping[str, Any], *names: str, default: Any = None) -> Any:
    """
    Return the value of the first name present in ``data``.

    A name counts as present when its key exists and its value is not None.
    Falsy values such as ``0``, ``""`` or ``False`` are returned as-is.

    Args:
        data: Source document fields
        *names: Field names in order of preference (canonical first)
        default: Value returned when no name is present

    Returns:
        The resolved value or ``default``
    """
    for name in names:
        value = data.get(name)
        if value is not None:
            return value
    return default


def as_number(value: Any, default: float = 0) -> float:
    """
    Coerce a source value to a number.

    ``None`` and blank strings give ``default``. Non-numeric strings raise
    ValueError; the record is then reported as errored by the orchestrator.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    text = str(value).strip()
    if not text:
        return default
    try:
        return int(text)
    except ValueError:
        return float(text)


def as_bool(value: Any, default: bool = False) -> bool:
    """Coerce a source flag to a boolean."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "y")
    return bool(value)


def as_text(value: Any, default: Optional[str] = None) -> Optional[str]:
    """Coerce a scalar source value to a stripped string, or ``default``."""
    if value is None:
        return default
    text = str(value).strip()
    return text if text else default


def as_ref(value: Any) -> Optional[str]:
    """
    Coerce a reference to an entity that keeps its source id as primary key.

    The value is passed through verbatim (no stripping) so that it matches
    the referenced row's key; only None and "" count as missing.
    """
    if value is None:
        return None
    text = str(value)
    return text if text else None


def as_list(value: Any) -> List[Any]:
    """Coerce a source value to a list (maps become their values)."""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, dict):
        return list(value.values())
    return [value]


def as_dict(value: Any) -> Dict[str, Any]:
    """Coerce a source value to a dict."""
    if isinstance(value, dict):
        return value
    return {}
