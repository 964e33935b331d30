"""Normalization of heterogeneous source timestamps to ISO-8601."""

import logging
import re
from datetime import date, datetime, timedelta
from typing import Any, Mapping, Optional

from dateutil.tz import tzutc

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=tzutc())
EPOCH_MILLIS_PATTERN = re.compile(r"^\d{10,13}$")

SECONDS_FIELDS = ("_seconds", "seconds")
CONVERSION_METHODS = ("to_datetime", "ToDatetime", "toDate")


def format_iso(value: datetime) -> str:
    """Format a datetime as UTC ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=tzutc())
    value = value.astimezone(tzutc())
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def from_epoch_millis(millis: float) -> str:
    """Convert epoch milliseconds to an ISO-8601 string."""
    return format_iso(EPOCH + timedelta(milliseconds=millis))


def _seconds_field(value: Any) -> Optional[float]:
    """Get a seconds-based field from a mapping or an object."""
    for name in SECONDS_FIELDS:
        if isinstance(value, Mapping):
            seconds = value.get(name)
        else:
            seconds = getattr(value, name, None)
        if isinstance(seconds, (int, float)) and not isinstance(seconds, bool):
            return seconds
    return None


def normalize_timestamp(value: Any) -> Optional[str]:
    """
    Normalize a source timestamp to an ISO-8601 string.

    Dispatches on the shape of the value:
    - None or empty string: None
    - int/float: epoch milliseconds
    - string of 10-13 digits: epoch milliseconds
    - any other string: returned unchanged (assumed date-like)
    - datetime/date: formatted (naive values are taken as UTC)
    - object with a date conversion method: converted, then formatted
    - mapping or object with a seconds field: seconds * 1000, then formatted

    Args:
        value: Raw timestamp value from a source document

    Returns:
        ISO-8601 string, or None when the value is absent or unrecognized
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        return from_epoch_millis(value)

    if isinstance(value, str):
        if not value:
            return None
        if EPOCH_MILLIS_PATTERN.match(value):
            return from_epoch_millis(int(value))
        return value

    if isinstance(value, datetime):
        return format_iso(value)

    if isinstance(value, date):
        return format_iso(datetime(value.year, value.month, value.day))

    for method in CONVERSION_METHODS:
        convert = getattr(value, method, None)
        if callable(convert):
            return normalize_timestamp(convert())

    seconds = _seconds_field(value)
    if seconds is not None:
        return from_epoch_millis(seconds * 1000)

    logger.debug(f"Unrecognized timestamp value: {value!r}")
    return None
