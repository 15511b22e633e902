"""CKAN timestamp parsing and formatting.

CKAN writes timestamps like ``1970-01-01T01:00:00.000010``: UTC without a
``Z`` suffix, microsecond precision. Some instances drop the fraction
(``2013-12-17T00:00:00``) or even the seconds, and a few send back the
Python string ``"None"`` instead of a JSON null.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Optional

from ckan_catalog.errors import ParseError

CKAN_TIMESTAMP_PATTERN = "%Y-%m-%dT%H:%M:%S.%f"
CKAN_NO_MILLISECS_PATTERN = "%Y-%m-%dT%H:%M:%S"
NONE = "None"

_TIMESTAMP_RE = re.compile(
    r"^(?P<year>\d{4})-(?P<month>\d{1,2})-(?P<day>\d{1,2})[T ]"
    r"(?P<hour>\d{1,2}):(?P<minute>\d{2})"
    r"(?::(?P<second>\d{2})(?:\.(?P<fraction>\d{1,6}))?)?$"
)


def parse_timestamp(text: Optional[str]) -> datetime:
    """Parse a CKAN timestamp into a naive UTC ``datetime``.

    Raises ``ParseError`` for null, empty, ``"None"`` or malformed input.
    See ``format_timestamp`` for the inverse.
    """
    if text is None:
        raise ParseError("Found null timestamp!")
    if text == NONE:
        raise ParseError("Found timestamp with 'None' inside!")
    value = text.strip()
    if not value:
        raise ParseError("Found empty timestamp!")
    match = _TIMESTAMP_RE.match(value)
    if match is None:
        raise ParseError(f"Invalid CKAN timestamp: {text!r}")
    fraction = match.group("fraction") or ""
    try:
        return datetime(
            int(match.group("year")),
            int(match.group("month")),
            int(match.group("day")),
            int(match.group("hour")),
            int(match.group("minute")),
            int(match.group("second") or 0),
            int(fraction.ljust(6, "0")) if fraction else 0,
        )
    except ValueError as exc:
        raise ParseError(f"Invalid CKAN timestamp: {text!r}") from exc


def format_timestamp(timestamp: Optional[datetime]) -> str:
    """Format a ``datetime`` as CKAN does, always with six fractional digits."""
    if timestamp is None:
        raise ParseError("Found null timestamp!")
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone(timezone.utc).replace(tzinfo=None)
    return timestamp.isoformat(timespec="microseconds")
