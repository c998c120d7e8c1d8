"""Shared utility functions for date parsing and narrative text cleanup."""

from __future__ import annotations

import re
from datetime import date, datetime, timezone

_TAG_RE = re.compile(r"<.*?>", re.DOTALL)

# "2025", "2025-06", "2025-06-30" and anything with a trailing time we could not parse
_PARTIAL_ISO_RE = re.compile(r"(\d{4})(?:-(\d{1,2})(?:-(\d{1,2}))?)?")
# US style "06/30/2025"
_US_DATE_RE = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})")


def is_blank(value) -> bool:
    """True for None, non-strings and whitespace-only strings."""
    return not isinstance(value, str) or not value.strip()


def _parse_raw(dt_str) -> datetime | None:
    if is_blank(dt_str):
        return None
    s = dt_str.strip()

    try:
        return datetime.fromisoformat(s)
    except ValueError:
        pass

    m = _US_DATE_RE.match(s)
    if m:
        month, day, year = (int(g) for g in m.groups())
    else:
        m = _PARTIAL_ISO_RE.match(s)
        if not m:
            return None
        year = int(m.group(1))
        month = int(m.group(2) or 1)
        day = int(m.group(3) or 1)

    try:
        return datetime(year, month, day)
    except ValueError:
        return None


def parse_fhir_datetime(dt_str) -> datetime | None:
    """Permissively parse a FHIR dateTime into an aware UTC datetime.

    Accepts full ISO 8601 timestamps (with or without offset, "Z" included),
    partial dates ("2025", "2025-06"), and MM/DD/YYYY. Naive values are taken
    as UTC. Returns None for empty or unparseable input, and for offset
    timestamps whose UTC instant falls outside the datetime range.
    """
    dt = _parse_raw(dt_str)
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    try:
        return dt.astimezone(timezone.utc)
    except (OverflowError, ValueError):
        return None


def parse_fhir_date(dt_str) -> date | None:
    """Parse a FHIR date (e.g. birthDate) into a calendar date.

    The calendar date is taken as written; offsets are not applied.
    """
    dt = _parse_raw(dt_str)
    return dt.date() if dt else None


def strip_tags(html: str) -> str:
    """Remove markup tags from narrative XHTML, best effort.

    Every ``<...>`` run is replaced by a space and the result trimmed. This is
    not an HTML parser: malformed markup passes through as text, and the
    function never raises.
    """
    if not html:
        return ""
    return _TAG_RE.sub(" ", html).strip()
