"""Projection of raw upstream records into normalized version rows.

Each row keeps its passthrough fields and gains ``version``,
``full-version``, ``hash`` and ``date``. Nothing is filtered here apart
from records without a usable version.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import Any, Iterable, List, Optional

from vbump.constants import Constants
from .models import Row, Spec
from .schema import RowSchema, get_in

_FRACTION_RE = re.compile(r"([T ]\d{2}:\d{2}:\d{2})\.(\d+)")


def parse_date(value: Any) -> Optional[datetime]:
    """Coerce a date-ish value into an aware UTC ``datetime``.

    Accepts datetimes (naive ones are taken as UTC), epoch seconds, ISO-8601
    strings (with or without ``Z``) and the ``YYYYmmdd_HHMMSS`` voom format.
    Returns None for anything else.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.isdigit():
        return datetime.fromtimestamp(int(text), tz=timezone.utc)
    try:
        return datetime.strptime(text, Constants.VOOM_DATE_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        pass
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    # fromisoformat on 3.10 only takes 3 or 6 fraction digits
    text = _FRACTION_RE.sub(lambda m: f"{m.group(1)}.{m.group(2)[:6].ljust(6, '0')}", text)
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def full_version(vspec: Spec, schema: RowSchema, version: str) -> str:
    """Display string: repository id, delimiter and version (bare version without a delimiter)."""
    if schema.ver_delim is None:
        return version
    return f"{vspec.get(schema.spec_name_field, '')}{schema.ver_delim}{version}"


def normalize_rows(vspec: Spec, schema: RowSchema, rows: Iterable[Row]) -> List[Row]:
    """Add the normalized envelope to every record that has a version."""
    normalized = []
    for row in rows:
        version = row.get(schema.version_field)
        if version is None or version == "":
            continue
        version = str(version)
        normalized.append({
            **row,
            "version": version,
            "full-version": full_version(vspec, schema, version),
            "hash": get_in(row, schema.hash_field),
            "date": parse_date(row.get(schema.date_field)),
        })
    return normalized
