"""Matching, filtering and selection of version rows for one spec.

Row selection for a spec, in fixed order:

1. keep rows whose name field equals the spec's repository identifier;
2. group rows by alias ``hash`` and store every version of the group on
   each member as ``all-versions``;
3. sort by ``date`` ascending;
4. apply each configured predicate: ``version``, ``version-start``,
   ``version-regex``, ``alt-version``, ``alt-version-start``,
   ``alt-version-regex``, ``exclude-latest``, ``date``/``date-before``,
   ``date-after``, ``creators``.

Predicates without a configured value are skipped. The last remaining row
is the current version.
"""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from vbump.constants import Constants
from vbump.common.logging_utils import extra_context, is_debug_enabled
from .enrich import source_kind_of
from .errors import ConfigurationError
from .models import ResolutionResult, Row, Spec
from .rows import normalize_rows, parse_date
from .schema import RowSchema, get_row_schema

logger = logging.getLogger(__name__)

Predicate = Callable[[Row], bool]

_MIN_DATE = datetime.min.replace(tzinfo=timezone.utc)


def _present(value) -> bool:
    return value is not None and value != "" and value != []


def _compile(vname: str, key: str, pattern) -> "re.Pattern[str]":
    try:
        return re.compile(str(pattern))
    except re.error as exc:
        raise ConfigurationError(vname, f"{vname}: invalid {key} {pattern!r}: {exc}") from exc


def _bound(vname: str, key: str, value) -> datetime:
    """Parse a date bound; bare numbers are rejected rather than read as epoch seconds."""
    if (isinstance(value, (int, float)) and not isinstance(value, bool)) or str(value).strip().isdigit():
        raise ConfigurationError(vname, f"{vname}: invalid {key} {value!r}, expected an ISO date")
    parsed = parse_date(value)
    if parsed is None:
        raise ConfigurationError(vname, f"{vname}: invalid {key} {value!r}")
    return parsed


def group_aliases(rows: Sequence[Row]) -> List[Row]:
    """Attach ``all-versions`` (versions sharing the row's hash) to each row.

    Rows without a hash form a group of their own.
    """
    by_hash: Dict[object, List[str]] = defaultdict(list)
    for row in rows:
        if row.get("hash") is not None:
            by_hash[row["hash"]].append(row["version"])
    grouped = []
    for row in rows:
        if row.get("hash") is None:
            all_versions = [row["version"]]
        else:
            all_versions = list(by_hash[row["hash"]])
        grouped.append({**row, "all-versions": all_versions})
    return grouped


def sort_rows(rows: Sequence[Row]) -> List[Row]:
    """Sort by ``date`` ascending; undated rows sort first, ties keep input order."""
    return sorted(rows, key=lambda r: (r.get("date") is not None, r.get("date") or _MIN_DATE))


def build_predicates(vspec: Spec, schema: RowSchema) -> List[Tuple[str, Predicate]]:
    """Return the configured predicates in their fixed application order."""
    vname = vspec.get("var-name", "")
    preds: List[Tuple[str, Predicate]] = []

    version = vspec.get("version")
    if _present(version):
        preds.append(("version", lambda r, v=str(version): r["version"] == v))

    version_start = vspec.get("version-start")
    if _present(version_start):
        preds.append(("version-start", lambda r, v=str(version_start): r["version"].startswith(v)))

    version_regex = vspec.get("version-regex")
    if _present(version_regex):
        ver_re = _compile(vname, "version-regex", version_regex)
        preds.append(("version-regex", lambda r: ver_re.search(r["version"]) is not None))

    alt_version = vspec.get("alt-version")
    if _present(alt_version):
        preds.append(("alt-version", lambda r, v=str(alt_version): v in r["all-versions"]))

    alt_start = vspec.get("alt-version-start")
    if _present(alt_start):
        preds.append((
            "alt-version-start",
            lambda r, v=str(alt_start): any(a.startswith(v) for a in r["all-versions"]),
        ))

    alt_regex = vspec.get("alt-version-regex")
    if _present(alt_regex):
        alt_re = _compile(vname, "alt-version-regex", alt_regex)
        preds.append((
            "alt-version-regex",
            lambda r: any(alt_re.search(a) for a in r["all-versions"]),
        ))

    if vspec.get("exclude-latest"):
        preds.append(("exclude-latest", lambda r: r["version"] != Constants.LATEST_TAG))

    for key in ("date", "date-before"):
        if _present(vspec.get(key)):
            before = _bound(vname, key, vspec[key])
            preds.append((key, lambda r, b=before: r["date"] is not None and r["date"] <= b))

    if _present(vspec.get("date-after")):
        after = _bound(vname, "date-after", vspec["date-after"])
        preds.append(("date-after", lambda r, a=after: r["date"] is not None and r["date"] >= a))

    creators = vspec.get("creators")
    if isinstance(creators, str):
        creators = [creators]
    if schema.creator_field and creators:
        allowed = {str(c) for c in creators}
        field = schema.creator_field
        preds.append(("creators", lambda r: r.get(field) in allowed))

    return preds


def filter_rows(vspec: Spec, schema: RowSchema, rows: Sequence[Row]) -> List[Row]:
    """Filter normalized rows for one spec and return them sorted by date."""
    vname = vspec.get(schema.spec_name_field)
    if vname is not None:
        rows = [r for r in rows if r.get(schema.name_field) == vname]
    rows = sort_rows(group_aliases(rows))
    for key, pred in build_predicates(vspec, schema):
        rows = [r for r in rows if pred(r)]
        if is_debug_enabled(logger):
            logger.debug(
                "Applied predicate",
                extra=extra_context(
                    event="filter",
                    component="select",
                    action=key,
                    target=vspec.get("var-name"),
                    count=len(rows),
                ),
            )
    return rows


def default_rows(vspec: Spec, schema: RowSchema) -> List[Row]:
    """Single synthetic row built from ``version-default``; never filtered."""
    vname = vspec.get(schema.spec_name_field)
    row = {schema.name_field: vname, schema.version_field: vspec["version-default"]}
    return normalize_rows(vspec, schema, [row])


def resolve_versions_1(
    vspec: Spec, rows: Optional[Sequence[Row]], query_failed: bool = False
) -> ResolutionResult:
    """Resolve one enriched spec against its queried rows.

    Args:
        vspec: Enriched spec (has ``var-name`` and ``source-kind``).
        rows: Raw upstream records for the spec's query, or None if it was
            not queried.
        query_failed: The query was attempted and failed (non-strict runs).

    Returns:
        ResolutionResult with candidate rows sorted by date; empty when
        nothing matched and no ``version-default`` is set.

    Raises:
        ConfigurationError: No rows are available and there is no
            ``version-default`` to fall back to.
    """
    name = vspec.get("var-name", "")
    kind = source_kind_of(vspec)
    if kind is None:
        raise ConfigurationError(name, f"{name} has no source kind (type {vspec.get('type')!r})")
    schema = get_row_schema(kind)
    has_default = _present(vspec.get("version-default"))

    if not rows:
        if has_default:
            logger.debug("%s: using version-default %s", name, vspec["version-default"])
            return ResolutionResult(name, vspec, default_rows(vspec, schema))
        if query_failed:
            return ResolutionResult(name, vspec, [])
        raise ConfigurationError(name, f"{name} must have queryable {kind.value} versions or a version-default")

    candidates = filter_rows(vspec, schema, normalize_rows(vspec, schema, rows))
    if not candidates and has_default:
        logger.debug("%s: no matching versions, using version-default", name)
        candidates = default_rows(vspec, schema)
    return ResolutionResult(name, vspec, candidates)
