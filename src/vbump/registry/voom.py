"""Git-log derived ("voom") versions for a set of paths.

A voom version is ``YYYYmmdd_HHMMSS-g<sha>`` built from the UTC commit time
and 12 character abbreviated hash of the last commit touching the paths. If
the paths have uncommitted changes, an extra row stamped with the current
time and the dirty suffix appended to the sha/version is added last.

If none of the paths appear in the history an error is raised; if only
some of them do, the others are ignored.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence

import aiohttp

from vbump.constants import Constants
from vbump.versioning.errors import UpstreamQueryError
from vbump.versioning.models import ResolveConfig, Row, SourceKind, Spec
from .command import run_command

logger = logging.getLogger(__name__)

LOG_FORMAT = "--pretty=format:%h,%aE,%cE,%cI"


def canonicalize(path: str, root_dir: str) -> str:
    """Join paths starting with ``.`` or ``/`` under ``root_dir``."""
    if path[:1] in (".", "/"):
        return f"{root_dir}/{path}"
    return path


def format_date(when: datetime) -> str:
    return when.astimezone(timezone.utc).strftime(Constants.VOOM_DATE_FORMAT)


def parse_log(logs: str, paths: Sequence[str]) -> List[Row]:
    """Rows for ``git log`` lines, newest first as git prints them."""
    versions = []
    for line in logs.splitlines():
        if not line.strip():
            continue
        sha, author, _committer, commit_date = line.split(",", 3)
        date_str = format_date(datetime.fromisoformat(commit_date.strip()))
        versions.append({
            "paths": list(paths),
            "date-str": date_str,
            "sha": sha,
            "author": author,
            "voom-version": f"{date_str}-g{sha}",
        })
    return versions


def voom_rows(
    logs: str,
    status: str,
    paths: Sequence[str],
    dirty_suffix: str = Constants.DIRTY_SUFFIX,
    now: Optional[datetime] = None,
) -> List[Row]:
    """Build oldest-first voom rows, plus a dirty row when ``status`` is non-empty."""
    versions = parse_log(logs, paths)
    if not versions:
        raise UpstreamQueryError(SourceKind.VOOM.value, ", ".join(paths), f"No logs found for: {', '.join(paths)}")
    if status.strip():
        current = versions[0]
        versions.insert(0, {
            **current,
            "date-str": format_date(now or datetime.now(timezone.utc)),
            "sha": current["sha"] + dirty_suffix,
            "voom-version": current["voom-version"] + dirty_suffix,
        })
    return list(reversed(versions))


async def voom_versions_data(
    paths: Sequence[str],
    dirty_suffix: str = Constants.DIRTY_SUFFIX,
    all_versions: bool = False,
) -> List[Row]:
    """Query git for the voom rows of ``paths``."""
    repository = ", ".join(paths)
    kind = SourceKind.VOOM.value
    log_args = ["git", "log"] + ([] if all_versions else ["-1"]) + [LOG_FORMAT, "--abbrev=12", "--", *paths]
    logs, status = await asyncio.gather(
        run_command(log_args, source_kind=kind, repository=repository),
        run_command(["git", "status", "--short", "--", *paths], source_kind=kind, repository=repository),
    )
    return voom_rows(logs, status, paths, dirty_suffix)


async def fetch_versions(session: Optional[aiohttp.ClientSession], vspec: Spec, config: ResolveConfig) -> List[Row]:
    """Voom rows for the spec's ``paths``, tagged with ``module`` = variable name."""
    paths = vspec["paths"]
    if isinstance(paths, str):
        paths = [paths]
    paths = [canonicalize(str(p), config.root_dir) for p in paths]
    rows = await voom_versions_data(paths, config.dirty_suffix, config.all_local)
    return [{**row, "module": vspec["var-name"]} for row in rows]
