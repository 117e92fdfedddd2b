"""npm registry client: one record per published version."""

from __future__ import annotations

import logging
import urllib.parse
from typing import List

import aiohttp

from vbump.constants import Constants
from vbump.common.http_client import get_json
from vbump.versioning.models import ResolveConfig, Row, SourceKind, Spec

logger = logging.getLogger(__name__)


def packument_url(name: str, registry: str = "") -> str:
    """URL of the package document; scoped names keep their ``@`` and encode ``/``."""
    base = registry or Constants.REGISTRY_URL_NPM
    if not base.endswith("/"):
        base += "/"
    return base + urllib.parse.quote(name, safe="@")


def versions_from_packument(name: str, packument) -> List[Row]:
    """Flatten a packument into records carrying ``name``, ``version``, ``dist`` and ``time``."""
    times = packument.get("time") or {}
    rows = []
    for version, meta in (packument.get("versions") or {}).items():
        rows.append({
            "name": name,
            "version": version,
            "dist": (meta or {}).get("dist") or {},
            "time": times.get(version),
        })
    return rows


async def fetch_versions(session: aiohttp.ClientSession, vspec: Spec, config: ResolveConfig) -> List[Row]:
    """Return every version of the spec's package."""
    name = vspec["name"]
    registry = vspec.get("registry") or Constants.REGISTRY_URL_NPM
    packument = await get_json(
        session,
        packument_url(name, registry),
        source_kind=SourceKind.NPM.value,
        repository=f"{name} in {registry}",
    )
    rows = versions_from_packument(name, packument)
    logger.debug("npm %s: %d versions", name, len(rows))
    return rows
