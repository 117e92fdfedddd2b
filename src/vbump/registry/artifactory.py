"""Artifactory docker repository client.

Tags come from the docker v2 tag list; per-tag metadata (``lastUpdated``,
``createdBy``, ``checksums``) from the storage API file info of each tag's
``manifest.json``.
"""

from __future__ import annotations

import asyncio
import base64
import logging
from typing import Dict, List

import aiohttp

from vbump.common.http_client import get_json
from vbump.versioning.models import ResolveConfig, Row, SourceKind, Spec

logger = logging.getLogger(__name__)


def get_auth_headers(config: ResolveConfig) -> Dict[str, str]:
    """Authorization header from the configured identity token (and username)."""
    token = config.artifactory_identity_token
    if not token:
        return {}
    if config.artifactory_username:
        raw = f"{config.artifactory_username}:{token}".encode("utf-8")
        return {"Authorization": "Basic " + base64.b64encode(raw).decode("ascii")}
    return {"Authorization": f"Bearer {token}"}


async def fetch_versions(session: aiohttp.ClientSession, vspec: Spec, config: ResolveConfig) -> List[Row]:
    """Return one record per tag that has a ``lastUpdated`` timestamp."""
    api = vspec["artifactory-api"].rstrip("/")
    registry = vspec["registry"]
    full_image = vspec["full-image"]
    repository = f"{registry}/{full_image}"
    headers = get_auth_headers(config)
    kind = SourceKind.DOCKER_ARTIFACTORY.value

    tag_list = await get_json(
        session,
        f"{api}/docker/{registry}/v2/{full_image}/tags/list",
        source_kind=kind,
        repository=repository,
        headers=headers,
    )
    tags = tag_list.get("tags") or []

    infos = await asyncio.gather(*[
        get_json(
            session,
            f"{api}/storage/{registry}/{full_image}/{tag}/manifest.json",
            source_kind=kind,
            repository=repository,
            headers=headers,
        )
        for tag in tags
    ], return_exceptions=True)
    for info in infos:
        if isinstance(info, BaseException):
            raise info

    rows = []
    for tag, info in zip(tags, infos):
        if not info.get("lastUpdated"):
            continue
        rows.append({
            "image": full_image,
            "tag": tag,
            "lastUpdated": info["lastUpdated"],
            "created": info.get("created"),
            "createdBy": info.get("createdBy"),
            "checksums": info.get("checksums") or {},
            "repo": registry,
        })
    logger.debug("Artifactory %s: %d tagged images", repository, len(rows))
    return rows
