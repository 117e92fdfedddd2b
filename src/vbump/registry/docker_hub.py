"""Docker Hub client: all tags of ``namespace/image``."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

import aiohttp

from vbump.constants import Constants
from vbump.common.http_client import get_json
from vbump.versioning.models import ResolveConfig, Row, SourceKind, Spec

logger = logging.getLogger(__name__)


def api_base(vspec: Spec) -> str:
    """Docker Hub API base; an http(s) ``registry`` value overrides the default."""
    registry = vspec.get("registry") or ""
    if registry.startswith(("http://", "https://")):
        return registry if registry.endswith("/") else registry + "/"
    return Constants.REGISTRY_URL_DOCKER_HUB


def hoist_architecture(tag: Dict[str, Any], architecture: str = Constants.DOCKER_ARCHITECTURE) -> Dict[str, Any]:
    """Merge the first image entry for ``architecture`` over the tag record."""
    image = next(
        (i for i in tag.get("images") or [] if i.get("architecture") == architecture),
        None,
    )
    return {**tag, **image} if image else dict(tag)


async def fetch_versions(session: aiohttp.ClientSession, vspec: Spec, config: ResolveConfig) -> List[Row]:
    """Return one record per tag, tagged with the spec's ``full-image``."""
    full_image = vspec["full-image"]
    namespace, _, image = full_image.rpartition("/")
    url = (
        f"{api_base(vspec)}{namespace or Constants.DOCKER_HUB_NAMESPACE}"
        f"/repositories/{image}/tags?page_size={Constants.DOCKER_HUB_PAGE_SIZE}"
    )
    tags: List[Row] = []
    while url:
        page = await get_json(
            session, url, source_kind=SourceKind.DOCKER_HUB.value, repository=full_image
        )
        tags.extend(page.get("results") or [])
        url = page.get("next")
    logger.debug("Docker Hub %s: %d tags", full_image, len(tags))
    return [{**hoist_architecture(tag), "full-image": full_image} for tag in tags]
