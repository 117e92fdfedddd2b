"""AWS ECR client backed by ``aws ecr describe-images``."""

from __future__ import annotations

import json
import logging
from typing import List

import aiohttp

from vbump.versioning.errors import UpstreamQueryError
from vbump.versioning.models import ResolveConfig, Row, SourceKind, Spec
from .command import run_command

logger = logging.getLogger(__name__)


def build_command(vspec: Spec, config: ResolveConfig) -> List[str]:
    """The aws CLI invocation for a spec's repository."""
    args = [
        "aws", "ecr", "describe-images",
        "--region", vspec["ecr-region"],
        "--repository-name", vspec["full-image"],
        "--registry-id", vspec["ecr-account"],
        "--output", "json",
    ]
    if config.profile:
        args += ["--profile", config.profile]
    return args


def expand_tags(image_details: List[Row]) -> List[Row]:
    """One record per image tag, with ``tag`` set and ``imageTags`` dropped."""
    rows = []
    for detail in image_details:
        base = {k: v for k, v in detail.items() if k != "imageTags"}
        for tag in detail.get("imageTags") or []:
            rows.append({**base, "tag": tag})
    return rows


async def fetch_versions(session: aiohttp.ClientSession, vspec: Spec, config: ResolveConfig) -> List[Row]:
    """Return one record per tag of the ECR repository."""
    repository = f"{vspec['ecr-region']}/{vspec['full-image']}"
    out = await run_command(
        build_command(vspec, config),
        source_kind=SourceKind.DOCKER_ECR.value,
        repository=repository,
    )
    try:
        data = json.loads(out or "{}")
    except json.JSONDecodeError as exc:
        raise UpstreamQueryError(SourceKind.DOCKER_ECR.value, repository, "invalid JSON from aws cli") from exc
    rows = expand_tags(data.get("imageDetails") or [])
    logger.debug("ECR %s: %d tagged images", repository, len(rows))
    return rows
