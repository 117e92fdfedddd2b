"""RPM repository client: package records from ``repodata`` primary metadata."""

from __future__ import annotations

import bz2
import gzip
import logging
import lzma
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional

import aiohttp

from vbump.common.http_client import get_bytes
from vbump.versioning.errors import UpstreamQueryError
from vbump.versioning.models import ResolveConfig, Row, SourceKind

logger = logging.getLogger(__name__)

REPO_NS = "{http://linux.duke.edu/metadata/repo}"
COMMON_NS = "{http://linux.duke.edu/metadata/common}"

_DECOMPRESSORS = {
    ".gz": gzip.decompress,
    ".xz": lzma.decompress,
    ".bz2": bz2.decompress,
}


def repo_url(repo: str, base_url: Optional[str] = None) -> str:
    """Absolute repository URL; relative repos are joined under ``base_url``."""
    if repo.startswith(("http://", "https://")) or not base_url:
        return repo.rstrip("/")
    return f"{base_url.rstrip('/')}/{repo.strip('/')}"


def primary_location(repomd: bytes) -> Optional[str]:
    """Return the ``href`` of the primary metadata file in repomd.xml."""
    root = ET.fromstring(repomd)
    for data in root.findall(f"{REPO_NS}data"):
        if data.get("type") == "primary":
            location = data.find(f"{REPO_NS}location")
            if location is not None:
                return location.get("href")
    return None


def _text(elem: ET.Element, tag: str) -> Optional[str]:
    node = elem.find(f"{COMMON_NS}{tag}")
    return node.text if node is not None else None


def _attrs(elem: ET.Element, tag: str) -> Dict[str, Any]:
    node = elem.find(f"{COMMON_NS}{tag}")
    return dict(node.attrib) if node is not None else {}


def parse_primary(primary: bytes, repo: str) -> List[Row]:
    """Parse primary.xml into package records with ``rpm-version``/``build-date``."""
    root = ET.fromstring(primary)
    rows = []
    for pkg in root.findall(f"{COMMON_NS}package"):
        version = _attrs(pkg, "version")
        times = _attrs(pkg, "time")
        checksum = pkg.find(f"{COMMON_NS}checksum")
        build = times.get("build")
        rows.append({
            "name": _text(pkg, "name"),
            "arch": _text(pkg, "arch"),
            "version": version,
            "time": times,
            "checksum": {
                "type": checksum.get("type") if checksum is not None else None,
                "value": checksum.text if checksum is not None else None,
            },
            "rpm-version": f"{version.get('ver')}-{version.get('rel')}" if version else None,
            "build-date": int(build) if build and build.isdigit() else None,
            "repo": repo,
        })
    return rows


def decompress(href: str, data: bytes) -> bytes:
    """Decompress metadata according to the file suffix (plain xml passes through)."""
    for suffix, func in _DECOMPRESSORS.items():
        if href.endswith(suffix):
            return func(data)
    return data


async def fetch_versions(session: aiohttp.ClientSession, vspec, config: ResolveConfig) -> List[Row]:
    """Return every package record in the spec's repository."""
    repo = vspec["repo"]
    base = repo_url(repo, config.artifactory_base_url)
    kind = SourceKind.RPM.value

    repomd = await get_bytes(session, f"{base}/repodata/repomd.xml", source_kind=kind, repository=repo)
    try:
        href = primary_location(repomd)
    except ET.ParseError as exc:
        raise UpstreamQueryError(kind, repo, f"invalid repomd.xml: {exc}") from exc
    if not href:
        raise UpstreamQueryError(kind, repo, "no primary metadata in repomd.xml")

    raw = await get_bytes(session, f"{base}/{href}", source_kind=kind, repository=repo)
    try:
        rows = parse_primary(decompress(href, raw), repo)
    except (OSError, ValueError, lzma.LZMAError, ET.ParseError) as exc:
        raise UpstreamQueryError(kind, repo, f"invalid primary metadata: {exc}") from exc
    logger.debug("RPM repo %s: %d packages", repo, len(rows))
    return rows
