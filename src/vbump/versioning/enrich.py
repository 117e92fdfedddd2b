"""Derived spec fields: source kind and composite repository identifiers."""

from __future__ import annotations

import re
from typing import Dict, Mapping, Optional

from vbump.constants import Constants, SpecTypes
from .models import SourceKind, Spec

ECR_REPO_RE = re.compile(Constants.ECR_REPO_PATTERN)

_SOURCE_KIND_BY_TYPE = {
    SpecTypes.RPM.value: SourceKind.RPM,
    SpecTypes.IMAGE.value: SourceKind.DOCKER_HUB,
    SpecTypes.NPM.value: SourceKind.NPM,
    SpecTypes.GIT.value: SourceKind.VOOM,
    SpecTypes.LITERAL.value: SourceKind.LITERAL,
}


def source_kind_of(vspec: Mapping) -> Optional[SourceKind]:
    """Return the enriched ``source-kind`` of a spec as an enum."""
    value = vspec.get("source-kind")
    return SourceKind(value) if value else None


def enrich_spec_1(vname: str, vspec: Spec) -> Spec:
    """Return a copy of ``vspec`` with derived fields added.

    Always adds ``var-name`` and ``source-kind``. Image specs also get
    ``full-image`` and, for ECR registries, ``ecr-account``/``ecr-region``.
    Only non-derived keys are read, so enriching twice is a no-op.
    """
    enriched = dict(vspec)
    enriched["var-name"] = vname
    kind = _SOURCE_KIND_BY_TYPE.get(vspec.get("type"))

    if kind is SourceKind.DOCKER_HUB:
        ecr_match = ECR_REPO_RE.search(vspec.get("registry") or "")
        if vspec.get("artifactory-api"):
            kind = SourceKind.DOCKER_ARTIFACTORY
        elif ecr_match:
            kind = SourceKind.DOCKER_ECR
            enriched["ecr-account"] = ecr_match.group(1)
            enriched["ecr-region"] = ecr_match.group(2)

        namespace = vspec.get("namespace")
        if not namespace and kind is SourceKind.DOCKER_HUB:
            namespace = Constants.DOCKER_HUB_NAMESPACE
        image = str(vspec.get("image", ""))
        enriched["full-image"] = f"{namespace}/{image}" if namespace else image

    if kind is not None:
        enriched["source-kind"] = kind.value
    return enriched


def enrich_spec(spec: Mapping[str, Spec]) -> Dict[str, Spec]:
    """Enrich every spec value (see ``enrich_spec_1``)."""
    return {vname: enrich_spec_1(vname, vspec) for vname, vspec in spec.items()}
