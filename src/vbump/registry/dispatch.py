"""Upstream dispatcher: one concurrent query per distinct repository.

All queries of a batch are awaited together and the wave settles before
any result is returned, so callers never see partial data.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from vbump.common.http_client import new_session
from vbump.common.logging_utils import extra_context, is_debug_enabled, Timer
from vbump.versioning.enrich import source_kind_of
from vbump.versioning.errors import UpstreamQueryError
from vbump.versioning.models import QueryKey, ResolveConfig, Row, SourceKind, Spec
from . import artifactory, docker_hub, ecr, literal, npm, rpm, voom

logger = logging.getLogger(__name__)

FETCHERS = {
    SourceKind.RPM: rpm,
    SourceKind.DOCKER_HUB: docker_hub,
    SourceKind.DOCKER_ARTIFACTORY: artifactory,
    SourceKind.DOCKER_ECR: ecr,
    SourceKind.NPM: npm,
    SourceKind.VOOM: voom,
    SourceKind.LITERAL: literal,
}


@dataclass
class QueryResults:
    """Settled outcome of one query wave."""
    batches: Dict[QueryKey, List[Row]] = field(default_factory=dict)
    errors: Dict[QueryKey, UpstreamQueryError] = field(default_factory=dict)

    def rows_for(self, vspec: Spec) -> Optional[List[Row]]:
        key = query_key(vspec)
        return self.batches.get(key) if key else None

    def failed(self, vspec: Spec) -> bool:
        key = query_key(vspec)
        return key is not None and key in self.errors


def query_key(vspec: Spec) -> Optional[QueryKey]:
    """Identity of the upstream query that serves ``vspec``."""
    kind = source_kind_of(vspec)
    if kind is None:
        return None
    ident: Tuple[Any, ...]
    if kind is SourceKind.RPM:
        ident = (vspec.get("repo"),)
    elif kind is SourceKind.DOCKER_HUB:
        ident = (vspec.get("registry") or "", vspec.get("full-image"))
    elif kind is SourceKind.DOCKER_ARTIFACTORY:
        ident = (vspec.get("artifactory-api"), vspec.get("registry"), vspec.get("full-image"))
    elif kind is SourceKind.DOCKER_ECR:
        ident = (vspec.get("ecr-region"), vspec.get("ecr-account"), vspec.get("full-image"))
    elif kind is SourceKind.NPM:
        ident = (vspec.get("registry") or "", vspec.get("name"))
    else:
        ident = (vspec.get("var-name"),)
    return kind, ident


def plan_queries(config: ResolveConfig, specs: Mapping[str, Spec]) -> Dict[QueryKey, Spec]:
    """Distinct queries to run, each mapped to the first spec that needs it."""
    plan: Dict[QueryKey, Spec] = {}
    for vspec in specs.values():
        key = query_key(vspec)
        if key is None or key in plan:
            continue
        if key[0].is_remote and not config.resolve_remote:
            continue
        plan[key] = vspec
    return plan


async def query_versions(config: ResolveConfig, specs: Mapping[str, Spec]) -> QueryResults:
    """Run every planned query concurrently and collect rows and errors."""
    plan = plan_queries(config, specs)
    keys = list(plan)
    results = QueryResults()
    if not keys:
        return results

    needs_session = any(k[0].is_remote for k in keys)
    session = new_session(config.timeout) if needs_session else None
    with Timer() as t:
        try:
            outcomes = await asyncio.gather(
                *[FETCHERS[k[0]].fetch_versions(session, plan[k], config) for k in keys],
                return_exceptions=True,
            )
        finally:
            if session is not None:
                await session.close()

    for key, outcome in zip(keys, outcomes):
        if isinstance(outcome, UpstreamQueryError):
            results.errors[key] = outcome
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            results.batches[key] = list(outcome)

    if is_debug_enabled(logger):
        logger.debug(
            "Query wave settled",
            extra=extra_context(
                event="dispatch",
                component="dispatch",
                action="query_versions",
                count=len(keys),
                errors=len(results.errors),
                duration_ms=t.duration_ms(),
            ),
        )
    return results
