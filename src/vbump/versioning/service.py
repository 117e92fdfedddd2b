"""Resolution orchestration across all components of a version spec."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Mapping, Optional, Union

from vbump.common.logging_utils import extra_context, is_debug_enabled
from vbump.registry.dispatch import query_versions
from .enrich import enrich_spec
from .errors import UnresolvedVersionsError
from .models import ResolutionResult, ResolveConfig, Spec
from .select import resolve_versions_1

logger = logging.getLogger(__name__)


def resolve_versions(specs: Mapping[str, Spec], queried) -> Dict[str, ResolutionResult]:
    """Resolve every enriched spec against settled ``QueryResults``."""
    results = {}
    for vname, vspec in specs.items():
        results[vname] = resolve_versions_1(
            vspec, queried.rows_for(vspec), query_failed=queried.failed(vspec)
        )
    return results


async def resolve_spec(
    config: ResolveConfig, version_spec: Mapping[str, Spec], checked: Optional[bool] = None
) -> Dict[str, ResolutionResult]:
    """Query upstream versions and resolve each spec item against them.

    Args:
        config: Runtime settings.
        version_spec: Merged (defaulted) specs keyed by variable name.
        checked: Fail on upstream errors and unresolved items; defaults to
            ``config.strict``.

    Raises:
        UpstreamQueryError: A query failed in strict mode (after the whole
            wave settled).
        ConfigurationError: A spec has no rows and no version-default.
        UnresolvedVersionsError: In strict mode, naming every component that
            resolved to no version.
    """
    strict = config.strict if checked is None else checked
    enriched = enrich_spec(version_spec)
    queried = await query_versions(config, enriched)

    if queried.errors:
        if strict:
            raise next(iter(queried.errors.values()))
        for err in queried.errors.values():
            logger.warning("%s", err)

    resolved = resolve_versions(enriched, queried)
    unresolved = [name for name, result in resolved.items() if not result.resolved]

    if is_debug_enabled(logger):
        logger.debug(
            "Resolved version spec",
            extra=extra_context(
                event="function_exit",
                component="service",
                action="resolve_spec",
                count=len(resolved),
                outcome="unresolved" if unresolved else "success",
            ),
        )
    if unresolved:
        if strict:
            raise UnresolvedVersionsError(unresolved)
        logger.warning("Could not resolve versions for: %s", ", ".join(unresolved))
    return resolved


def resolve_spec_sync(
    config: ResolveConfig, version_spec: Mapping[str, Spec], checked: Optional[bool] = None
) -> Dict[str, ResolutionResult]:
    """Blocking wrapper around ``resolve_spec``."""
    return asyncio.run(resolve_spec(config, version_spec, checked))


def build_output(
    results: Mapping[str, ResolutionResult], enumerate_all: bool = False
) -> Dict[str, Union[Optional[str], List[str]]]:
    """Map each name to its current version, or to all versions when enumerating."""
    if enumerate_all:
        return {name: result.versions for name, result in results.items()}
    return {name: result.current for name, result in results.items()}
