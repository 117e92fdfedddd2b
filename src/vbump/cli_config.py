"""Runtime configuration from CLI arguments and environment variables.

CLI values take precedence over the environment.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Mapping, Optional

from vbump.constants import Constants
from vbump.versioning.models import ResolveConfig

logger = logging.getLogger(__name__)

_ENV_FALLBACKS = {
    "PROFILE": Constants.ENV_PROFILE,
    "ARTIFACTORY_BASE_URL": Constants.ENV_ARTIFACTORY_BASE_URL,
    "ARTIFACTORY_USERNAME": Constants.ENV_ARTIFACTORY_USERNAME,
    "ARTIFACTORY_IDENTITY_TOKEN": Constants.ENV_ARTIFACTORY_IDENTITY_TOKEN,
}


def apply_env_overrides(args: Any, environ: Optional[Mapping[str, str]] = None) -> None:
    """Fill unset CLI options from their environment variables."""
    env = os.environ if environ is None else environ
    for attr, var in _ENV_FALLBACKS.items():
        if getattr(args, attr, None):
            continue
        value = env.get(var, "").strip()
        if value:
            setattr(args, attr, value)
            logger.debug("Using %s from environment", var)


def config_from_args(args: Any) -> ResolveConfig:
    """Build a ResolveConfig from parsed CLI arguments."""
    profile = None if getattr(args, "NO_PROFILE", False) else getattr(args, "PROFILE", None)
    return ResolveConfig(
        resolve_remote=not getattr(args, "LOCAL_ONLY", False),
        strict=not getattr(args, "ALLOW_UNRESOLVED", False),
        all_local=getattr(args, "ALL_LOCAL", False),
        root_dir=getattr(args, "ROOT_DIR", "."),
        dirty_suffix=getattr(args, "DIRTY_SUFFIX", Constants.DIRTY_SUFFIX),
        profile=profile,
        artifactory_base_url=getattr(args, "ARTIFACTORY_BASE_URL", None),
        artifactory_username=getattr(args, "ARTIFACTORY_USERNAME", None),
        artifactory_identity_token=getattr(args, "ARTIFACTORY_IDENTITY_TOKEN", None),
        timeout=Constants.REQUEST_TIMEOUT,
    )
