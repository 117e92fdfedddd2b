"""Literal values: a single row holding the spec's ``version-literal``."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

import aiohttp

from vbump.versioning.models import ResolveConfig, Row, Spec


async def fetch_versions(session: Optional[aiohttp.ClientSession], vspec: Spec, config: ResolveConfig) -> List[Row]:
    return [{
        "variable": vspec["var-name"],
        "date-str": datetime.now(timezone.utc).isoformat(),
        "version": vspec.get("version-literal"),
    }]
