"""Shared async HTTP helpers used by the registry clients.

Encapsulates request/timeout error handling so individual clients avoid
duplicating try/except blocks. Failures surface as ``UpstreamQueryError``
naming the source kind and repository; nothing is retried here.
"""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Optional

import aiohttp

from vbump.constants import Constants
from vbump.common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer
from vbump.versioning.errors import UpstreamQueryError

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {"Accept": "application/json", "User-Agent": "vbump/0.3"}


def new_session(timeout: int = Constants.REQUEST_TIMEOUT) -> aiohttp.ClientSession:
    """Create a client session with the project-wide timeout."""
    return aiohttp.ClientSession(
        timeout=aiohttp.ClientTimeout(total=timeout),
        headers=DEFAULT_HEADERS,
    )


async def get_bytes(
    session: aiohttp.ClientSession,
    url: str,
    *,
    source_kind: str,
    repository: str,
    headers: Optional[Dict[str, str]] = None,
) -> bytes:
    """GET ``url`` and return the body, raising on transport errors and non-2xx."""
    safe_target = safe_url(url)
    with Timer() as t:
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP request",
                extra=extra_context(
                    event="http_request",
                    component="http_client",
                    action="GET",
                    target=safe_target,
                    context=source_kind,
                ),
            )
        try:
            async with session.get(url, headers=headers) as res:
                body = await res.read()
                status = res.status
        except aiohttp.ClientError as exc:
            logger.error("%s connection error: %s", source_kind, exc)
            raise UpstreamQueryError(source_kind, repository, str(exc)) from exc
        except asyncio.TimeoutError as exc:
            logger.error(
                "%s request timed out after %s seconds",
                source_kind,
                Constants.REQUEST_TIMEOUT,
            )
            raise UpstreamQueryError(source_kind, repository, "request timed out") from exc

    if is_debug_enabled(logger):
        logger.debug(
            "HTTP response",
            extra=extra_context(
                event="http_response",
                component="http_client",
                action="GET",
                outcome="success" if 200 <= status < 300 else "error",
                status_code=status,
                duration_ms=t.duration_ms(),
                target=safe_target,
            ),
        )
    if not 200 <= status < 300:
        raise UpstreamQueryError(source_kind, repository, f"HTTP {status} from {safe_target}")
    return body


async def get_json(
    session: aiohttp.ClientSession,
    url: str,
    *,
    source_kind: str,
    repository: str,
    headers: Optional[Dict[str, str]] = None,
) -> Any:
    """GET ``url`` and parse the JSON body.

    Args:
        session: Open aiohttp session.
        url: Target URL.
        source_kind: Source kind tag used in logs and errors (e.g. "npm").
        repository: Repository identifier named in errors.
        headers: Optional extra request headers.

    Returns:
        The decoded JSON document.
    """
    body = await get_bytes(
        session, url, source_kind=source_kind, repository=repository, headers=headers
    )
    try:
        return json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        if is_debug_enabled(logger):
            logger.debug(
                "JSON decode error",
                extra=extra_context(
                    event="parse",
                    component="http_client",
                    action="get_json",
                    outcome="json_decode_error",
                    target=safe_url(url),
                ),
            )
        raise UpstreamQueryError(source_kind, repository, "invalid JSON response") from exc
