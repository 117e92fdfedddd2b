"""Async subprocess helper for CLI-backed sources (git, aws)."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence

from vbump.constants import Constants
from vbump.common.logging_utils import extra_context, is_debug_enabled, Timer
from vbump.versioning.errors import UpstreamQueryError

logger = logging.getLogger(__name__)


async def run_command(
    args: Sequence[str],
    *,
    source_kind: str,
    repository: str,
    cwd: Optional[str] = None,
) -> str:
    """Run ``args`` and return stripped stdout.

    Raises:
        UpstreamQueryError: The command is missing, times out or exits non-zero.
    """
    with Timer() as t:
        try:
            proc = await asyncio.create_subprocess_exec(
                *args,
                cwd=cwd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise UpstreamQueryError(source_kind, repository, f"cannot run {args[0]}: {exc}") from exc
        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), Constants.COMMAND_TIMEOUT)
        except asyncio.TimeoutError as exc:
            proc.kill()
            await proc.wait()
            raise UpstreamQueryError(source_kind, repository, f"{args[0]} timed out") from exc

    if is_debug_enabled(logger):
        logger.debug(
            "Command finished",
            extra=extra_context(
                event="command",
                component="command",
                action=" ".join(args[:3]),
                outcome="success" if proc.returncode == 0 else "error",
                duration_ms=t.duration_ms(),
            ),
        )
    if proc.returncode != 0:
        reason = stderr.decode("utf-8", "replace").strip() or f"exit status {proc.returncode}"
        raise UpstreamQueryError(source_kind, repository, reason)
    return stdout.decode("utf-8", "replace").strip()
