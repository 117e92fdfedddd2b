"""Tests for shared logging, HTTP and subprocess helpers."""

import asyncio
import logging
import sys
from unittest.mock import MagicMock

import aiohttp
import pytest

from vbump.common.http_client import get_bytes, get_json
from vbump.common.logging_utils import configure_logging, extra_context, redact, safe_url, Timer
from vbump.registry.command import run_command
from vbump.versioning.errors import UpstreamQueryError


class _Response:
    def __init__(self, status, body):
        self.status = status
        self._body = body

    async def read(self):
        return self._body

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


def _session(status=200, body=b"{}", error=None):
    session = MagicMock()
    if error is not None:
        session.get.side_effect = error
    else:
        session.get.return_value = _Response(status, body)
    return session


class TestLoggingUtils:
    """Tests for logging helpers."""

    def test_extra_context_drops_none(self):
        assert extra_context(event="x", outcome=None) == {"event": "x"}

    def test_redact_and_safe_url(self):
        assert redact("a?token=abc&x=1") == "a?token=[REDACTED]&x=1"
        assert safe_url("https://user:pw@art.example/api?password=p") == (
            "https://[REDACTED]@art.example/api?password=[REDACTED]"
        )

    def test_configure_logging_replaces_handler(self):
        root = logging.getLogger()
        configure_logging("DEBUG")
        configure_logging("ERROR")
        ours = [h for h in root.handlers if getattr(h, "_vbump_handler", False)]
        assert len(ours) == 1
        assert root.level == logging.ERROR

    def test_timer(self):
        with Timer() as t:
            pass
        assert t.duration_ms() >= 0


class TestHttpClient:
    """Tests for the HTTP helpers with a fake session."""

    def test_json_body(self):
        data = asyncio.run(get_json(_session(body=b'{"a": 1}'), "https://x", source_kind="npm", repository="r"))
        assert data == {"a": 1}

    def test_non_2xx_raises(self):
        with pytest.raises(UpstreamQueryError) as exc:
            asyncio.run(get_bytes(_session(status=404), "https://x", source_kind="npm", repository="pkg"))
        assert "HTTP 404" in str(exc.value)
        assert exc.value.repository == "pkg"

    def test_client_error_raises(self):
        session = _session(error=aiohttp.ClientConnectionError("refused"))
        with pytest.raises(UpstreamQueryError):
            asyncio.run(get_bytes(session, "https://x", source_kind="npm", repository="pkg"))

    def test_invalid_json_raises(self):
        with pytest.raises(UpstreamQueryError) as exc:
            asyncio.run(get_json(_session(body=b"<html>"), "https://x", source_kind="npm", repository="pkg"))
        assert "invalid JSON" in str(exc.value)


class TestRunCommand:
    """Tests for the async subprocess helper."""

    def test_stdout(self):
        out = asyncio.run(run_command(
            [sys.executable, "-c", "print(' hi ')"], source_kind="voom", repository="src"
        ))
        assert out == "hi"

    def test_nonzero_exit(self):
        with pytest.raises(UpstreamQueryError) as exc:
            asyncio.run(run_command(
                [sys.executable, "-c", "import sys; sys.stderr.write('bad'); sys.exit(3)"],
                source_kind="voom",
                repository="src",
            ))
        assert "bad" in str(exc.value)

    def test_missing_executable(self):
        with pytest.raises(UpstreamQueryError):
            asyncio.run(run_command(["vbump-no-such-binary"], source_kind="docker-ecr", repository="r"))
