"""Tests for argument parsing, configuration and the CLI run loop."""

import json
from types import SimpleNamespace
from unittest.mock import patch

import pytest
import yaml

from vbump.args import comma_split, parse_args
from vbump.cli import run
from vbump.cli_config import apply_env_overrides, config_from_args
from vbump.constants import ExitCodes
from vbump.output import format_output
from vbump.versioning.errors import ConfigurationError, UnresolvedVersionsError, UpstreamQueryError
from vbump.versioning.models import ResolutionResult


def _write(path, data):
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return str(path)


class TestArgs:
    """Tests for CLI argument parsing."""

    def test_comma_split(self):
        assert comma_split(["a.yaml,b.yaml", " c.yaml ", ""]) == ["a.yaml", "b.yaml", "c.yaml"]
        assert comma_split(None) == []

    def test_defaults(self):
        args = parse_args(["spec.yaml"])
        assert args.OUTPUT_FORMAT == "dotenv"
        assert args.DEFAULTS_FILES == []
        assert args.LOG_LEVEL == "WARNING"

    def test_dotenv_conflicts_with_enumerate(self):
        with pytest.raises(SystemExit):
            parse_args(["spec.yaml", "--enumerate"])
        with pytest.raises(SystemExit):
            parse_args(["spec.yaml", "--print-full-spec"])

    def test_enumerate_with_json(self):
        args = parse_args(["spec.yaml", "--enumerate", "-f", "JSON"])
        assert args.ENUMERATE and args.OUTPUT_FORMAT == "json"


class TestConfig:
    """Tests for environment fallbacks and config building."""

    def test_env_fills_unset_options(self):
        args = parse_args(["spec.yaml", "--profile", "cli"])
        apply_env_overrides(args, {"PROFILE": "env", "ARTIFACTORY_BASE_URL": "https://art"})
        assert args.PROFILE == "cli"
        assert args.ARTIFACTORY_BASE_URL == "https://art"

    def test_config_from_args(self):
        args = parse_args(["spec.yaml", "--local-only", "--allow-unresolved", "--profile", "p", "--no-profile"])
        config = config_from_args(args)
        assert config.resolve_remote is False
        assert config.strict is False
        assert config.profile is None
        assert config.root_dir == "."


class TestFormatOutput:
    """Tests for output serialization."""

    def test_dotenv(self):
        assert format_output("dotenv", {"A": "1", "B": None}) == "A=1\nB=\n"

    def test_json_and_yaml(self):
        data = {"B": ["1", "2"], "A": "3"}
        assert json.loads(format_output("json", data)) == data
        assert yaml.safe_load(format_output("yaml", data)) == data
        assert format_output("yaml", data).startswith("B:")

    def test_unknown_format(self):
        with pytest.raises(ValueError):
            format_output("toml", {})


class TestRun:
    """Tests for the CLI run loop."""

    def test_resolves_literal(self, tmp_path, capsys):
        spec = _write(tmp_path / "version-spec.yaml", {"APP_VERSION": {"type": "literal", "version-literal": "1.2"}})
        assert run(parse_args([spec])) == ExitCodes.SUCCESS.value
        assert capsys.readouterr().out == "APP_VERSION=1.2\n"

    def test_directory_and_defaults(self, tmp_path, capsys):
        _write(tmp_path / "version-spec.yml", {"APP_VERSION": {"type": "literal"}})
        defaults = _write(tmp_path / "defaults.yaml", {
            "by-type": {"literal": {"version-literal": "9"}},
        })
        assert run(parse_args([str(tmp_path), "--defaults-files", defaults])) == 0
        assert capsys.readouterr().out == "APP_VERSION=9\n"

    def test_print_full_spec(self, tmp_path, capsys):
        spec = _write(tmp_path / "spec.yaml", {"UBI": {"type": "image", "image": "ubi9"}})
        defaults = _write(tmp_path / "defaults.yaml", {"all": {"version-regex": "^9"}})
        with patch("vbump.cli.resolve_spec_sync") as mock_resolve:
            code = run(parse_args([spec, "--defaults-files", defaults, "--print-full-spec", "-f", "json"]))
        assert code == 0
        mock_resolve.assert_not_called()
        assert json.loads(capsys.readouterr().out) == {
            "UBI": {"exclude-latest": True, "version-regex": "^9", "type": "image", "image": "ubi9"},
        }

    def test_enumerate_yaml(self, tmp_path, capsys):
        spec = _write(tmp_path / "spec.yaml", {"X": {"type": "npm", "name": "x"}})
        rows = [{"version": "1"}, {"version": "2"}]
        result = {"X": ResolutionResult("X", {}, rows)}
        with patch("vbump.cli.resolve_spec_sync", return_value=result):
            assert run(parse_args([spec, "--enumerate", "-f", "yaml"])) == 0
        assert yaml.safe_load(capsys.readouterr().out) == {"X": ["1", "2"]}

    def test_missing_file(self, tmp_path):
        assert run(parse_args([str(tmp_path / "nope.yaml")])) == ExitCodes.FILE_ERROR.value

    def test_invalid_spec(self, tmp_path):
        spec = _write(tmp_path / "spec.yaml", {"X": {"type": "rpm", "name": "gcc"}})
        assert run(parse_args([spec])) == ExitCodes.FILE_ERROR.value

    @pytest.mark.parametrize("error, code", [
        (UnresolvedVersionsError(["X"]), ExitCodes.FILE_ERROR.value),
        (ConfigurationError("X"), ExitCodes.CONFIG_ERROR.value),
        (UpstreamQueryError("npm", "x", "down"), ExitCodes.CONNECTION_ERROR.value),
    ])
    def test_resolution_errors(self, tmp_path, error, code):
        spec = _write(tmp_path / "spec.yaml", {"X": {"type": "npm", "name": "x"}})
        with patch("vbump.cli.resolve_spec_sync", side_effect=error):
            assert run(parse_args([spec])) == code

    def test_allow_unresolved_passes_config(self, tmp_path):
        spec = _write(tmp_path / "spec.yaml", {"X": {"type": "npm", "name": "x"}})
        with patch("vbump.cli.resolve_spec_sync", return_value={}) as mock_resolve:
            run(parse_args([spec, "--allow-unresolved", "--local-only"]))
        config = mock_resolve.call_args.args[0]
        assert config.strict is False and config.resolve_remote is False
