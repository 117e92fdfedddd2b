"""Serialization of resolved versions and merged specs."""

import json
from typing import Any, Mapping

import yaml


def format_output(fmt: str, results: Mapping[str, Any]) -> str:
    """Render ``results`` as dotenv, json or yaml text."""
    if fmt == "dotenv":
        return "".join(f"{k}={'' if v is None else v}\n" for k, v in results.items())
    if fmt == "json":
        return json.dumps(results, default=str)
    if fmt == "yaml":
        return yaml.safe_dump(dict(results), default_flow_style=False, sort_keys=False)
    raise ValueError(f"Unsupported output format: {fmt}")
