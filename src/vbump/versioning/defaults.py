"""Version spec and defaults file loading, and layered defaults merging.

Defaults documents have three optional top-level keys:

* ``all``: defaults that apply to every spec value.
* ``by-type``: keyed by spec ``type``; defaults for every spec of that type.
  If ``type`` is not set by the spec (or its ``by-name`` defaults) then the
  ``type`` from ``all`` selects the block.
* ``by-name``: keyed by variable name. Names that do not appear in any
  version spec file are ignored.

Key-level precedence, lowest to highest, is: built-in base, ``all``,
``by-type``, ``by-name``, explicit spec. Document order only decides between
documents at the same level (later wins).
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import yaml

from vbump.constants import Constants, SpecTypes
from .errors import SpecValidationError
from .models import Spec

logger = logging.getLogger(__name__)

BASE_DEFAULTS: Spec = {"exclude-latest": True}


def desugar_vspec(vspec: Any) -> Spec:
    """Expand spec sugar.

    A bare string becomes ``{type: literal, version-literal: STR}``. The
    ``kind`` alias key is rewritten to ``type``. ``version-literal`` is used
    instead of ``version`` so that overriding a literal with a full spec
    never pins a ``version`` predicate from underneath.
    """
    if isinstance(vspec, str):
        return {"type": SpecTypes.LITERAL.value, "version-literal": vspec}
    if vspec is None:
        return {}
    spec = dict(vspec)
    if "kind" in spec and "type" not in spec:
        spec["type"] = spec.pop("kind")
    return spec


def load_yaml(path: str) -> Any:
    """Read and parse one YAML file."""
    with open(path, "r", encoding="utf-8") as fh:
        return yaml.safe_load(fh)


def _require_mapping(path: str, data: Any) -> Mapping[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise SpecValidationError([f"{path}: expected a mapping at the top level"])
    return data


def load_default_file(path: str) -> Dict[str, Any]:
    """Load a defaults document, desugaring its ``all``, ``by-type`` and ``by-name`` entries."""
    data = dict(_require_mapping(path, load_yaml(path)))
    if "all" in data:
        data["all"] = desugar_vspec(data["all"])
    by_type = data.get("by-type") or {}
    data["by-type"] = {str(k): desugar_vspec(v) for k, v in by_type.items()}
    by_name = data.get("by-name") or {}
    data["by-name"] = {str(k): desugar_vspec(v) for k, v in by_name.items()}
    logger.debug("Loaded defaults file %s", path)
    return data


def load_version_spec(path: str) -> Dict[str, Spec]:
    """Load a version spec file as ``{variable name: spec map}``."""
    data = _require_mapping(path, load_yaml(path))
    logger.debug("Loaded version spec %s (%d entries)", path, len(data))
    return {str(k): desugar_vspec(v) for k, v in data.items()}


def find_spec_files(paths: Iterable[str], suffixes: Optional[Sequence[str]] = None) -> List[str]:
    """Resolve spec file arguments.

    A directory resolves to the first existing ``version-spec.(yaml|yml)``
    inside it; a file is used as-is. Missing files and directories without
    a spec file are skipped.
    """
    names = list(suffixes or Constants.SPEC_FILE_NAMES)
    found = []
    for path in paths:
        candidates = [os.path.join(path, n) for n in names] if os.path.isdir(path) else [path]
        hit = next((p for p in candidates if os.path.isfile(p)), None)
        if hit:
            found.append(hit)
        else:
            logger.debug("No version spec found at %s, skipping", path)
    return found


def merge_spec_files(specs: Iterable[Mapping[str, Spec]]) -> Dict[str, Spec]:
    """Merge several loaded spec files one level deep (later files win per key)."""
    merged: Dict[str, Spec] = {}
    for spec in specs:
        for vname, vspec in spec.items():
            merged[vname] = {**merged.get(vname, {}), **vspec}
    return merged


def _merge_blocks(blocks: Iterable[Optional[Mapping[str, Any]]]) -> Spec:
    merged: Spec = {}
    for block in blocks:
        if block:
            merged.update(block)
    return merged


def merge_defaults_1(all_defaults: Sequence[Mapping[str, Any]], vname: str, vspec: Spec) -> Spec:
    """Merge defaults under a single named spec (see module docstring)."""
    all_merged = _merge_blocks(d.get("all") for d in all_defaults)
    by_name = _merge_blocks((d.get("by-name") or {}).get(vname) for d in all_defaults)
    named = {**by_name, **vspec}
    vtype = named.get("type", all_merged.get("type"))
    by_type = _merge_blocks((d.get("by-type") or {}).get(vtype) for d in all_defaults)

    merged: Spec = {}
    for layer in (BASE_DEFAULTS, all_merged, by_type, by_name, vspec):
        merged.update(layer)
    return merged


def merge_defaults(all_defaults: Sequence[Mapping[str, Any]], spec: Mapping[str, Spec]) -> Dict[str, Spec]:
    """Merge defaults into every spec value; only names present in ``spec`` are kept."""
    return {vname: merge_defaults_1(all_defaults, vname, vspec) for vname, vspec in spec.items()}
