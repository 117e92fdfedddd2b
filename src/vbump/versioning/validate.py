"""Required-field checks for merged version specs."""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Sequence

from vbump.constants import Constants, SpecTypes
from .defaults import merge_defaults
from .errors import SpecValidationError
from .models import Spec

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = {
    SpecTypes.RPM.value: ["name", "repo"],
    SpecTypes.IMAGE.value: ["image"],
    SpecTypes.NPM.value: ["name"],
    SpecTypes.LITERAL.value: ["version-literal"],
    SpecTypes.GIT.value: ["paths"],
}


def validation_error(vname: str, vspec: Spec) -> Optional[str]:
    """Return ``"NAME: missing a, missing b"`` or None if the spec is valid."""
    required = ["type"] + REQUIRED_FIELDS.get(vspec.get("type"), [])
    if vspec.get("type") == SpecTypes.IMAGE.value and vspec.get("artifactory-api"):
        required.append("registry")
    missing = [f"missing {k}" for k in required if not vspec.get(k)]
    if vspec.get("type") and vspec["type"] not in Constants.SUPPORTED_TYPES:
        missing.append(f"unknown type {vspec['type']}")
    if not missing:
        return None
    return f"{vname}: {', '.join(missing)}"


def validation_errors(full_spec: Mapping[str, Spec], names) -> List[str]:
    """Collect validation messages for ``names`` in ``full_spec``."""
    errors = []
    for vname in names:
        msg = validation_error(vname, full_spec[vname])
        if msg:
            errors.append(msg)
    return errors


def normalize_spec(
    defaults: Sequence[Mapping], version_spec: Mapping[str, Spec], checked: bool = True
) -> Dict[str, Spec]:
    """Merge defaults into ``version_spec`` and optionally validate it.

    Only names from the version spec files are validated (and kept);
    ``by-name`` defaults without a matching spec entry are ignored.

    Raises:
        SpecValidationError: When ``checked`` and any spec is invalid.
    """
    full_spec = merge_defaults(defaults, version_spec)
    errors = validation_errors(full_spec, version_spec.keys())
    if errors:
        if checked:
            raise SpecValidationError(errors)
        for msg in errors:
            logger.warning("Invalid spec: %s", msg)
    return full_spec
