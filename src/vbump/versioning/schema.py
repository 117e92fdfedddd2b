"""Row schema registry: where each source kind keeps its version fields.

A schema only describes field locations; ``rows.normalize_rows`` and
``select.filter_rows`` are generic over it.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Tuple

from .models import SourceKind


@dataclass(frozen=True)
class RowSchema:
    """Field locations for one source kind's upstream records."""
    spec_name_field: str
    name_field: str
    version_field: str
    date_field: str
    hash_field: Tuple[str, ...]
    ver_delim: Optional[str] = None
    creator_field: Optional[str] = None


ROW_SCHEMAS = {
    SourceKind.DOCKER_HUB: RowSchema(
        spec_name_field="full-image",
        name_field="full-image",
        version_field="name",
        date_field="last_updated",
        hash_field=("digest",),
        ver_delim=":",
        creator_field="last_updater_username",
    ),
    SourceKind.DOCKER_ARTIFACTORY: RowSchema(
        spec_name_field="full-image",
        name_field="image",
        version_field="tag",
        date_field="lastUpdated",
        hash_field=("checksums", "sha256"),
        ver_delim=":",
        creator_field="createdBy",
    ),
    SourceKind.DOCKER_ECR: RowSchema(
        spec_name_field="full-image",
        name_field="repositoryName",
        version_field="tag",
        date_field="imagePushedAt",
        hash_field=("imageDigest",),
        ver_delim=":",
    ),
    SourceKind.LITERAL: RowSchema(
        spec_name_field="var-name",
        name_field="variable",
        version_field="version",
        date_field="date-str",
        hash_field=("variable",),
    ),
    SourceKind.RPM: RowSchema(
        spec_name_field="name",
        name_field="name",
        version_field="rpm-version",
        date_field="build-date",
        hash_field=("checksum", "value"),
        ver_delim="-",
    ),
    SourceKind.NPM: RowSchema(
        spec_name_field="name",
        name_field="name",
        version_field="version",
        date_field="time",
        hash_field=("dist", "shasum"),
        ver_delim="-",
    ),
    SourceKind.VOOM: RowSchema(
        spec_name_field="var-name",
        name_field="module",
        version_field="voom-version",
        date_field="date-str",
        hash_field=("sha",),
        creator_field="author",
    ),
}


def get_row_schema(source_kind: SourceKind) -> RowSchema:
    """Return the schema registered for ``source_kind``."""
    return ROW_SCHEMAS[source_kind]


def get_in(record: Mapping[str, Any], path: Sequence[str]) -> Any:
    """Follow ``path`` through nested mappings; None when any step is missing."""
    value: Any = record
    for key in path:
        if not isinstance(value, Mapping):
            return None
        value = value.get(key)
        if value is None:
            return None
    return value
