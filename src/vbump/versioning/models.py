"""Data models for version spec resolution."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class SourceKind(Enum):
    """Upstream schema/client a spec resolves against."""
    RPM = "rpm"
    DOCKER_HUB = "docker-hub"
    DOCKER_ARTIFACTORY = "docker-artifactory"
    DOCKER_ECR = "docker-ecr"
    NPM = "npm"
    VOOM = "voom"
    LITERAL = "literal"

    @property
    def is_remote(self) -> bool:
        """True for kinds answered by a network registry."""
        return self not in (SourceKind.VOOM, SourceKind.LITERAL)


# A spec map as read from YAML (hyphenated keys), before or after enrichment.
Spec = Dict[str, Any]

# A raw upstream record, later extended with the normalized envelope fields.
Row = Dict[str, Any]

# Stable key for one upstream query: (source kind, repository identity).
QueryKey = Tuple[SourceKind, Tuple[Any, ...]]


@dataclass
class ResolutionResult:
    """Ordered candidate rows for one component; the last one is current."""
    name: str
    spec: Spec
    rows: List[Row] = field(default_factory=list)

    @property
    def versions(self) -> List[str]:
        return [row["version"] for row in self.rows]

    @property
    def current(self) -> Optional[str]:
        return self.rows[-1]["version"] if self.rows else None

    @property
    def resolved(self) -> bool:
        return bool(self.rows)


@dataclass
class ResolveConfig:
    """Runtime settings for querying upstream sources."""
    resolve_remote: bool = True
    strict: bool = True
    all_local: bool = False
    root_dir: str = "."
    dirty_suffix: str = "_DIRTY"
    profile: Optional[str] = None
    artifactory_base_url: Optional[str] = None
    artifactory_username: Optional[str] = None
    artifactory_identity_token: Optional[str] = None
    timeout: int = 30
