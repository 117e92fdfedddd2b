"""Exceptions raised while normalizing and resolving version specs."""

from __future__ import annotations

from typing import List, Optional


class VersionResolutionError(Exception):
    """Base class for all resolution failures."""


class SpecValidationError(VersionResolutionError):
    """One or more explicit specs are missing fields required by their type."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("Invalid specs found:\n" + "\n".join(self.errors))


class ConfigurationError(VersionResolutionError):
    """A component has neither queryable rows nor a ``version-default``."""

    def __init__(self, name: str, message: Optional[str] = None):
        self.name = name
        super().__init__(message or f"{name} must have a queryable source or a version-default")


class UpstreamQueryError(VersionResolutionError):
    """An upstream registry/repository query failed."""

    def __init__(self, source_kind: str, repository: str, reason: str):
        self.source_kind = source_kind
        self.repository = repository
        self.reason = reason
        super().__init__(f"Error querying {repository} ({source_kind}): {reason}")


class UnresolvedVersionsError(VersionResolutionError):
    """Filtering left one or more components without a candidate version."""

    def __init__(self, names: List[str]):
        self.names = list(names)
        super().__init__("Could not resolve versions for: " + ", ".join(self.names))
