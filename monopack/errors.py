"""Exception hierarchy shared by all monopack stages."""

from __future__ import annotations


class MonopackError(Exception):
    """Base class for every error raised by monopack itself."""


class GraphError(MonopackError):
    """Invalid operation on a directed graph (unknown node, duplicate edge, cycle)."""


class ResolutionError(MonopackError):
    """A module specifier or node_modules path could not be resolved."""


class AnalysisError(MonopackError):
    """The project analyzer reported structural diagnostics."""

    def __init__(self, message: str, files: list[str] | None = None):
        super().__init__(message)
        self.files = files or []


class ConfigLoadError(MonopackError):
    """The config file could not be found or does not export a config."""


class ConfigValidationError(MonopackError):
    """The config is invalid; ``issues`` holds one human-readable line per problem."""

    def __init__(self, issues: list[str]):
        super().__init__("Invalid config:\n\n - " + "\n - ".join(issues))
        self.issues = list(issues)


class RegistryError(MonopackError):
    """Unexpected response from the package registry."""


class PublishError(MonopackError):
    """A package cannot be built or published with the given settings."""
