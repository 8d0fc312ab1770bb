"""Validate a raw config and derive the package graph the scheduler runs on."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from monopack.config.schema import MonopackConfig, PackageConfig
from monopack.errors import ConfigValidationError
from monopack.graph import DirectedGraph

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidConfig:
    config: MonopackConfig
    package_configs: dict[str, PackageConfig]
    package_graph: DirectedGraph[None]


def format_validation_error(error: ValidationError) -> list[str]:
    """One ``dotted.path: message`` line per pydantic error."""
    issues = []
    for detail in error.errors():
        message = detail["msg"].removeprefix("Value error, ")
        location = ".".join(str(part) for part in detail["loc"])
        issues.append(f"{location}: {message}" if location else message)
    return issues


def _missing_dependency_issues(package_configs: dict[str, PackageConfig]) -> list[str]:
    issues = []
    for package in package_configs.values():
        for prefix, dependencies in (
            ("Bundle", package.bundle_dependencies),
            ("Bundle peer", package.bundle_peer_dependencies),
        ):
            for dependency in dependencies:
                if dependency not in package_configs:
                    issues.append(
                        f'{prefix} dependency "{dependency}" referenced in "{package.name}" does not exist'
                    )
    return issues


def _duplicate_package_issues(packages: list[PackageConfig]) -> list[str]:
    seen: set[str] = set()
    issues = []
    for package in packages:
        if package.name in seen:
            issues.append(f'Duplicate package definition with the name "{package.name}"')
        seen.add(package.name)
    return issues


def build_package_graph(package_configs: dict[str, PackageConfig]) -> DirectedGraph[None]:
    """Edges point from a package to every package it embeds."""
    graph: DirectedGraph[None] = DirectedGraph()
    for name in package_configs:
        graph.add_node(name, None)

    for package in package_configs.values():
        for dependency in [*package.bundle_dependencies, *package.bundle_peer_dependencies]:
            if not graph.has_connection(package.name, dependency):
                graph.connect(package.name, dependency)
    return graph


def validate_config(raw_config: Any) -> ValidConfig:
    """Return the validated config or raise ConfigValidationError listing every issue."""
    try:
        config = MonopackConfig.model_validate(raw_config)
    except ValidationError as e:
        raise ConfigValidationError(format_validation_error(e)) from e

    package_configs = {package.name: package for package in config.packages}
    duplicate_issues = _duplicate_package_issues(config.packages)

    missing_issues = _missing_dependency_issues(package_configs)
    if missing_issues:
        raise ConfigValidationError([*duplicate_issues, *missing_issues])

    package_graph = build_package_graph(package_configs)
    cycle_issues = [
        f"Unexpected cyclic dependency path: [{'→'.join([*cycle, cycle[0]])}]"
        for cycle in package_graph.detect_cycles()
    ]
    if duplicate_issues or cycle_issues:
        raise ConfigValidationError([*duplicate_issues, *cycle_issues])

    logger.debug("Validated config with %d package(s)", len(package_configs))
    return ValidConfig(config=config, package_configs=package_configs, package_graph=package_graph)
