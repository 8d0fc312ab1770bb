"""Turn one validated package config into the options of a single build."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Union

from monopack.config.schema import (
    AdditionalFile,
    AutomaticVersioning,
    EntryPoint,
    MonopackConfig,
    PackageConfig,
    RegistrySettings,
    VersioningSettings,
)
from monopack.errors import PublishError
from monopack.models import ModuleResolution
from monopack.versioning import VersionedBundle


@dataclass(frozen=True)
class BuildOptions:
    """Everything needed to resolve, link and version one package.

    Paths of entry points and additional files are absolute.
    """
    name: str
    sources_folder: str
    entry_points: list[EntryPoint]
    main_package_json: dict[str, Any]
    module_resolution: ModuleResolution = ModuleResolution.STATIC
    include_source_map_files: bool = False
    additional_files: list[Union[AdditionalFile, str]] = field(default_factory=list)
    additional_package_json_attributes: dict[str, Any] = field(default_factory=dict)
    bundle_dependencies: list[VersionedBundle] = field(default_factory=list)
    bundle_peer_dependencies: list[VersionedBundle] = field(default_factory=list)
    version: str = "0.0.0"


@dataclass(frozen=True)
class BuildAndPublishOptions(BuildOptions):
    registry_settings: RegistrySettings | None = None
    versioning: VersioningSettings = field(default_factory=AutomaticVersioning)


def ensure_absolute_path(file_path: str, folder: str) -> str:
    if os.path.isabs(file_path):
        return file_path
    return os.path.join(folder, file_path)


def normalize_entry_point(entry_point: EntryPoint, sources_folder: str) -> EntryPoint:
    declaration_file = entry_point.declaration_file
    return EntryPoint(
        js=ensure_absolute_path(entry_point.js, sources_folder),
        declaration_file=None if declaration_file is None else ensure_absolute_path(declaration_file, sources_folder),
    )


def normalize_additional_file(
    additional_file: Union[AdditionalFile, str],
    sources_folder: str,
) -> Union[AdditionalFile, str]:
    if isinstance(additional_file, str):
        return additional_file
    return AdditionalFile(
        source_file_path=ensure_absolute_path(additional_file.source_file_path, sources_folder),
        target_file_path=additional_file.target_file_path,
    )


def _dependency_names_to_bundles(names: list[str], bundles: list[VersionedBundle]) -> list[VersionedBundle]:
    resolved = []
    for name in names:
        match = next((bundle for bundle in bundles if bundle.name == name), None)
        if match is None:
            raise PublishError(f'Dependent bundle "{name}" not found')
        resolved.append(match)
    return resolved


def _setting(package: PackageConfig, config: MonopackConfig, name: str, default: Any = None) -> Any:
    value = getattr(package, name)
    if value is None and config.common_package_settings is not None:
        value = getattr(config.common_package_settings, name)
    return default if value is None else value


def config_to_build_and_publish_options(
    package_name: str,
    package_configs: dict[str, PackageConfig],
    config: MonopackConfig,
    existing_bundles: list[VersionedBundle],
) -> BuildAndPublishOptions:
    """Package-level settings win over ``common_package_settings``."""
    package = package_configs.get(package_name)
    if package is None:
        raise PublishError(f'Config for package "{package_name}" is missing')

    sources_folder = _setting(package, config, "sources_folder")
    main_package_json = _setting(package, config, "main_package_json").as_dict()
    versioning = package.versioning

    return BuildAndPublishOptions(
        name=package.name,
        sources_folder=sources_folder,
        entry_points=[normalize_entry_point(e, sources_folder) for e in package.entry_points],
        main_package_json=main_package_json,
        module_resolution=(
            ModuleResolution.STATIC if main_package_json.get("type") == "module" else ModuleResolution.DYNAMIC
        ),
        include_source_map_files=_setting(package, config, "include_source_map_files", False),
        additional_files=[
            normalize_additional_file(f, sources_folder)
            for f in _setting(package, config, "additional_files", [])
        ],
        additional_package_json_attributes=dict(
            _setting(package, config, "additional_package_json_attributes", {})
        ),
        bundle_dependencies=_dependency_names_to_bundles(package.bundle_dependencies, existing_bundles),
        bundle_peer_dependencies=_dependency_names_to_bundles(package.bundle_peer_dependencies, existing_bundles),
        version=getattr(versioning, "version", "0.0.0"),
        registry_settings=config.registry_settings,
        versioning=versioning,
    )
