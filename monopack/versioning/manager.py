"""Produce versioned bundles together with their generated manifest file."""

from __future__ import annotations

import dataclasses
from typing import Any

from monopack.models import FileDescription, LinkedBundle
from monopack.versioning.manifest import build_package_manifest, serialize_package_json
from monopack.versioning.version import increase_version
from monopack.versioning.versioned_bundle import (
    VersionedBundle,
    VersionedBundleWithManifest,
    build_versioned_bundle,
)


def _with_manifest(bundle: VersionedBundle) -> VersionedBundleWithManifest:
    manifest = build_package_manifest(bundle)
    fields = {f.name: getattr(bundle, f.name) for f in dataclasses.fields(VersionedBundle)}
    return VersionedBundleWithManifest(
        **fields,
        package_json=manifest,
        manifest_file=FileDescription(
            file_path="package.json",
            content=serialize_package_json(manifest),
            is_executable=False,
        ),
    )


class VersionManager:

    def add_version(
        self,
        bundle: LinkedBundle,
        version: str,
        main_package_json: dict[str, Any],
        bundle_dependencies: list[VersionedBundle] | None = None,
        bundle_peer_dependencies: list[VersionedBundle] | None = None,
        additional_package_json_attributes: dict[str, Any] | None = None,
    ) -> VersionedBundleWithManifest:
        versioned = build_versioned_bundle(
            bundle,
            version,
            main_package_json,
            bundle_dependencies=bundle_dependencies,
            bundle_peer_dependencies=bundle_peer_dependencies,
            additional_package_json_attributes=additional_package_json_attributes,
        )
        return _with_manifest(versioned)

    def increase_version(
        self,
        bundle: VersionedBundle,
        minimum_version: str | None = None,
    ) -> VersionedBundleWithManifest:
        new_version = increase_version(bundle.version, minimum_version)
        return self.set_version(bundle, new_version)

    def set_version(self, bundle: VersionedBundle, version: str) -> VersionedBundleWithManifest:
        fields = {f.name: getattr(bundle, f.name) for f in dataclasses.fields(VersionedBundle)}
        fields["version"] = version
        return _with_manifest(VersionedBundle(**fields))
