"""Versions, dependency split and package.json generation."""

from monopack.versioning.manager import VersionManager
from monopack.versioning.manifest import build_package_manifest, serialize_package_json
from monopack.versioning.version import increase_version
from monopack.versioning.versioned_bundle import (
    VersionedBundle,
    VersionedBundleWithManifest,
    build_versioned_bundle,
)

__all__ = [
    "VersionManager",
    "VersionedBundle",
    "VersionedBundleWithManifest",
    "build_package_manifest",
    "build_versioned_bundle",
    "increase_version",
    "serialize_package_json",
]
