"""Attach a version and a dependency split to a linked bundle."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from monopack.errors import PublishError
from monopack.models import FileDescription, LinkedBundle, LinkedBundleResource, TransferableFileDescription


@dataclass(frozen=True)
class VersionedBundle:
    name: str
    version: str
    contents: list[LinkedBundleResource]
    main_file: TransferableFileDescription
    dependencies: dict[str, str] = field(default_factory=dict)
    peer_dependencies: dict[str, str] = field(default_factory=dict)
    additional_attributes: dict[str, Any] = field(default_factory=dict)
    types_main_file: TransferableFileDescription | None = None
    package_type: str | None = None


@dataclass(frozen=True)
class VersionedBundleWithManifest(VersionedBundle):
    package_json: dict[str, Any] = field(default_factory=dict)
    manifest_file: FileDescription | None = None


def _find_bundle(bundles: list[VersionedBundle], name: str) -> VersionedBundle | None:
    for bundle in bundles:
        if bundle.name == name:
            return bundle
    return None


def _split_bundle_dependencies(
    bundle: LinkedBundle,
    bundle_dependencies: list[VersionedBundle],
    bundle_peer_dependencies: list[VersionedBundle],
) -> tuple[dict[str, str], dict[str, str]]:
    dependencies: dict[str, str] = {}
    peer_dependencies: dict[str, str] = {}
    for name in bundle.linked_bundle_dependencies:
        peer = _find_bundle(bundle_peer_dependencies, name)
        if peer is not None:
            peer_dependencies[name] = peer.version
            continue
        regular = _find_bundle(bundle_dependencies, name)
        if regular is None:
            raise PublishError(f"Couldn't determine version number of bundle dependency {name}")
        dependencies[name] = regular.version
    return dependencies, peer_dependencies


def _split_external_dependencies(
    bundle: LinkedBundle,
    main_package_json: dict[str, Any],
) -> tuple[dict[str, str], dict[str, str]]:
    declared = main_package_json.get("dependencies") or {}
    declared_peers = main_package_json.get("peerDependencies") or {}

    dependencies: dict[str, str] = {}
    peer_dependencies: dict[str, str] = {}
    for name in bundle.external_dependencies:
        if name in declared_peers:
            peer_dependencies[name] = declared_peers[name]
        elif name in declared:
            dependencies[name] = declared[name]
        else:
            raise PublishError(
                f"Couldn't determine version number of {name}, because it is not listed in the main package.json"
            )
    return dependencies, peer_dependencies


def build_versioned_bundle(
    bundle: LinkedBundle,
    version: str,
    main_package_json: dict[str, Any],
    bundle_dependencies: list[VersionedBundle] | None = None,
    bundle_peer_dependencies: list[VersionedBundle] | None = None,
    additional_package_json_attributes: dict[str, Any] | None = None,
) -> VersionedBundle:
    """Main and types files come from the first entry point."""
    first_entry_point = bundle.entry_points[0]
    sibling_deps, sibling_peers = _split_bundle_dependencies(
        bundle, bundle_dependencies or [], bundle_peer_dependencies or []
    )
    external_deps, external_peers = _split_external_dependencies(bundle, main_package_json)

    return VersionedBundle(
        name=bundle.name,
        version=version,
        contents=bundle.contents,
        main_file=first_entry_point.js,
        types_main_file=first_entry_point.declaration_file,
        dependencies={**sibling_deps, **external_deps},
        peer_dependencies={**sibling_peers, **external_peers},
        additional_attributes=dict(additional_package_json_attributes or {}),
        package_type=main_package_json.get("type"),
    )
