"""Generate and serialize the package.json of a versioned bundle."""

from __future__ import annotations

import json
from typing import Any

from monopack.versioning.versioned_bundle import VersionedBundle

INDENTATION = 4


def build_package_manifest(bundle: VersionedBundle) -> dict[str, Any]:
    manifest: dict[str, Any] = {
        "name": bundle.name,
        "version": bundle.version,
        "main": bundle.main_file.target_file_path,
    }
    if bundle.dependencies:
        manifest["dependencies"] = dict(bundle.dependencies)
    if bundle.peer_dependencies:
        manifest["peerDependencies"] = dict(bundle.peer_dependencies)
    if bundle.package_type is not None:
        manifest["type"] = bundle.package_type
    if bundle.types_main_file is not None:
        manifest["types"] = bundle.types_main_file.target_file_path

    return {**bundle.additional_attributes, **manifest}


def _is_primitive(value: Any) -> bool:
    return isinstance(value, (str, int, float, bool))


def _sort_list(items: list[Any], ancestors: list[int]) -> list[Any]:
    sorted_items = [_deep_sort(item, ancestors) if isinstance(item, dict) else item for item in items]
    if all(_is_primitive(item) for item in sorted_items) and len({type(item) for item in sorted_items}) <= 1:
        return sorted(sorted_items)
    return sorted_items


def _deep_sort(value: Any, ancestors: list[int]) -> Any:
    if id(value) in ancestors:
        raise ValueError("Circular structures are not supported")
    if isinstance(value, dict):
        nested = [*ancestors, id(value)]
        return {key: _deep_sort(value[key], nested) for key in sorted(value)}
    if isinstance(value, list):
        return _sort_list(value, [*ancestors, id(value)])
    return value


def serialize_package_json(data: dict[str, Any]) -> str:
    """Keys are sorted at every level and lists of primitives are sorted too."""
    return json.dumps(_deep_sort(data, []), indent=INDENTATION, ensure_ascii=False)
