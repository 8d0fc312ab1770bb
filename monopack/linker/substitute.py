"""Replace files that sibling packages already ship with imports of those packages."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol, Sequence

from monopack.linker.import_paths import replace_import_paths
from monopack.linker.resource_graph import ResourceGraph
from monopack.linker.substituted_graph import SubstitutedNodeData, SubstitutedResourceGraph
from monopack.models import LinkedBundleResource, TransferableFileDescription, unique_list

logger = logging.getLogger(__name__)


class SubstitutionSource(Protocol):
    """A sibling package that is already fully linked."""
    name: str
    contents: list[LinkedBundleResource]


@dataclass(frozen=True)
class Replacement:
    target_path: str
    package_name: str


def find_replacement(file_path: str, bundle_dependencies: Sequence[SubstitutionSource]) -> Replacement | None:
    """First sibling, in declaration order, that ships ``file_path``."""
    for bundle in bundle_dependencies:
        for content in bundle.contents:
            if content.file_description.source_file_path == file_path:
                return Replacement(
                    target_path=f"{bundle.name}/{content.file_description.target_file_path}",
                    package_name=bundle.name,
                )
    return None


def substitute_dependencies(
    resource_graph: ResourceGraph,
    bundle_dependencies: Sequence[SubstitutionSource],
) -> SubstitutedResourceGraph:
    substituted = SubstitutedResourceGraph()
    outstanding: list[tuple[str, str]] = []

    def _substitute(node) -> None:
        if substituted.is_known(node.id):
            return

        replacements: dict[str, str] = {}
        used_bundles: list[str] = []
        for dependency in node.adjacent_ids:
            replacement = find_replacement(dependency, bundle_dependencies)
            if replacement is None:
                outstanding.append((node.id, dependency))
            else:
                replacements[dependency] = replacement.target_path
                used_bundles.append(replacement.package_name)

        description = node.data.file_description
        if replacements:
            logger.debug("Substituting %d import(s) in %s", len(replacements), node.id)
            description = TransferableFileDescription(
                source_file_path=description.source_file_path,
                target_file_path=description.target_file_path,
                content=replace_import_paths(
                    node.data.project,
                    description.source_file_path,
                    description.content,
                    replacements,
                ),
                is_executable=description.is_executable,
            )

        substituted.add(node.id, SubstitutedNodeData(
            file_description=description,
            external_dependencies=node.data.external_dependencies,
            bundle_dependencies=tuple(unique_list(used_bundles)),
            is_substituted=bool(replacements),
            is_explicitly_included=node.data.is_explicitly_included,
        ))

    resource_graph.traverse(_substitute)

    for from_id, to_id in outstanding:
        if not substituted.has_connection(from_id, to_id):
            substituted.connect(from_id, to_id)

    return substituted
