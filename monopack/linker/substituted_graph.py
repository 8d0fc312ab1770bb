"""Resource graph after cross-package substitution."""

from __future__ import annotations

from dataclasses import dataclass

from monopack.graph import DirectedGraph
from monopack.models import ExternalDependencies, LinkedBundleResource, TransferableFileDescription, add_reference


@dataclass(frozen=True)
class SubstitutedNodeData:
    file_description: TransferableFileDescription
    external_dependencies: tuple[str, ...] = ()
    bundle_dependencies: tuple[str, ...] = ()
    is_substituted: bool = False
    is_explicitly_included: bool = False


@dataclass(frozen=True)
class FlattenedResources:
    contents: list[LinkedBundleResource]
    linked_bundle_dependencies: ExternalDependencies
    external_dependencies: ExternalDependencies


class SubstitutedResourceGraph:

    def __init__(self):
        self._graph: DirectedGraph[SubstitutedNodeData] = DirectedGraph()

    def add(self, file_path: str, data: SubstitutedNodeData) -> None:
        self._graph.add_node(file_path, data)

    def is_known(self, file_path: str) -> bool:
        return self._graph.has_node(file_path)

    def connect(self, from_file_path: str, to_file_path: str) -> None:
        self._graph.connect(from_file_path, to_file_path)

    def has_connection(self, from_file_path: str, to_file_path: str) -> bool:
        return self._graph.has_connection(from_file_path, to_file_path)

    def flatten(self, entry_points: list[str]) -> FlattenedResources:
        """Walk from every entry point, then from every explicitly included file.

        A file reached from several starts is listed once, at its first visit.
        """
        contents: list[LinkedBundleResource] = []
        seen: set[str] = set()
        linked_bundle_dependencies: ExternalDependencies = {}
        external_dependencies: ExternalDependencies = {}

        def _visit(node) -> None:
            if node.id in seen:
                return
            seen.add(node.id)
            contents.append(LinkedBundleResource(
                file_description=node.data.file_description,
                direct_dependencies=node.adjacent_ids,
                is_substituted=node.data.is_substituted,
                is_explicitly_included=node.data.is_explicitly_included,
            ))
            for name in node.data.bundle_dependencies:
                add_reference(linked_bundle_dependencies, name, node.id)
            for name in node.data.external_dependencies:
                add_reference(external_dependencies, name, node.id)

        explicitly_included = [node.id for node in self._graph if node.data.is_explicitly_included]
        for start in [*entry_points, *explicitly_included]:
            self._graph.visit_breadth_first_search(start, _visit)

        return FlattenedResources(
            contents=contents,
            linked_bundle_dependencies=linked_bundle_dependencies,
            external_dependencies=external_dependencies,
        )
