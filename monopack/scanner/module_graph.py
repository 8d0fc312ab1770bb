"""Graph of local source files, keyed by absolute path, built by the dependency scanner."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from monopack.graph import DirectedGraph
from monopack.models import ExternalDependencies, add_reference, merge_external_dependencies, unique_list
from monopack.scanner.base import ProjectAnalysis


@dataclass
class ModuleNodeData:
    project: ProjectAnalysis
    source_map_file_path: str | None = None
    external_dependencies: tuple[str, ...] = ()


@dataclass(frozen=True)
class ModuleNode:
    """View of a graph node handed to ``walk`` visitors."""
    file_path: str
    local_files: tuple[str, ...]
    project: ProjectAnalysis
    source_map_file_path: str | None = None
    external_dependencies: tuple[str, ...] = ()


@dataclass(frozen=True)
class LocalFile:
    file_path: str
    direct_dependencies: tuple[str, ...] = ()
    project: ProjectAnalysis | None = None


@dataclass(frozen=True)
class DependencyFiles:
    local_files: list[LocalFile] = field(default_factory=list)
    external_dependencies: ExternalDependencies = field(default_factory=dict)


def merge_dependency_files(first: DependencyFiles, second: DependencyFiles) -> DependencyFiles:
    """Union two scan results; a later local file replaces an earlier one with the same path."""
    merged: dict[str, LocalFile] = {}
    for local_file in [*first.local_files, *second.local_files]:
        merged[local_file.file_path] = local_file

    return DependencyFiles(
        local_files=list(merged.values()),
        external_dependencies=merge_external_dependencies(first.external_dependencies, second.external_dependencies),
    )


class ModuleGraph:
    """Local-file graph; edges point from a file to every local file it imports."""

    def __init__(self):
        self._graph: DirectedGraph[ModuleNodeData] = DirectedGraph()

    def __len__(self) -> int:
        return len(self._graph)

    def add_dependency(self, file_path: str, data: ModuleNodeData) -> None:
        self._graph.add_node(file_path, data)

    def is_known(self, file_path: str) -> bool:
        return self._graph.has_node(file_path)

    def connect(self, from_file_path: str, to_file_path: str) -> None:
        self._graph.connect(from_file_path, to_file_path)

    def has_connection(self, from_file_path: str, to_file_path: str) -> bool:
        return self._graph.has_connection(from_file_path, to_file_path)

    def walk(self, start_file_path: str, visitor: Callable[[ModuleNode], None]) -> None:
        def _visit(node) -> None:
            visitor(ModuleNode(
                file_path=node.id,
                local_files=node.adjacent_ids,
                project=node.data.project,
                source_map_file_path=node.data.source_map_file_path,
                external_dependencies=node.data.external_dependencies,
            ))

        self._graph.visit_breadth_first_search(start_file_path, _visit)

    def flatten(self, start_file_path: str) -> DependencyFiles:
        """Collect every reachable file; source maps become direct dependencies of their file."""
        local_files: dict[str, LocalFile] = {}
        external_dependencies: ExternalDependencies = {}

        def _visit(node) -> None:
            direct_dependencies = list(node.adjacent_ids)
            map_file = node.data.source_map_file_path

            if map_file is not None:
                direct_dependencies.append(map_file)
                local_files[map_file] = LocalFile(file_path=map_file, project=node.data.project)

            local_files[node.id] = LocalFile(
                file_path=node.id,
                direct_dependencies=tuple(unique_list(direct_dependencies)),
                project=node.data.project,
            )

            for name in node.data.external_dependencies:
                add_reference(external_dependencies, name, node.id)

        self._graph.visit_breadth_first_search(start_file_path, _visit)

        return DependencyFiles(local_files=list(local_files.values()), external_dependencies=external_dependencies)
