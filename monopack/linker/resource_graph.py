"""Graph of the files of a resolved bundle."""

from __future__ import annotations

from dataclasses import dataclass

from monopack.graph import DirectedGraph
from monopack.models import ExternalDependencies, ResolvedBundle, ResolvedContent, TransferableFileDescription
from monopack.scanner.base import ProjectAnalysis


@dataclass(frozen=True)
class ResourceNodeData:
    file_description: TransferableFileDescription
    external_dependencies: tuple[str, ...] = ()
    project: ProjectAnalysis | None = None
    is_explicitly_included: bool = False


ResourceGraph = DirectedGraph[ResourceNodeData]


def _resource_external_dependencies(resource: ResolvedContent, ledger: ExternalDependencies) -> tuple[str, ...]:
    source_path = resource.file_description.source_file_path
    return tuple(
        dependency.name for dependency in ledger.values()
        if source_path in dependency.referenced_from
    )


def create_graph_from_resolved_bundle(bundle: ResolvedBundle) -> ResourceGraph:
    graph: ResourceGraph = DirectedGraph()

    for resource in bundle.contents:
        graph.add_node(resource.file_description.source_file_path, ResourceNodeData(
            file_description=resource.file_description,
            external_dependencies=_resource_external_dependencies(resource, bundle.external_dependencies),
            project=resource.project,
            is_explicitly_included=resource.is_explicitly_included,
        ))

    for resource in bundle.contents:
        source_path = resource.file_description.source_file_path
        for dependency in resource.direct_dependencies:
            if not graph.has_connection(source_path, dependency):
                graph.connect(source_path, dependency)

    return graph
