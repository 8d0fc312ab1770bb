"""Discover every local file reachable from an entry point."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from monopack.errors import ResolutionError
from monopack.models import ModuleResolution, unique_list
from monopack.scanner.base import AnalysisOptions, ProjectAnalysis, ProjectAnalyzer
from monopack.scanner.module_graph import ModuleGraph, ModuleNodeData
from monopack.scanner.source_maps import SourceMapFileLocator

logger = logging.getLogger(__name__)

_MODULE_NAME = re.compile(r"/node_modules/(?P<name>[^@]+?|(?:@.+?/.+?))/")


@dataclass(frozen=True)
class ScanOptions:
    module_resolution: ModuleResolution = ModuleResolution.STATIC
    include_source_map_files: bool = False
    resolve_declaration_files: bool = False
    include_dev_dependencies: bool = False
    fail_on_compile_errors: bool = False
    main_package_json: dict[str, Any] = field(default_factory=dict)


def is_node_modules_path(file_path: str) -> bool:
    return "/node_modules/" in file_path


def extract_module_name(node_modules_path: str) -> str:
    """Top-level package name of a path inside node_modules (scoped names supported)."""
    match = _MODULE_NAME.search(node_modules_path)
    if match is None:
        raise ResolutionError(f"Couldn't find node_modules package name for '{node_modules_path}'")
    return match.group("name")


def is_known_node_module(name: str, options: ScanOptions) -> bool:
    manifest = options.main_package_json
    if name in (manifest.get("dependencies") or {}):
        return True
    if options.include_dev_dependencies:
        return name in (manifest.get("devDependencies") or {})
    return False


def determine_external_dependencies(referenced_file_paths: list[str], options: ScanOptions) -> tuple[str, ...]:
    names = unique_list(
        extract_module_name(file_path)
        for file_path in referenced_file_paths
        if is_node_modules_path(file_path)
    )
    known = []
    for name in names:
        if is_known_node_module(name, options):
            known.append(name)
        else:
            logger.debug("Dropping %s: not pinned in the main package.json", name)
    return tuple(known)


class DependencyScanner:
    """Depth-first scan driven by an explicit worklist.

    Every file is added to the graph before its own imports are scanned, and
    each edge is created once, in import order.
    """

    def __init__(self, analyzer: ProjectAnalyzer, source_map_locator: SourceMapFileLocator | None = None):
        self.analyzer = analyzer
        self.source_map_locator = source_map_locator or SourceMapFileLocator()

    async def scan(self, entry_file: str, root_folder: str, options: ScanOptions | None = None) -> ModuleGraph:
        options = options or ScanOptions()
        project = self.analyzer.analyze_project(root_folder, AnalysisOptions(
            module_resolution=options.module_resolution,
            resolve_declaration_files=options.resolve_declaration_files,
            fail_on_compile_errors=options.fail_on_compile_errors,
        ))

        graph = ModuleGraph()
        stack = [(entry_file, iter(await self._add_file(project, entry_file, graph, options)))]

        while stack:
            file_path, pending = stack[-1]
            local_file = next(pending, None)
            if local_file is None:
                stack.pop()
                continue

            if not graph.is_known(local_file):
                local_files = await self._add_file(project, local_file, graph, options)
                stack.append((local_file, iter(local_files)))
            if not graph.has_connection(file_path, local_file):
                graph.connect(file_path, local_file)

        logger.debug("Scanned %d file(s) from %s", len(graph), entry_file)
        return graph

    async def _add_file(
        self,
        project: ProjectAnalysis,
        file_path: str,
        graph: ModuleGraph,
        options: ScanOptions,
    ) -> list[str]:
        referenced = project.get_referenced_file_paths(file_path)
        source_map_file_path = None
        if options.include_source_map_files:
            source_map_file_path = await self.source_map_locator.locate(file_path)

        graph.add_dependency(file_path, ModuleNodeData(
            project=project,
            source_map_file_path=source_map_file_path,
            external_dependencies=determine_external_dependencies(referenced, options),
        ))
        return [path for path in referenced if not is_node_modules_path(path)]
