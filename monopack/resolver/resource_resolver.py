"""Resolve every file a package ships, starting from its entry points."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Union

from monopack.config.schema import AdditionalFile, EntryPoint
from monopack.errors import ResolutionError
from monopack.file_manager import FileManager
from monopack.models import (
    EntryPointFiles,
    ModuleResolution,
    ResolvedBundle,
    ResolvedContent,
    TransferableFileDescription,
)
from monopack.resolver.content import ResolvedBundleFile, combine_all_bundle_files
from monopack.scanner.dependency_scanner import DependencyScanner, ScanOptions
from monopack.scanner.module_graph import DependencyFiles, merge_dependency_files

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResourceResolveOptions:
    name: str
    sources_folder: str
    entry_points: list[EntryPoint]
    main_package_json: dict[str, Any] = field(default_factory=dict)
    module_resolution: ModuleResolution = ModuleResolution.STATIC
    include_source_map_files: bool = False
    additional_files: list[Union[AdditionalFile, str]] = field(default_factory=list)


def _find_by_source_path(file_path: str, contents: list[ResolvedContent]) -> TransferableFileDescription | None:
    for content in contents:
        if content.file_description.source_file_path == file_path:
            return content.file_description
    return None


class ResourceResolver:

    def __init__(self, scanner: DependencyScanner, file_manager: FileManager | None = None):
        self.scanner = scanner
        self.file_manager = file_manager or FileManager()

    async def _scan_entry_points(self, options: ResourceResolveOptions) -> DependencyFiles:
        dependency_files = DependencyFiles()

        for entry_point in options.entry_points:
            for entry_file, resolve_declaration_files in (
                (entry_point.js, False),
                (entry_point.declaration_file, True),
            ):
                if entry_file is None:
                    continue
                graph = await self.scanner.scan(entry_file, options.sources_folder, ScanOptions(
                    module_resolution=options.module_resolution,
                    include_source_map_files=options.include_source_map_files,
                    resolve_declaration_files=resolve_declaration_files,
                    include_dev_dependencies=False,
                    main_package_json=options.main_package_json,
                ))
                dependency_files = merge_dependency_files(dependency_files, graph.flatten(entry_file))

        return dependency_files

    async def _read_content(self, bundle_file: ResolvedBundleFile) -> ResolvedContent:
        description = await self.file_manager.get_transferable_file_description(
            bundle_file.source_file_path,
            bundle_file.target_file_path,
        )
        return ResolvedContent(
            file_description=description,
            direct_dependencies=bundle_file.direct_dependencies,
            project=bundle_file.project,
            is_explicitly_included=bundle_file.is_explicitly_included,
        )

    async def resolve(self, options: ResourceResolveOptions) -> ResolvedBundle:
        dependency_files = await self._scan_entry_points(options)
        bundle_files = combine_all_bundle_files(
            options.sources_folder,
            dependency_files.local_files,
            options.additional_files,
        )
        contents = list(await asyncio.gather(*(self._read_content(f) for f in bundle_files)))

        entry_points = []
        for entry_point in options.entry_points:
            js = _find_by_source_path(entry_point.js, contents)
            if js is None:
                raise ResolutionError(f"Failed to resolve resource for entry point {entry_point.js}")
            declaration_file = None
            if entry_point.declaration_file is not None:
                declaration_file = _find_by_source_path(entry_point.declaration_file, contents)
            entry_points.append(EntryPointFiles(js=js, declaration_file=declaration_file))

        logger.debug("Resolved %d file(s) for %s", len(contents), options.name)
        return ResolvedBundle(
            name=options.name,
            contents=contents,
            entry_points=entry_points,
            external_dependencies=dependency_files.external_dependencies,
        )
