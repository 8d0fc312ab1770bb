"""Combine scanned local files and configured additional files into bundle files."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Union

from monopack.config.schema import AdditionalFile
from monopack.errors import ResolutionError
from monopack.scanner.base import ProjectAnalysis
from monopack.scanner.module_graph import LocalFile


@dataclass(frozen=True)
class ResolvedBundleFile:
    source_file_path: str
    target_file_path: str
    direct_dependencies: tuple[str, ...] = ()
    project: ProjectAnalysis | None = None
    is_explicitly_included: bool = False


def _additional_bundle_file(sources_folder: str, additional_file: Union[AdditionalFile, str]) -> ResolvedBundleFile:
    if isinstance(additional_file, str):
        return ResolvedBundleFile(
            source_file_path=os.path.join(sources_folder, additional_file),
            target_file_path=additional_file,
            is_explicitly_included=True,
        )

    if os.path.isabs(additional_file.target_file_path):
        raise ResolutionError("The target_file_path must be relative")

    source_file_path = additional_file.source_file_path
    if not os.path.isabs(source_file_path):
        source_file_path = os.path.join(sources_folder, source_file_path)

    return ResolvedBundleFile(
        source_file_path=source_file_path,
        target_file_path=additional_file.target_file_path,
        is_explicitly_included=True,
    )


def combine_all_bundle_files(
    sources_folder: str,
    local_files: list[LocalFile],
    additional_files: list[Union[AdditionalFile, str]],
) -> list[ResolvedBundleFile]:
    """Scanned files get target paths relative to ``sources_folder``; additional files follow."""
    resolved = [
        ResolvedBundleFile(
            source_file_path=local_file.file_path,
            target_file_path=os.path.relpath(local_file.file_path, sources_folder),
            direct_dependencies=local_file.direct_dependencies,
            project=local_file.project,
        )
        for local_file in local_files
    ]
    resolved.extend(_additional_bundle_file(sources_folder, f) for f in additional_files)
    return resolved
