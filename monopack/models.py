"""Data models shared by the scan -> resolve -> link -> version pipeline."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, TypeVar

if TYPE_CHECKING:
    from monopack.scanner.base import ProjectAnalysis

T = TypeVar("T")


class ModuleResolution(enum.Enum):
    """How ambiguous import statements are interpreted by the analyzer."""
    STATIC = "module"
    DYNAMIC = "common-js"


@dataclass(frozen=True)
class FileDescription:
    """A file as it will appear inside an artifact."""
    file_path: str
    content: str
    is_executable: bool = False


@dataclass(frozen=True)
class TransferableFileDescription:
    """A file read from the source tree, together with its place in the package."""
    source_file_path: str
    target_file_path: str
    content: str
    is_executable: bool = False


@dataclass(frozen=True)
class ExternalDependency:
    """A third-party (or sibling) package plus the files that import it."""
    name: str
    referenced_from: tuple[str, ...]

    def __post_init__(self):
        if not self.referenced_from:
            raise ValueError(f"External dependency {self.name!r} must be referenced from at least one file")


ExternalDependencies = dict[str, ExternalDependency]


def unique_list(items: Iterable[T]) -> list[T]:
    """Deduplicate while keeping the first occurrence of every item."""
    return list(dict.fromkeys(items))


def add_reference(dependencies: ExternalDependencies, name: str, file_path: str) -> None:
    """Record that ``file_path`` references ``name``, in place."""
    existing = dependencies.get(name)
    if existing is None:
        dependencies[name] = ExternalDependency(name=name, referenced_from=(file_path,))
    else:
        dependencies[name] = ExternalDependency(
            name=name,
            referenced_from=tuple(unique_list([*existing.referenced_from, file_path])),
        )


def merge_external_dependencies(
    first: ExternalDependencies,
    second: ExternalDependencies,
) -> ExternalDependencies:
    """Union two ledgers; provenance lists are merged order-preserving."""
    merged: ExternalDependencies = dict(first)
    for dependency in second.values():
        existing = merged.get(dependency.name)
        if existing is None:
            merged[dependency.name] = dependency
        else:
            merged[dependency.name] = ExternalDependency(
                name=dependency.name,
                referenced_from=tuple(unique_list([*existing.referenced_from, *dependency.referenced_from])),
            )
    return merged


@dataclass(frozen=True)
class EntryPointFiles:
    """Resolved entry point: the executable file and its optional declaration file."""
    js: TransferableFileDescription
    declaration_file: TransferableFileDescription | None = None

    @property
    def source_file_paths(self) -> list[str]:
        if self.declaration_file is not None:
            return [self.js.source_file_path, self.declaration_file.source_file_path]
        return [self.js.source_file_path]


@dataclass(frozen=True)
class ResolvedContent:
    """One file of a resolved bundle."""
    file_description: TransferableFileDescription
    direct_dependencies: tuple[str, ...] = ()
    project: ProjectAnalysis | None = None
    is_explicitly_included: bool = False


@dataclass(frozen=True)
class ResolvedBundle:
    """Output of the resource resolver, consumed once by the linker."""
    name: str
    contents: list[ResolvedContent]
    entry_points: list[EntryPointFiles]
    external_dependencies: ExternalDependencies = field(default_factory=dict)


@dataclass(frozen=True)
class LinkedBundleResource:
    """A bundle file after linking."""
    file_description: TransferableFileDescription
    direct_dependencies: tuple[str, ...] = ()
    is_substituted: bool = False
    is_explicitly_included: bool = False


@dataclass(frozen=True)
class LinkedBundle:
    """Final file list of a package plus its sibling and third-party ledgers."""
    name: str
    contents: list[LinkedBundleResource]
    entry_points: list[EntryPointFiles]
    linked_bundle_dependencies: ExternalDependencies = field(default_factory=dict)
    external_dependencies: ExternalDependencies = field(default_factory=dict)
