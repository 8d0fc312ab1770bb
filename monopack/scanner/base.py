"""Abstract project analyzer: the capability the dependency scanner and linker rely on."""

from __future__ import annotations

import abc
from dataclasses import dataclass

from monopack.models import ModuleResolution


@dataclass(frozen=True)
class AnalysisOptions:
    module_resolution: ModuleResolution = ModuleResolution.STATIC
    resolve_declaration_files: bool = False
    fail_on_compile_errors: bool = False


@dataclass(frozen=True)
class ImportLiteral:
    """A module-specifier string literal; offsets are UTF-8 byte offsets of its value."""
    value: str
    start: int
    end: int


class ProjectAnalysis(abc.ABC):
    """Analysis context of one project folder, kept on graph nodes for later rewriting."""

    root_folder: str
    options: AnalysisOptions

    @abc.abstractmethod
    def get_referenced_file_paths(self, file_path: str) -> list[str]:
        """Absolute paths of every file ``file_path`` imports, builtins excluded.

        Raises ResolutionError for a specifier that resolves to nothing.
        """

    @abc.abstractmethod
    def find_import_literals(self, file_path: str, content: str) -> list[ImportLiteral]:
        """Module-specifier literals of ``content``, parsed as if it lived at ``file_path``."""

    @abc.abstractmethod
    def resolve_literal(self, specifier: str, containing_file: str) -> str | None:
        """Resolve a specifier to an absolute path; None when it cannot be resolved."""


class ProjectAnalyzer(abc.ABC):
    """Factory for per-folder analysis contexts."""

    @abc.abstractmethod
    def analyze_project(self, folder: str, options: AnalysisOptions) -> ProjectAnalysis:
        """Create the analysis context for ``folder``."""
