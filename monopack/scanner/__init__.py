"""Module graph construction: analyzer, resolver and dependency scanner."""

from monopack.scanner.base import AnalysisOptions, ImportLiteral, ProjectAnalysis, ProjectAnalyzer
from monopack.scanner.dependency_scanner import DependencyScanner, ScanOptions, extract_module_name
from monopack.scanner.module_graph import DependencyFiles, LocalFile, ModuleGraph, merge_dependency_files
from monopack.scanner.source_maps import SourceMapFileLocator
from monopack.scanner.treesitter_analyzer import TreeSitterProjectAnalyzer

__all__ = [
    "AnalysisOptions",
    "DependencyFiles",
    "DependencyScanner",
    "ImportLiteral",
    "LocalFile",
    "ModuleGraph",
    "ProjectAnalysis",
    "ProjectAnalyzer",
    "ScanOptions",
    "SourceMapFileLocator",
    "TreeSitterProjectAnalyzer",
    "extract_module_name",
    "merge_dependency_files",
]
