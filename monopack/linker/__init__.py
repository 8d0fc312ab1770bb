"""Cross-package substitution."""

from monopack.linker.import_paths import replace_import_paths
from monopack.linker.linker import BundleLinker
from monopack.linker.resource_graph import ResourceGraph, create_graph_from_resolved_bundle
from monopack.linker.substitute import substitute_dependencies
from monopack.linker.substituted_graph import SubstitutedResourceGraph

__all__ = [
    "BundleLinker",
    "ResourceGraph",
    "SubstitutedResourceGraph",
    "create_graph_from_resolved_bundle",
    "replace_import_paths",
    "substitute_dependencies",
]
