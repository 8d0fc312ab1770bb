"""Entry point -> resolved bundle."""

from monopack.resolver.content import ResolvedBundleFile, combine_all_bundle_files
from monopack.resolver.resource_resolver import ResourceResolveOptions, ResourceResolver

__all__ = ["ResolvedBundleFile", "ResourceResolveOptions", "ResourceResolver", "combine_all_bundle_files"]
