"""Resolved bundle -> linked bundle."""

from __future__ import annotations

import logging
from typing import Sequence

from monopack.linker.resource_graph import create_graph_from_resolved_bundle
from monopack.linker.substitute import SubstitutionSource, substitute_dependencies
from monopack.models import LinkedBundle, ResolvedBundle

logger = logging.getLogger(__name__)


def flatten_entry_points(bundle: ResolvedBundle) -> list[str]:
    paths: list[str] = []
    for entry_point in bundle.entry_points:
        paths.extend(entry_point.source_file_paths)
    return paths


class BundleLinker:

    def link_bundle(
        self,
        bundle: ResolvedBundle,
        bundle_dependencies: Sequence[SubstitutionSource] = (),
    ) -> LinkedBundle:
        resource_graph = create_graph_from_resolved_bundle(bundle)
        substituted = substitute_dependencies(resource_graph, bundle_dependencies)
        flattened = substituted.flatten(flatten_entry_points(bundle))

        logger.debug(
            "Linked %s: %d file(s), sibling package(s): %s",
            bundle.name,
            len(flattened.contents),
            ", ".join(flattened.linked_bundle_dependencies) or "none",
        )
        return LinkedBundle(
            name=bundle.name,
            contents=flattened.contents,
            entry_points=bundle.entry_points,
            linked_bundle_dependencies=flattened.linked_bundle_dependencies,
            external_dependencies=flattened.external_dependencies,
        )
