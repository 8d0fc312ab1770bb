"""Resolve, link, version and optionally publish a single package."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal

from monopack.config.mapping import BuildAndPublishOptions, BuildOptions
from monopack.errors import PublishError
from monopack.linker import BundleLinker
from monopack.models import LinkedBundle
from monopack.progress import ProgressBroadcaster
from monopack.publisher import BundleEmitter
from monopack.resolver import ResourceResolveOptions, ResourceResolver
from monopack.versioning import VersionedBundleWithManifest, VersionManager

logger = logging.getLogger(__name__)

PublishStatus = Literal["already-published", "initial-version", "new-version"]


@dataclass(frozen=True)
class PublishResult:
    status: PublishStatus
    bundle: VersionedBundleWithManifest


class PackageProcessor:

    def __init__(
        self,
        resource_resolver: ResourceResolver,
        linker: BundleLinker,
        version_manager: VersionManager,
        emitter: BundleEmitter,
        progress: ProgressBroadcaster | None = None,
    ):
        self.resource_resolver = resource_resolver
        self.linker = linker
        self.version_manager = version_manager
        self.emitter = emitter
        self.progress = progress or ProgressBroadcaster()

    async def _resolve_and_link(self, options: BuildOptions) -> LinkedBundle:
        self.progress.emit("resolving", package_name=options.name)
        resolved = await self.resource_resolver.resolve(ResourceResolveOptions(
            name=options.name,
            sources_folder=options.sources_folder,
            entry_points=options.entry_points,
            main_package_json=options.main_package_json,
            module_resolution=options.module_resolution,
            include_source_map_files=options.include_source_map_files,
            additional_files=options.additional_files,
        ))
        self.progress.emit("linking", package_name=options.name)
        return self.linker.link_bundle(
            resolved,
            [*options.bundle_dependencies, *options.bundle_peer_dependencies],
        )

    def _add_version(self, linked: LinkedBundle, options: BuildOptions, version: str) -> VersionedBundleWithManifest:
        return self.version_manager.add_version(
            linked,
            version,
            options.main_package_json,
            bundle_dependencies=options.bundle_dependencies,
            bundle_peer_dependencies=options.bundle_peer_dependencies,
            additional_package_json_attributes=options.additional_package_json_attributes,
        )

    async def build(self, options: BuildOptions) -> VersionedBundleWithManifest:
        """Build at ``options.version`` without consulting the registry."""
        linked = await self._resolve_and_link(options)
        self.progress.emit("building", package_name=options.name, version=options.version)
        return self._add_version(linked, options, options.version)

    async def try_build_and_publish(self, options: BuildAndPublishOptions) -> PublishResult:
        """Work out what publishing would do, without publishing."""
        if options.registry_settings is None:
            raise PublishError(f"Registry settings for {options.name} are missing")

        linked = await self._resolve_and_link(options)
        current_version = await self.emitter.determine_current_version(
            options.name, options.registry_settings, options.versioning,
        )
        version = current_version or "0.0.0"
        self.progress.emit("building", package_name=options.name, version=version)
        versioned = self._add_version(linked, options, version)

        if options.versioning.automatic:
            if await self.emitter.check_bundle_already_published(versioned, options.registry_settings):
                logger.info("%s@%s is already published", options.name, version)
                return PublishResult(status="already-published", bundle=versioned)

            self.progress.emit("rebuilding", package_name=options.name, version=version)
            bumped = self.version_manager.increase_version(versioned, options.versioning.minimum_version)
            return PublishResult(
                status="new-version" if current_version is not None else "initial-version",
                bundle=bumped,
            )

        return await self._manual_result(versioned, options)

    async def _manual_result(self, versioned: VersionedBundleWithManifest, options: BuildAndPublishOptions) -> PublishResult:
        settings = options.registry_settings
        latest = await self.emitter.latest_published_version(options.name, settings)

        if latest == versioned.version:
            if await self.emitter.check_bundle_already_published(versioned, settings):
                return PublishResult(status="already-published", bundle=versioned)
            raise PublishError(
                f"Version {versioned.version} of {options.name} is already published with different content"
            )

        return PublishResult(
            status="new-version" if latest is not None else "initial-version",
            bundle=versioned,
        )

    async def build_and_publish(self, options: BuildAndPublishOptions) -> PublishResult:
        result = await self.try_build_and_publish(options)
        if result.status == "already-published":
            return result

        self.progress.emit("publishing", package_name=options.name, version=result.bundle.version)
        await self.emitter.publish(result.bundle, options.registry_settings)
        logger.info("Published %s@%s", options.name, result.bundle.version)
        return result
