"""Compare bundles with the registry and publish them."""

from __future__ import annotations

import logging

from monopack.artifacts import ArtifactsBuilder, compare_file_descriptions, extract_package_tarball
from monopack.config.schema import RegistrySettings, VersioningSettings
from monopack.publisher.registry_client import RegistryClient
from monopack.versioning import VersionedBundleWithManifest

logger = logging.getLogger(__name__)


class BundleEmitter:

    def __init__(self, registry_client: RegistryClient, artifacts_builder: ArtifactsBuilder | None = None):
        self.registry_client = registry_client
        self.artifacts_builder = artifacts_builder or ArtifactsBuilder()

    async def determine_current_version(
        self,
        name: str,
        registry_settings: RegistrySettings,
        versioning: VersioningSettings,
    ) -> str | None:
        """Latest published version for automatic versioning, the configured one otherwise."""
        if versioning.automatic:
            return await self.latest_published_version(name, registry_settings)
        return versioning.version

    async def check_bundle_already_published(
        self,
        bundle: VersionedBundleWithManifest,
        registry_settings: RegistrySettings,
    ) -> bool:
        """True when the latest published tarball holds exactly the bundle's files."""
        latest = await self.registry_client.fetch_latest_version(bundle.name, registry_settings)
        if latest is None:
            return False

        tarball = await self.registry_client.fetch_tarball(latest.tarball_url, latest.shasum)
        published = extract_package_tarball(tarball)
        local = self.artifacts_builder.collect_contents(bundle, "package")
        return compare_file_descriptions(local, published)

    async def latest_published_version(self, name: str, registry_settings: RegistrySettings) -> str | None:
        latest = await self.registry_client.fetch_latest_version(name, registry_settings)
        return None if latest is None else latest.version

    async def publish(self, bundle: VersionedBundleWithManifest, registry_settings: RegistrySettings) -> None:
        tarball = self.artifacts_builder.build_tarball(bundle)
        logger.debug("Built tarball for %s@%s (sha1 %s)", bundle.name, bundle.version, tarball.shasum)
        await self.registry_client.publish_package(bundle.package_json, tarball.tar_data, registry_settings)
