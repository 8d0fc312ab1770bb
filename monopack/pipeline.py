"""Orchestrator: validate -> (check) -> schedule -> build/publish every package."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Literal

from monopack.artifacts import ArtifactsBuilder
from monopack.checks import CHECK_RULES, run_checks
from monopack.config.mapping import BuildAndPublishOptions, config_to_build_and_publish_options
from monopack.config.validation import ValidConfig, validate_config
from monopack.errors import ConfigValidationError
from monopack.file_manager import FileManager
from monopack.linker import BundleLinker
from monopack.processor import PackageProcessor, PublishResult
from monopack.progress import ProgressBroadcaster
from monopack.publisher import BundleEmitter, RegistryClient
from monopack.resolver import ResourceResolver
from monopack.scanner import DependencyScanner, SourceMapFileLocator, TreeSitterProjectAnalyzer
from monopack.scheduler import PartialFailure, Scheduler
from monopack.versioning import VersionedBundleWithManifest, VersionManager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublishFailure:
    kind: Literal["config", "checks", "partial"]
    issues: list[str] = field(default_factory=list)
    partial: PartialFailure | None = None


class Monopack:
    """Builds and publishes every configured package in dependency order."""

    def __init__(
        self,
        processor: PackageProcessor,
        progress: ProgressBroadcaster | None = None,
        artifacts_builder: ArtifactsBuilder | None = None,
    ):
        self.processor = processor
        self.progress = progress or processor.progress
        self.artifacts_builder = artifacts_builder or ArtifactsBuilder()

    @classmethod
    def create(
        cls,
        registry_client: RegistryClient | None = None,
        progress: ProgressBroadcaster | None = None,
    ) -> Monopack:
        """Wire the default tree-sitter, file-system and httpx backed components."""
        progress = progress or ProgressBroadcaster()
        file_manager = FileManager()
        scanner = DependencyScanner(TreeSitterProjectAnalyzer(), SourceMapFileLocator(file_manager))
        artifacts_builder = ArtifactsBuilder(file_manager)
        processor = PackageProcessor(
            resource_resolver=ResourceResolver(scanner, file_manager),
            linker=BundleLinker(),
            version_manager=VersionManager(),
            emitter=BundleEmitter(registry_client or RegistryClient(), artifacts_builder),
            progress=progress,
        )
        return cls(processor, progress=progress, artifacts_builder=artifacts_builder)

    def _options_factory(self, valid: ValidConfig) -> Callable[[str, list], BuildAndPublishOptions]:
        def create_options(package_name: str, artifacts: list) -> BuildAndPublishOptions:
            return config_to_build_and_publish_options(
                package_name, valid.package_configs, valid.config, artifacts,
            )
        return create_options

    def _reporting(
        self,
        operation: Callable[[BuildAndPublishOptions], Awaitable[PublishResult]],
    ) -> Callable[[BuildAndPublishOptions], Awaitable[PublishResult]]:
        async def execute(options: BuildAndPublishOptions) -> PublishResult:
            result = await operation(options)
            self.progress.emit(
                "done",
                package_name=options.name,
                version=result.bundle.version,
                status=result.status,
            )
            return result
        return execute

    async def _build_bundles(self, valid: ValidConfig, scheduler: Scheduler):
        async def build(options: BuildAndPublishOptions) -> VersionedBundleWithManifest:
            bundle = await self.processor.build(options)
            scheduler.progress.emit("done", package_name=options.name, version=bundle.version, status="built")
            return bundle

        return await scheduler.run_for_each_scheduled_package(
            valid.package_graph,
            build,
            self._options_factory(valid),
            lambda bundle: bundle,
        )

    async def build_and_publish_all(self, raw_config: Any, dry_run: bool = True) -> list[PublishResult] | PublishFailure:
        try:
            valid = validate_config(raw_config)
        except ConfigValidationError as e:
            return PublishFailure(kind="config", issues=e.issues)

        if any(rule.is_enabled(valid.config.checks) for rule in CHECK_RULES):
            # Silent scheduler: this pass only feeds the checks
            bundles = await self._build_bundles(valid, Scheduler(ProgressBroadcaster()))
            if isinstance(bundles, PartialFailure):
                return PublishFailure(kind="partial", partial=bundles)
            issues = run_checks(valid.config.checks, bundles)
            if issues:
                return PublishFailure(kind="checks", issues=issues)

        operation = self.processor.try_build_and_publish if dry_run else self.processor.build_and_publish
        result = await Scheduler(self.progress).run_for_each_scheduled_package(
            valid.package_graph,
            self._reporting(operation),
            self._options_factory(valid),
            lambda publish_result: publish_result.bundle,
        )
        if isinstance(result, PartialFailure):
            return PublishFailure(kind="partial", partial=result)
        return result

    async def build_all(self, raw_config: Any, output_dir: str) -> list[VersionedBundleWithManifest] | PublishFailure:
        """Build every package without the registry and write each into ``output_dir/<name>``."""
        try:
            valid = validate_config(raw_config)
        except ConfigValidationError as e:
            return PublishFailure(kind="config", issues=e.issues)

        bundles = await self._build_bundles(valid, Scheduler(self.progress))
        if isinstance(bundles, PartialFailure):
            return PublishFailure(kind="partial", partial=bundles)

        for bundle in bundles:
            await self.artifacts_builder.build_folder(bundle, os.path.join(output_dir, bundle.name))
        return bundles
