"""Tests for building and publishing a single package."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from monopack.config.mapping import BuildAndPublishOptions
from monopack.config.schema import AutomaticVersioning, EntryPoint, ManualVersioning, RegistrySettings
from monopack.errors import PublishError
from monopack.linker import BundleLinker
from monopack.models import EntryPointFiles, ResolvedBundle, ResolvedContent, TransferableFileDescription
from monopack.processor import PackageProcessor
from monopack.progress import ProgressBroadcaster
from monopack.versioning import VersionManager

SETTINGS = RegistrySettings(token="secret")


def _options(versioning=None, **overrides):
    options = dict(
        name="app",
        sources_folder="/src",
        entry_points=[EntryPoint(js="/src/index.js")],
        main_package_json={},
        registry_settings=SETTINGS,
        versioning=versioning or AutomaticVersioning(),
    )
    options.update(overrides)
    return BuildAndPublishOptions(**options)


def _resolver():
    index = TransferableFileDescription("/src/index.js", "index.js", "export default 1;\n")
    resolver = MagicMock()
    resolver.resolve = AsyncMock(return_value=ResolvedBundle(
        name="app",
        contents=[ResolvedContent(file_description=index)],
        entry_points=[EntryPointFiles(js=index)],
    ))
    return resolver


def _emitter(latest=None, already_published=False):
    emitter = MagicMock()
    emitter.latest_published_version = AsyncMock(return_value=latest)
    emitter.determine_current_version = AsyncMock(return_value=latest)
    emitter.check_bundle_already_published = AsyncMock(return_value=already_published)
    emitter.publish = AsyncMock()
    return emitter


def _processor(emitter):
    progress = ProgressBroadcaster()
    events = []
    for event in ("resolving", "linking", "building", "rebuilding", "publishing"):
        progress.on(event, lambda payload, event=event: events.append((event, payload.get("version"))))
    processor = PackageProcessor(_resolver(), BundleLinker(), VersionManager(), emitter, progress)
    return processor, events


class TestBuild:
    def test_build_uses_configured_version(self):
        processor, events = _processor(_emitter())
        bundle = asyncio.run(processor.build(_options(version="0.4.0")))

        assert bundle.version == "0.4.0"
        assert bundle.package_json["main"] == "index.js"
        assert events == [("resolving", None), ("linking", None), ("building", "0.4.0")]


class TestAutomaticVersioning:
    def test_initial_version(self):
        processor, events = _processor(_emitter(latest=None))
        result = asyncio.run(processor.try_build_and_publish(_options()))

        assert result.status == "initial-version"
        assert result.bundle.version == "0.0.1"
        assert ("rebuilding", "0.0.0") in events

    def test_new_version(self):
        processor, _ = _processor(_emitter(latest="1.2.3"))
        result = asyncio.run(processor.try_build_and_publish(_options()))

        assert result.status == "new-version"
        assert result.bundle.version == "1.2.4"

    def test_minimum_version(self):
        processor, _ = _processor(_emitter(latest="1.2.3"))
        result = asyncio.run(processor.try_build_and_publish(_options(AutomaticVersioning(minimum_version="2.0.0"))))
        assert result.bundle.version == "2.0.0"

    def test_already_published(self):
        emitter = _emitter(latest="1.2.3", already_published=True)
        processor, events = _processor(emitter)
        result = asyncio.run(processor.try_build_and_publish(_options()))

        assert result.status == "already-published"
        assert result.bundle.version == "1.2.3"
        assert not any(event == "rebuilding" for event, _ in events)

    def test_missing_registry_settings(self):
        processor, _ = _processor(_emitter())
        with pytest.raises(PublishError, match="Registry settings for app are missing"):
            asyncio.run(processor.try_build_and_publish(_options(registry_settings=None)))


class TestManualVersioning:
    def _versioning(self, version="2.0.0"):
        return ManualVersioning(automatic=False, version=version)

    def test_initial_version(self):
        emitter = _emitter(latest=None)
        emitter.determine_current_version = AsyncMock(return_value="2.0.0")
        processor, _ = _processor(emitter)

        result = asyncio.run(processor.try_build_and_publish(_options(self._versioning())))

        assert result.status == "initial-version"
        assert result.bundle.version == "2.0.0"

    def test_new_version(self):
        emitter = _emitter(latest="1.0.0")
        emitter.determine_current_version = AsyncMock(return_value="2.0.0")
        processor, _ = _processor(emitter)

        result = asyncio.run(processor.try_build_and_publish(_options(self._versioning())))

        assert result.status == "new-version"
        assert result.bundle.version == "2.0.0"

    def test_same_content_already_published(self):
        emitter = _emitter(latest="2.0.0", already_published=True)
        processor, _ = _processor(emitter)

        result = asyncio.run(processor.try_build_and_publish(_options(self._versioning())))

        assert result.status == "already-published"

    def test_different_content_for_published_version(self):
        emitter = _emitter(latest="2.0.0", already_published=False)
        processor, _ = _processor(emitter)

        with pytest.raises(PublishError, match="Version 2.0.0 of app is already published with different content"):
            asyncio.run(processor.try_build_and_publish(_options(self._versioning())))


class TestBuildAndPublish:
    def test_publishes_new_versions(self):
        emitter = _emitter(latest="1.0.0")
        processor, events = _processor(emitter)

        result = asyncio.run(processor.build_and_publish(_options()))

        assert result.status == "new-version"
        emitter.publish.assert_awaited_once_with(result.bundle, SETTINGS)
        assert ("publishing", "1.0.1") in events

    def test_skips_already_published(self):
        emitter = _emitter(latest="1.0.0", already_published=True)
        processor, _ = _processor(emitter)

        result = asyncio.run(processor.build_and_publish(_options()))

        assert result.status == "already-published"
        emitter.publish.assert_not_awaited()
