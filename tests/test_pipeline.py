"""End-to-end tests of the orchestrator against the fixture monorepo."""

import asyncio
import json
from pathlib import Path

import httpx

from monopack.pipeline import Monopack, PublishFailure
from monopack.progress import ProgressBroadcaster
from monopack.publisher import RegistryClient

MONOREPO = (Path(__file__).parent / "fixtures" / "monorepo").resolve()
SRC = MONOREPO / "src"
MAIN_PACKAGE_JSON = json.loads((MONOREPO / "package.json").read_text())


# ── Helpers ─────────────────────────────────────────────────────────

def _config(packages=None, **overrides):
    config = {
        "registry_settings": {"token": "secret", "registry_url": "https://registry.example.com"},
        "common_package_settings": {
            "sources_folder": str(SRC),
            "main_package_json": MAIN_PACKAGE_JSON,
        },
        "packages": packages if packages is not None else [
            {
                "name": "core",
                "entry_points": [{"js": "core/index.js", "declaration_file": "core/index.d.ts"}],
            },
            {
                "name": "app",
                "entry_points": [{"js": "app/main.js", "declaration_file": "app/main.d.ts"}],
                "bundle_dependencies": ["core"],
            },
        ],
    }
    config.update(overrides)
    return config


class Registry:
    """In-memory registry: nothing is published until a PUT arrives."""

    def __init__(self):
        self.published = []

    def handler(self, request):
        if request.method == "PUT":
            self.published.append(json.loads(request.content))
            return httpx.Response(201)
        return httpx.Response(404)


def _run(action, registry=None):
    registry = registry or Registry()
    progress = ProgressBroadcaster()
    events = []
    for event in ("scheduled", "done", "error"):
        progress.on(event, lambda payload, event=event: events.append((event, payload)))

    async def _test():
        client = RegistryClient(httpx.AsyncClient(transport=httpx.MockTransport(registry.handler)))
        async with client:
            return await action(Monopack.create(registry_client=client, progress=progress))

    return asyncio.run(_test()), registry, events


# ── Publishing ──────────────────────────────────────────────────────

class TestBuildAndPublishAll:
    def test_dry_run(self):
        results, registry, events = _run(lambda monopack: monopack.build_and_publish_all(_config()))

        assert [(r.bundle.name, r.status, r.bundle.version) for r in results] == [
            ("core", "initial-version", "0.0.1"),
            ("app", "initial-version", "0.0.1"),
        ]
        assert registry.published == []
        assert [(event, payload["package_name"]) for event, payload in events] == [
            ("scheduled", "core"),
            ("scheduled", "app"),
            ("done", "core"),
            ("done", "app"),
        ]

    def test_sibling_files_are_linked(self):
        results, _, _ = _run(lambda monopack: monopack.build_and_publish_all(_config()))
        core, app = (r.bundle for r in results)

        assert sorted(c.file_description.target_file_path for c in core.contents) == [
            "core/helper.d.ts", "core/helper.js", "core/index.d.ts", "core/index.js",
        ]
        assert sorted(c.file_description.target_file_path for c in app.contents) == [
            "app/lazy.js", "app/main.d.ts", "app/main.js",
        ]
        main = next(c for c in app.contents if c.file_description.target_file_path == "app/main.js")
        assert 'from "core/core/helper.js"' in main.file_description.content

        assert core.package_json["dependencies"] == {"lodash": "^4.17.21"}
        assert app.package_json["dependencies"] == {"core": "0.0.1"}
        assert app.package_json["peerDependencies"] == {"@scope/util": "^1.0.0"}
        assert app.package_json["types"] == "app/main.d.ts"
        assert app.package_json["type"] == "module"

    def test_publish(self):
        results, registry, _ = _run(lambda monopack: monopack.build_and_publish_all(_config(), dry_run=False))

        assert len(results) == 2
        assert [body["name"] for body in registry.published] == ["core", "app"]
        assert registry.published[1]["versions"]["0.0.1"]["dependencies"] == {"core": "0.0.1"}

    def test_invalid_config(self):
        result, _, events = _run(lambda monopack: monopack.build_and_publish_all(_config(packages=[])))

        assert isinstance(result, PublishFailure)
        assert result.kind == "config"
        assert result.issues[0].startswith("packages: ")
        assert events == []

    def test_partial_failure(self):
        packages = [
            {"name": "core", "entry_points": [{"js": "core/index.js"}]},
            {"name": "missing", "entry_points": [{"js": "missing/index.js"}]},
            {"name": "app", "entry_points": [{"js": "app/main.js"}], "bundle_dependencies": ["core", "missing"]},
        ]
        result, _, events = _run(lambda monopack: monopack.build_and_publish_all(_config(packages)))

        assert isinstance(result, PublishFailure)
        assert result.kind == "partial"
        assert [r.bundle.name for r in result.partial.succeeded] == ["core"]
        assert len(result.partial.failures) == 1
        assert ("error", "missing") in [(event, payload["package_name"]) for event, payload in events]
        assert "app" not in [payload["package_name"] for event, payload in events if event == "done"]

    def test_duplicated_files_check(self):
        packages = [
            {"name": "core", "entry_points": [{"js": "core/index.js"}]},
            {"name": "app", "entry_points": [{"js": "app/main.js"}]},
        ]
        config = _config(packages, checks={"no_duplicated_files": True})
        result, registry, _ = _run(lambda monopack: monopack.build_and_publish_all(config, dry_run=False))

        assert isinstance(result, PublishFailure)
        assert result.kind == "checks"
        assert result.issues == [
            f'File "{SRC / "core" / "helper.js"}" is included in multiple packages: app, core',
        ]
        assert registry.published == []

    def test_checks_pass(self):
        config = _config(checks={"no_duplicated_files": True})
        results, _, events = _run(lambda monopack: monopack.build_and_publish_all(config))

        assert [r.status for r in results] == ["initial-version", "initial-version"]
        assert [event for event, _ in events].count("scheduled") == 2


# ── Building ────────────────────────────────────────────────────────

class TestBuildAll:
    def test_writes_every_package(self, tmp_path):
        bundles, _, events = _run(lambda monopack: monopack.build_all(_config(), str(tmp_path)))

        assert [bundle.name for bundle in bundles] == ["core", "app"]
        manifest = json.loads((tmp_path / "app" / "package.json").read_text())
        assert manifest["version"] == "0.0.0"
        assert manifest["dependencies"] == {"core": "0.0.0"}
        assert (tmp_path / "core" / "core" / "helper.js").is_file()
        assert (tmp_path / "app" / "app" / "lazy.js").is_file()
        assert not (tmp_path / "app" / "core").exists()
        assert [payload["status"] for event, payload in events if event == "done"] == ["built", "built"]

    def test_manual_versions_are_used(self, tmp_path):
        packages = [{
            "name": "core",
            "entry_points": [{"js": "core/index.js"}],
            "versioning": {"automatic": False, "version": "3.0.0"},
        }]
        bundles, _, _ = _run(lambda monopack: monopack.build_all(_config(packages), str(tmp_path)))
        assert bundles[0].version == "3.0.0"
