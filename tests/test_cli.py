"""Tests for the click command line interface."""

import json
from pathlib import Path
from unittest.mock import patch

import httpx
from click.testing import CliRunner

from monopack import __version__
from monopack.cli import cli
from monopack.publisher import RegistryClient

MONOREPO = (Path(__file__).parent / "fixtures" / "monorepo").resolve()
SRC = MONOREPO / "src"
MAIN_PACKAGE_JSON = json.loads((MONOREPO / "package.json").read_text())

PACKAGES = [
    {"name": "core", "entry_points": [{"js": "core/index.js", "declaration_file": "core/index.d.ts"}]},
    {"name": "app", "entry_points": [{"js": "app/main.js"}], "bundle_dependencies": ["core"]},
]


def _write_config(tmp_path, packages=PACKAGES):
    config = {
        "registry_settings": {"token": "secret", "registry_url": "https://registry.example.com"},
        "common_package_settings": {"sources_folder": str(SRC), "main_package_json": MAIN_PACKAGE_JSON},
        "packages": packages,
    }
    path = tmp_path / "monopack.config.py"
    path.write_text(f"config = {config!r}\n")
    return path


def _offline_registry(published):
    def handler(request):
        if request.method == "PUT":
            published.append(json.loads(request.content)["name"])
            return httpx.Response(201)
        return httpx.Response(404)

    return lambda: RegistryClient(httpx.AsyncClient(transport=httpx.MockTransport(handler)))


def _invoke(args, published=None):
    published = [] if published is None else published
    with patch("monopack.cli.RegistryClient", _offline_registry(published)):
        return CliRunner().invoke(cli, args)


def test_version():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


class TestPublish:
    def test_dry_run(self, tmp_path):
        published = []
        result = _invoke(["publish", "--config", str(_write_config(tmp_path))], published)

        assert result.exit_code == 0, result.output
        assert "First version 0.0.1 has been published" in result.output
        assert "Success: all 2 package(s) have been published" in result.output
        assert "--no-dry-run" in result.output
        assert published == []

    def test_no_dry_run(self, tmp_path):
        published = []
        result = _invoke(["publish", "--no-dry-run", "--config", str(_write_config(tmp_path))], published)

        assert result.exit_code == 0, result.output
        assert published == ["core", "app"]
        assert "dry run" not in result.output

    def test_invalid_config(self, tmp_path):
        result = _invoke(["publish", "--config", str(_write_config(tmp_path, packages=[]))])

        assert result.exit_code == 1
        assert "The provided config is invalid, there are 1 issue(s)" in result.output
        assert "- packages: " in result.output

    def test_partial_failure(self, tmp_path):
        packages = [
            {"name": "core", "entry_points": [{"js": "core/index.js"}]},
            {"name": "missing", "entry_points": [{"js": "missing/index.js"}]},
        ]
        result = _invoke(["publish", "--config", str(_write_config(tmp_path, packages))])

        assert result.exit_code == 1
        assert "1 from 2 package(s) failed; 1 succeeded" in result.output

    def test_missing_config_file(self, tmp_path):
        result = _invoke(["publish", "--config", str(tmp_path / "nope.py")])

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_verbose_flag(self, tmp_path):
        result = _invoke(["--verbose", "publish", "--config", str(_write_config(tmp_path))])
        assert result.exit_code == 0, result.output


class TestBuild:
    def test_build(self, tmp_path):
        output = tmp_path / "dist"
        result = CliRunner().invoke(cli, ["build", "--output", str(output), "--config", str(_write_config(tmp_path))])

        assert result.exit_code == 0, result.output
        assert "Built version 0.0.0" in result.output
        assert (output / "core" / "package.json").is_file()
        assert (output / "app" / "app" / "main.js").is_file()

    def test_output_is_required(self, tmp_path):
        result = CliRunner().invoke(cli, ["build", "--config", str(_write_config(tmp_path))])
        assert result.exit_code == 2
