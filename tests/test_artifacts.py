"""Tests for tarball and folder artifacts."""

import asyncio
import gzip
import hashlib
import io
import os
import tarfile

import pytest

from monopack.artifacts import ArtifactsBuilder, build_tarball, compare_file_descriptions, extract_package_tarball
from monopack.errors import PublishError
from monopack.models import (
    EntryPointFiles,
    FileDescription,
    LinkedBundle,
    LinkedBundleResource,
    TransferableFileDescription,
)
from monopack.versioning import VersionManager

FILES = [
    FileDescription("package/package.json", '{"name": "app"}'),
    FileDescription("package/bin/cli.js", "#!/usr/bin/env node\n", is_executable=True),
    FileDescription("package/index.js", "export default 1;\n"),
]


def _bundle():
    index = TransferableFileDescription("/src/app/index.js", "index.js", "export default 1;\n")
    cli = TransferableFileDescription("/src/app/bin/cli.js", "bin/cli.js", "#!/usr/bin/env node\n", is_executable=True)
    linked = LinkedBundle(
        name="app",
        contents=[LinkedBundleResource(index), LinkedBundleResource(cli)],
        entry_points=[EntryPointFiles(js=index)],
    )
    return VersionManager().add_version(linked, "1.0.0", {})


class TestTarball:
    def test_deterministic(self):
        assert build_tarball(FILES) == build_tarball(list(reversed(FILES)))

    def test_gzip_header(self):
        data = build_tarball(FILES)
        assert data[:2] == b"\x1f\x8b"
        assert data[4:8] == b"\x00\x00\x00\x00"
        assert data[9] == 255

    def test_entries(self):
        with tarfile.open(fileobj=io.BytesIO(build_tarball(FILES)), mode="r:gz") as tar:
            members = tar.getmembers()

        assert [m.name for m in members] == ["package/bin/cli.js", "package/index.js", "package/package.json"]
        assert [m.mode for m in members] == [0o755, 0o644, 0o644]
        assert all(m.mtime == 0 and m.uid == 0 and m.gid == 0 for m in members)

    def test_extract_round_trip(self):
        extracted = extract_package_tarball(build_tarball(FILES))
        assert compare_file_descriptions(extracted, FILES)

    def test_uncompressed_payload_is_plain_tar(self):
        raw = gzip.decompress(build_tarball(FILES))
        assert raw[257:262] == b"ustar"


class TestCompare:
    def test_order_independent(self):
        assert compare_file_descriptions(FILES, list(reversed(FILES)))

    def test_content_difference(self):
        changed = [*FILES[:2], FileDescription("package/index.js", "export default 2;\n")]
        assert not compare_file_descriptions(FILES, changed)

    def test_executable_difference(self):
        changed = [FILES[0], FileDescription("package/bin/cli.js", "#!/usr/bin/env node\n"), FILES[2]]
        assert not compare_file_descriptions(FILES, changed)

    def test_length_difference(self):
        assert not compare_file_descriptions(FILES, FILES[:2])


class TestArtifactsBuilder:
    def test_collect_contents(self):
        contents = ArtifactsBuilder().collect_contents(_bundle(), "package")
        assert [f.file_path for f in contents] == ["package/package.json", "package/index.js", "package/bin/cli.js"]
        assert contents[2].is_executable

    def test_build_tarball_shasum(self):
        artifact = ArtifactsBuilder().build_tarball(_bundle())
        assert artifact.shasum == hashlib.sha1(artifact.tar_data).hexdigest()
        names = [f.file_path for f in extract_package_tarball(artifact.tar_data)]
        assert sorted(names) == ["package/bin/cli.js", "package/index.js", "package/package.json"]

    def test_build_folder(self, tmp_path):
        target = tmp_path / "app"
        asyncio.run(ArtifactsBuilder().build_folder(_bundle(), str(target)))

        assert (target / "index.js").read_text() == "export default 1;\n"
        assert '"name": "app"' in (target / "package.json").read_text()
        assert os.stat(target / "bin" / "cli.js").st_mode & 0o777 == 0o755

    def test_build_folder_refuses_existing_folder(self, tmp_path):
        with pytest.raises(PublishError, match="already exists"):
            asyncio.run(ArtifactsBuilder().build_folder(_bundle(), str(tmp_path)))
