"""Turn a versioned bundle into a tarball or a folder on disk."""

from __future__ import annotations

import hashlib
import logging
import os
import posixpath
from dataclasses import dataclass

from monopack.artifacts.tarball import build_tarball
from monopack.errors import PublishError
from monopack.file_manager import FileManager
from monopack.models import FileDescription
from monopack.versioning import VersionedBundleWithManifest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TarballArtifact:
    tar_data: bytes
    shasum: str


class ArtifactsBuilder:

    def __init__(self, file_manager: FileManager | None = None):
        self.file_manager = file_manager or FileManager()

    def collect_contents(self, bundle: VersionedBundleWithManifest, prefix: str = "") -> list[FileDescription]:
        """Manifest first, then every bundle file at its target path below ``prefix``."""
        files = []
        if bundle.manifest_file is not None:
            files.append(FileDescription(
                file_path=posixpath.join(prefix, bundle.manifest_file.file_path),
                content=bundle.manifest_file.content,
                is_executable=bundle.manifest_file.is_executable,
            ))
        for resource in bundle.contents:
            description = resource.file_description
            files.append(FileDescription(
                file_path=posixpath.join(prefix, description.target_file_path),
                content=description.content,
                is_executable=description.is_executable,
            ))
        return files

    def build_tarball(self, bundle: VersionedBundleWithManifest) -> TarballArtifact:
        tar_data = build_tarball(self.collect_contents(bundle, "package"))
        return TarballArtifact(tar_data=tar_data, shasum=hashlib.sha1(tar_data).hexdigest())

    async def build_folder(self, bundle: VersionedBundleWithManifest, target_folder: str) -> None:
        if await self.file_manager.check_readability(target_folder):
            raise PublishError(f"Folder {target_folder} already exists")

        for file in self.collect_contents(bundle):
            target_path = os.path.join(target_folder, file.file_path)
            await self.file_manager.write_file(target_path, file.content)
            if file.is_executable:
                os.chmod(target_path, 0o755)
        logger.debug("Wrote %s@%s to %s", bundle.name, bundle.version, target_folder)
