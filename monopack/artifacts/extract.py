"""Read a published package tarball back into file descriptions."""

from __future__ import annotations

import io
import tarfile

from monopack.file_manager import is_executable_file_mode
from monopack.models import FileDescription


def extract_package_tarball(data: bytes) -> list[FileDescription]:
    files = []
    with tarfile.open(fileobj=io.BytesIO(data), mode="r:gz") as tar:
        for member in tar.getmembers():
            if not member.isfile():
                continue
            handle = tar.extractfile(member)
            content = handle.read().decode("utf-8") if handle is not None else ""
            files.append(FileDescription(
                file_path=member.name,
                content=content,
                is_executable=is_executable_file_mode(member.mode),
            ))
    return files
