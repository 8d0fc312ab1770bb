"""Deterministic npm tarballs."""

from __future__ import annotations

import gzip
import io
import tarfile

from monopack.models import FileDescription

_UNKNOWN_OS = 255
_GZIP_OS_OFFSET = 9


def _tar_info(file_path: str, data: bytes, is_executable: bool) -> tarfile.TarInfo:
    info = tarfile.TarInfo(name=file_path)
    info.size = len(data)
    info.mtime = 0
    info.mode = 0o755 if is_executable else 0o644
    info.uid = info.gid = 0
    info.uname = info.gname = ""
    return info


def build_tarball(files: list[FileDescription]) -> bytes:
    """Entries are written sorted by path with zeroed timestamps and owners.

    Identical input yields byte-identical output on every platform.
    """
    tar_buffer = io.BytesIO()
    with tarfile.open(fileobj=tar_buffer, mode="w", format=tarfile.USTAR_FORMAT) as tar:
        for file in sorted(files, key=lambda f: f.file_path):
            data = file.content.encode("utf-8")
            tar.addfile(_tar_info(file.file_path, data, file.is_executable), io.BytesIO(data))

    gzip_buffer = io.BytesIO()
    with gzip.GzipFile(fileobj=gzip_buffer, mode="wb", compresslevel=9, mtime=0, filename="") as gz:
        gz.write(tar_buffer.getvalue())

    compressed = bytearray(gzip_buffer.getvalue())
    compressed[_GZIP_OS_OFFSET] = _UNKNOWN_OS
    return bytes(compressed)
