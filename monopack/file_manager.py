"""Async file-system access used by the scanner, resolver and artifacts builder."""

from __future__ import annotations

import asyncio
import os
import stat
from pathlib import Path

from monopack.models import TransferableFileDescription

_EXECUTE_ALL = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


def is_executable_file_mode(mode: int) -> bool:
    """True only when user, group and others may all execute the file."""
    return mode & _EXECUTE_ALL == _EXECUTE_ALL


class FileManager:
    """Thin async wrapper around blocking I/O, dispatched to worker threads."""

    async def check_readability(self, path: str) -> bool:
        return await asyncio.to_thread(os.access, path, os.R_OK)

    async def read_file(self, file_path: str) -> str:
        def _read() -> str:
            with open(file_path, encoding="utf-8", newline="") as fh:
                return fh.read()

        return await asyncio.to_thread(_read)

    async def write_file(self, file_path: str, content: str) -> None:
        def _write() -> None:
            target = Path(file_path)
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "w", encoding="utf-8", newline="") as fh:
                fh.write(content)

        await asyncio.to_thread(_write)

    async def copy_file(self, source: str, target: str) -> None:
        await self.write_file(target, await self.read_file(source))

    async def get_file_mode(self, file_path: str) -> int:
        result = await asyncio.to_thread(os.stat, file_path)
        return result.st_mode

    async def get_transferable_file_description(
        self,
        source_file_path: str,
        target_file_path: str,
    ) -> TransferableFileDescription:
        mode = await self.get_file_mode(source_file_path)
        return TransferableFileDescription(
            source_file_path=source_file_path,
            target_file_path=target_file_path,
            content=await self.read_file(source_file_path),
            is_executable=is_executable_file_mode(mode),
        )
