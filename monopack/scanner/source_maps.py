"""Locate the companion source map of a compiled file."""

from __future__ import annotations

import logging
import os
import re

from monopack.file_manager import FileManager

logger = logging.getLogger(__name__)

_SOURCE_MAPPING_URL = re.compile(r"^//# sourceMappingURL=(?P<url>.+)$", re.MULTILINE)


class SourceMapFileLocator:
    """Best-effort lookup: a missing or unreadable map simply means "no map"."""

    def __init__(self, file_manager: FileManager | None = None):
        self.file_manager = file_manager or FileManager()

    async def locate(self, source_file: str) -> str | None:
        content = await self.file_manager.read_file(source_file)
        match = _SOURCE_MAPPING_URL.search(content)
        if match is None:
            return None

        url = match.group("url").strip()
        if url.startswith("data:"):
            return None

        map_file = os.path.normpath(os.path.join(os.path.dirname(source_file), url))
        if await self.file_manager.check_readability(map_file):
            return map_file

        logger.debug("Source map %s referenced by %s is not readable", map_file, source_file)
        return None
