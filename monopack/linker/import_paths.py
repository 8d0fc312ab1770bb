"""Rewrite module specifiers that point at files a sibling package already ships."""

from __future__ import annotations

import logging
import posixpath

from monopack.scanner.base import ProjectAnalysis
from monopack.scanner.language_map import is_declaration_file

logger = logging.getLogger(__name__)


def use_basename_from_source(specifier: str, replacement: str) -> str:
    """``./foo.js`` + ``sib/foo.d.ts`` -> ``sib/foo.js``."""
    return posixpath.join(posixpath.dirname(replacement), posixpath.basename(specifier))


def replace_import_paths(
    project: ProjectAnalysis | None,
    source_file_path: str,
    content: str,
    replacements: dict[str, str],
) -> str:
    """Replace only literals whose resolved file is a key of ``replacements``.

    Every other byte of ``content`` is preserved.  Literals that do not
    resolve, such as ones rewritten by an earlier pass, are left alone.
    """
    if project is None:
        return content

    source_bytes = content.encode("utf-8")
    chunks: list[bytes] = []
    position = 0

    for literal in project.find_import_literals(source_file_path, content):
        resolved = project.resolve_literal(literal.value, source_file_path)
        if resolved is None:
            continue
        replacement = replacements.get(resolved)
        if replacement is None:
            continue

        if is_declaration_file(resolved):
            replacement = use_basename_from_source(literal.value, replacement)

        chunks.append(source_bytes[position:literal.start])
        chunks.append(replacement.encode("utf-8"))
        position = literal.end
        logger.debug("Rewrote %r to %r in %s", literal.value, replacement, source_file_path)

    chunks.append(source_bytes[position:])
    return b"".join(chunks).decode("utf-8")
