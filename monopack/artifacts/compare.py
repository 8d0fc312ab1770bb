"""Order-independent comparison of file lists."""

from __future__ import annotations

from monopack.models import FileDescription


def sort_by_file_path(files: list[FileDescription]) -> list[FileDescription]:
    return sorted(files, key=lambda f: f.file_path)


def compare_file_descriptions(first: list[FileDescription], second: list[FileDescription]) -> bool:
    """True when both lists hold the same paths with the same content and executable bit."""
    if len(first) != len(second):
        return False
    return sort_by_file_path(first) == sort_by_file_path(second)
