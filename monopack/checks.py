"""Cross-package consistency checks run before anything is published."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Callable, Protocol

from monopack.config.schema import ChecksSettings
from monopack.models import LinkedBundleResource


class CheckedBundle(Protocol):
    name: str
    contents: list[LinkedBundleResource]


@dataclass(frozen=True)
class CheckRule:
    name: str
    is_enabled: Callable[[ChecksSettings | None], bool]
    run: Callable[[Sequence[CheckedBundle]], list[str]]


def _find_duplicated_files(bundles: Sequence[CheckedBundle]) -> list[str]:
    owners: dict[str, set[str]] = {}
    for bundle in bundles:
        for resource in bundle.contents:
            owners.setdefault(resource.file_description.source_file_path, set()).add(bundle.name)

    return [
        f'File "{file_path}" is included in multiple packages: {", ".join(sorted(names))}'
        for file_path, names in owners.items()
        if len(names) > 1
    ]


no_duplicated_files = CheckRule(
    name="no_duplicated_files",
    is_enabled=lambda settings: settings is not None and settings.no_duplicated_files,
    run=_find_duplicated_files,
)

CHECK_RULES: list[CheckRule] = [no_duplicated_files]


def run_checks(settings: ChecksSettings | None, bundles: Sequence[CheckedBundle]) -> list[str]:
    issues: list[str] = []
    for rule in CHECK_RULES:
        if rule.is_enabled(settings):
            issues.extend(rule.run(bundles))
    return issues
