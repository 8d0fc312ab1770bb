"""Patch-level version bumps."""

from __future__ import annotations

import semver

from monopack.errors import PublishError


def _parse(version: str) -> semver.Version:
    try:
        return semver.Version.parse(version)
    except ValueError as e:
        raise PublishError(f"Invalid version number {version}") from e


def increase_version(version: str, minimum_version: str | None = None) -> str:
    """Bump the patch component; a pre-release is promoted to its release instead.

    The result is never lower than ``minimum_version``.
    """
    if minimum_version is not None:
        try:
            minimum = semver.Version.parse(minimum_version)
        except ValueError as e:
            raise PublishError(f"Invalid minimum_version {minimum_version} provided") from e
    else:
        minimum = None

    current = _parse(version)
    if current.prerelease is not None:
        new_version = current.finalize_version()
    else:
        new_version = current.bump_patch()

    if minimum is not None and new_version < minimum:
        return minimum_version
    return str(new_version)
