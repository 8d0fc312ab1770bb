"""Tarball and folder artifacts."""

from monopack.artifacts.artifacts_builder import ArtifactsBuilder, TarballArtifact
from monopack.artifacts.compare import compare_file_descriptions
from monopack.artifacts.extract import extract_package_tarball
from monopack.artifacts.tarball import build_tarball

__all__ = [
    "ArtifactsBuilder",
    "TarballArtifact",
    "build_tarball",
    "compare_file_descriptions",
    "extract_package_tarball",
]
