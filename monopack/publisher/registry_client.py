"""Async client for an npm-compatible registry."""

from __future__ import annotations

import base64
import hashlib
import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import BaseModel, Field, ValidationError

from monopack.config.schema import RegistrySettings
from monopack.errors import RegistryError

logger = logging.getLogger(__name__)

ABBREVIATED_METADATA = "application/vnd.npm.install-v1+json"

_NOT_PUBLISHED = (404, 403)


class _Dist(BaseModel):
    shasum: str
    tarball: str


class _VersionData(BaseModel):
    dist: _Dist


class _AbbreviatedPackage(BaseModel):
    name: str
    dist_tags: dict[str, str] = Field(alias="dist-tags")
    versions: dict[str, _VersionData]


@dataclass(frozen=True)
class PackageVersionDetails:
    version: str
    shasum: str
    tarball_url: str


def encode_package_name(name: str) -> str:
    return name.replace("/", "%2F")


def _unscoped_name(name: str) -> str:
    return name.split("/", 1)[1] if name.startswith("@") and "/" in name else name


def build_publish_body(manifest: dict[str, Any], tar_data: bytes, registry_url: str) -> dict[str, Any]:
    """Document for an npm ``PUT /<name>`` publish request."""
    name = manifest["name"]
    version = manifest["version"]
    tarball_name = f"{_unscoped_name(name)}-{version}.tgz"
    encoded = base64.b64encode(tar_data).decode("ascii")
    integrity = "sha512-" + base64.b64encode(hashlib.sha512(tar_data).digest()).decode("ascii")

    return {
        "_id": name,
        "name": name,
        "description": manifest.get("description", ""),
        "dist-tags": {"latest": version},
        "versions": {
            version: {
                **manifest,
                "_id": f"{name}@{version}",
                "dist": {
                    "shasum": hashlib.sha1(tar_data).hexdigest(),
                    "integrity": integrity,
                    "tarball": f"{registry_url.rstrip('/')}/{name}/-/{tarball_name}",
                },
            },
        },
        "_attachments": {
            f"{name}-{version}.tgz": {
                "content_type": "application/octet-stream",
                "data": encoded,
                "length": len(tar_data),
            },
        },
    }


class RegistryClient:
    """Thin wrapper around ``httpx.AsyncClient``; settings are passed per call."""

    def __init__(self, client: httpx.AsyncClient | None = None):
        self.client = client or httpx.AsyncClient(timeout=60.0)

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> RegistryClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    @staticmethod
    def _headers(settings: RegistrySettings, accept: str = "application/json") -> dict[str, str]:
        return {"Authorization": f"Bearer {settings.token}", "Accept": accept}

    async def _fetch_package(self, name: str, settings: RegistrySettings) -> _AbbreviatedPackage | None:
        url = f"{settings.registry_url.rstrip('/')}/{encode_package_name(name)}"
        response = await self.client.get(url, headers=self._headers(settings, ABBREVIATED_METADATA))
        if response.status_code in _NOT_PUBLISHED:
            return None
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise RegistryError(f"Fetching {name} from the registry failed: {e}") from e

        try:
            return _AbbreviatedPackage.model_validate(response.json())
        except (ValidationError, ValueError) as e:
            raise RegistryError("Got an invalid response from registry API") from e

    async def fetch_latest_version(self, name: str, settings: RegistrySettings) -> PackageVersionDetails | None:
        package = await self._fetch_package(name, settings)
        if package is None:
            return None

        latest = package.dist_tags.get("latest")
        if latest is None:
            return None

        version_data = package.versions.get(latest)
        if version_data is None:
            raise RegistryError(f'Version "{latest}" for package "{name}" is missing a shasum')

        return PackageVersionDetails(
            version=latest,
            shasum=version_data.dist.shasum,
            tarball_url=version_data.dist.tarball,
        )

    async def fetch_tarball(self, tarball_url: str, shasum: str) -> bytes:
        response = await self.client.get(tarball_url)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise RegistryError(f"Fetching tarball {tarball_url} failed: {e}") from e

        data = response.content
        actual = hashlib.sha1(data).hexdigest()
        if actual != shasum:
            raise RegistryError(f"Shasum mismatch for {tarball_url}: expected {shasum}, got {actual}")
        return data

    async def publish_package(self, manifest: dict[str, Any], tar_data: bytes, settings: RegistrySettings) -> None:
        name = manifest["name"]
        url = f"{settings.registry_url.rstrip('/')}/{encode_package_name(name)}"
        body = build_publish_body(manifest, tar_data, settings.registry_url)

        logger.info("Publishing %s@%s to %s", name, manifest["version"], settings.registry_url)
        response = await self.client.put(
            url,
            content=json.dumps(body),
            headers={**self._headers(settings), "Content-Type": "application/json"},
        )
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise RegistryError(f"Publishing {name} failed: {e}") from e
