"""Pydantic models for ``monopack.config.py``."""

from __future__ import annotations

import os
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator, model_validator

DEFAULT_REGISTRY_URL = "https://registry.npmjs.org"

FORBIDDEN_ATTRIBUTE_NAMES = frozenset({
    "dependencies", "peerDependencies", "main", "name", "types", "type", "version",
})

NonEmptyStr = Annotated[str, StringConstraints(min_length=1)]


class _StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class EntryPoint(_StrictModel):
    js: NonEmptyStr
    declaration_file: NonEmptyStr | None = None


class AdditionalFile(_StrictModel):
    source_file_path: NonEmptyStr
    target_file_path: NonEmptyStr

    @field_validator("target_file_path")
    @classmethod
    def _target_is_relative(cls, value: str) -> str:
        if os.path.isabs(value):
            raise ValueError("must be a relative path")
        return value


class MainPackageJson(BaseModel):
    """The monorepo's own package.json; any key besides the typed ones is kept as is."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    type: Literal["module"] | None = None
    dependencies: dict[str, str] = Field(default_factory=dict)
    dev_dependencies: dict[str, str] = Field(default_factory=dict, alias="devDependencies")
    peer_dependencies: dict[str, str] = Field(default_factory=dict, alias="peerDependencies")

    def as_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class RegistrySettings(_StrictModel):
    token: NonEmptyStr | None = None
    registry_url: NonEmptyStr = DEFAULT_REGISTRY_URL

    @model_validator(mode="after")
    def _token_from_environment(self) -> RegistrySettings:
        if self.token is None:
            self.token = os.environ.get("NPM_TOKEN") or None
        if self.token is None:
            raise ValueError("token is missing and NPM_TOKEN is not set")
        return self


class AutomaticVersioning(_StrictModel):
    automatic: Literal[True] = True
    minimum_version: NonEmptyStr | None = None


class ManualVersioning(_StrictModel):
    automatic: Literal[False]
    version: NonEmptyStr


VersioningSettings = Union[AutomaticVersioning, ManualVersioning]


class ChecksSettings(_StrictModel):
    no_duplicated_files: bool = False


class CommonPackageSettings(_StrictModel):
    sources_folder: NonEmptyStr | None = None
    main_package_json: MainPackageJson | None = None
    additional_files: list[Union[AdditionalFile, NonEmptyStr]] | None = None
    include_source_map_files: bool | None = None
    additional_package_json_attributes: dict[str, Any] | None = None

    @field_validator("additional_package_json_attributes")
    @classmethod
    def _no_managed_attributes(cls, value: dict[str, Any] | None) -> dict[str, Any] | None:
        if value is not None:
            forbidden = sorted(key for key in value if key in FORBIDDEN_ATTRIBUTE_NAMES)
            if forbidden:
                raise ValueError(", ".join(f"the key '{key}' is not allowed" for key in forbidden))
        return value


class PackageConfig(CommonPackageSettings):
    name: NonEmptyStr
    entry_points: list[EntryPoint] = Field(min_length=1)
    versioning: VersioningSettings = Field(default_factory=AutomaticVersioning)
    bundle_dependencies: list[NonEmptyStr] = Field(default_factory=list)
    bundle_peer_dependencies: list[NonEmptyStr] = Field(default_factory=list)


class MonopackConfig(_StrictModel):
    registry_settings: RegistrySettings
    common_package_settings: CommonPackageSettings | None = None
    checks: ChecksSettings = Field(default_factory=ChecksSettings)
    packages: list[PackageConfig] = Field(min_length=1)

    @model_validator(mode="after")
    def _required_settings_present(self) -> MonopackConfig:
        common = self.common_package_settings or CommonPackageSettings()
        missing = []
        for index, package in enumerate(self.packages):
            if package.sources_folder is None and common.sources_folder is None:
                missing.append(f"packages.{index}.sources_folder")
            if package.main_package_json is None and common.main_package_json is None:
                missing.append(f"packages.{index}.main_package_json")
        if missing:
            raise ValueError(
                "missing in the package and in common_package_settings: " + ", ".join(missing)
            )
        return self
