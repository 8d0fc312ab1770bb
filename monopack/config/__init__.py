"""Config file loading, schema, validation and per-package option mapping."""

from monopack.config.loader import ConfigLoader
from monopack.config.mapping import BuildAndPublishOptions, BuildOptions, config_to_build_and_publish_options
from monopack.config.schema import MonopackConfig, PackageConfig
from monopack.config.validation import ValidConfig, validate_config

__all__ = [
    "BuildAndPublishOptions",
    "BuildOptions",
    "ConfigLoader",
    "MonopackConfig",
    "PackageConfig",
    "ValidConfig",
    "config_to_build_and_publish_options",
    "validate_config",
]
