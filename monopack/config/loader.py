"""Load ``monopack.config.py`` and return its ``config`` value."""

from __future__ import annotations

import importlib.util
import inspect
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from monopack.errors import ConfigLoadError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "monopack.config.py"


class ConfigLoader:
    """``config`` may be a mapping, a callable returning one, or a coroutine function."""

    def __init__(self, working_directory: str | Path = ".", config_path: str | Path | None = None):
        self.working_directory = Path(working_directory)
        self.config_path = Path(config_path) if config_path is not None else None

    @property
    def path(self) -> Path:
        if self.config_path is None:
            return self.working_directory / CONFIG_FILE_NAME
        if self.config_path.is_absolute():
            return self.config_path
        return self.working_directory / self.config_path

    def _import_module(self, path: Path):
        spec = importlib.util.spec_from_file_location("monopack_user_config", path)
        if spec is None or spec.loader is None:
            raise ConfigLoadError(f"Invalid config file {path}")
        module = importlib.util.module_from_spec(spec)
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            raise ConfigLoadError(f"Failed to import config file {path}: {e}") from e
        return module

    async def load(self) -> Any:
        path = self.path
        if not path.is_file():
            raise ConfigLoadError(f"Config file {path} not found")

        logger.debug("Loading config from %s", path)
        module = self._import_module(path)
        if not hasattr(module, "config"):
            raise ConfigLoadError('Config file doesn\'t define a module-level "config"')

        config = module.config
        if isinstance(config, Mapping):
            return config
        if callable(config):
            config = config()
            if inspect.isawaitable(config):
                config = await config
        return config
