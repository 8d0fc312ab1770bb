"""Node-style module specifier resolution for the two module conventions."""

from __future__ import annotations

import json
import logging
import os

from monopack.models import ModuleResolution
from monopack.scanner.language_map import (
    DECLARATION_COUNTERPARTS,
    DYNAMIC_EXTENSIONS,
    is_declaration_file,
)

logger = logging.getLogger(__name__)


def split_package_specifier(specifier: str) -> tuple[str, str]:
    """``@scope/name/sub/path`` -> (``@scope/name``, ``sub/path``)."""
    parts = specifier.split("/")
    if specifier.startswith("@") and len(parts) >= 2:
        return "/".join(parts[:2]), "/".join(parts[2:])
    return parts[0], "/".join(parts[1:])


def _is_path_specifier(specifier: str) -> bool:
    return (
        specifier in (".", "..")
        or specifier.startswith(("./", "../"))
        or os.path.isabs(specifier)
    )


def _read_package_json(package_folder: str) -> dict:
    try:
        with open(os.path.join(package_folder, "package.json"), encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


class ModuleResolver:
    """Resolve specifiers to absolute file paths.

    The static convention (ES modules) requires exact relative paths; the
    dynamic convention (CommonJS) also probes extensions, ``package.json``
    ``main`` and ``index`` files.  In declaration mode the ``.d.ts``
    counterpart of a file wins over the file itself; otherwise declaration
    files are never resolved.
    """

    def __init__(
        self,
        module_resolution: ModuleResolution = ModuleResolution.STATIC,
        resolve_declaration_files: bool = False,
    ):
        self.module_resolution = module_resolution
        self.resolve_declaration_files = resolve_declaration_files

    def resolve(self, specifier: str, containing_file: str) -> str | None:
        if _is_path_specifier(specifier):
            base = os.path.normpath(os.path.join(os.path.dirname(containing_file), specifier))
            return self._resolve_file_or_directory(base)
        return self._resolve_package(specifier, containing_file)

    # ── Files ───────────────────────────────────────────────

    def _resolve_file_or_directory(self, base: str) -> str | None:
        candidates: list[str] = []
        if self.resolve_declaration_files:
            candidates.extend(self._declaration_candidates(base))
        candidates.extend(self._executable_candidates(base))

        for candidate in candidates:
            if os.path.isfile(candidate):
                return candidate
        return None

    def _declaration_candidates(self, base: str) -> list[str]:
        if is_declaration_file(base):
            return [base]
        for ext, declaration_ext in DECLARATION_COUNTERPARTS.items():
            if base.endswith(ext):
                return [base[: -len(ext)] + declaration_ext]
        if self.module_resolution is ModuleResolution.DYNAMIC:
            return [base + ".d.ts", os.path.join(base, "index.d.ts")]
        return []

    def _executable_candidates(self, base: str) -> list[str]:
        if is_declaration_file(base):
            return []
        candidates = [base]
        if self.module_resolution is ModuleResolution.DYNAMIC:
            candidates.extend(base + ext for ext in DYNAMIC_EXTENSIONS)
            if os.path.isdir(base):
                main = _read_package_json(base).get("main")
                if isinstance(main, str) and main:
                    main_path = os.path.normpath(os.path.join(base, main))
                    candidates.append(main_path)
                    candidates.extend(main_path + ext for ext in DYNAMIC_EXTENSIONS)
                candidates.extend(os.path.join(base, "index" + ext) for ext in DYNAMIC_EXTENSIONS)
        return candidates

    # ── Packages ────────────────────────────────────────────

    def _resolve_package(self, specifier: str, containing_file: str) -> str | None:
        name, subpath = split_package_specifier(specifier)
        directory = os.path.dirname(containing_file)

        while True:
            if os.path.basename(directory) != "node_modules":
                resolved = self._resolve_in_node_modules(os.path.join(directory, "node_modules"), name, subpath)
                if resolved is not None:
                    return resolved
            parent = os.path.dirname(directory)
            if parent == directory:
                return None
            directory = parent

    def _resolve_in_node_modules(self, node_modules: str, name: str, subpath: str) -> str | None:
        package_folder = os.path.join(node_modules, name)

        if self.resolve_declaration_files:
            if os.path.isdir(package_folder):
                resolved = self._resolve_in_package(package_folder, subpath, require_declaration=True)
                if resolved is not None:
                    return resolved
            types_name = name[1:].replace("/", "__") if name.startswith("@") else name
            types_folder = os.path.join(node_modules, "@types", types_name)
            if os.path.isdir(types_folder):
                resolved = self._resolve_in_package(types_folder, subpath)
                if resolved is not None:
                    return resolved

        if os.path.isdir(package_folder):
            return self._resolve_in_package(package_folder, subpath)
        return None

    def _resolve_in_package(self, package_folder: str, subpath: str, require_declaration: bool = False) -> str | None:
        if subpath:
            resolved = self._resolve_file_or_directory(os.path.join(package_folder, subpath))
            if require_declaration and resolved is not None and not is_declaration_file(resolved):
                return None
            if resolved is None and not require_declaration:
                manifest = os.path.join(package_folder, "package.json")
                return manifest if os.path.isfile(manifest) else None
            return resolved

        manifest = _read_package_json(package_folder)
        fields = ("types", "typings", "main") if self.resolve_declaration_files else ("main",)
        entries = [manifest[f] for f in fields if isinstance(manifest.get(f), str) and manifest[f]]
        entries.append("index.js")

        for entry in entries:
            resolved = self._resolve_file_or_directory(os.path.normpath(os.path.join(package_folder, entry)))
            if resolved is None:
                continue
            if require_declaration and not is_declaration_file(resolved):
                continue
            return resolved

        if require_declaration:
            return None

        # Packages exposing only an "exports" map are still identifiable by their manifest
        manifest_path = os.path.join(package_folder, "package.json")
        if os.path.isfile(manifest_path):
            logger.debug("Falling back to %s for package entry", manifest_path)
            return manifest_path
        return None
