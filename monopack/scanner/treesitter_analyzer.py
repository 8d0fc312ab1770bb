"""Project analyzer built on tree-sitter grammars for JavaScript and TypeScript."""

from __future__ import annotations

import logging
import os

from tree_sitter_language_pack import get_parser

from monopack.errors import AnalysisError, ResolutionError
from monopack.models import ModuleResolution, unique_list
from monopack.scanner.base import AnalysisOptions, ImportLiteral, ProjectAnalysis, ProjectAnalyzer
from monopack.scanner.language_map import grammar_for, is_builtin_module, is_declaration_file
from monopack.scanner.module_resolver import ModuleResolver

logger = logging.getLogger(__name__)

_MODULE_DECLARATIONS = {"import_statement", "export_statement", "import_require_clause"}


def _string_literal(node, source_bytes: bytes) -> ImportLiteral | None:
    if node is None or node.type != "string":
        return None
    start, end = node.start_byte + 1, node.end_byte - 1
    if end < start:
        return None
    value = source_bytes[start:end].decode("utf-8", errors="replace")
    return ImportLiteral(value=value, start=start, end=end)


def _first_argument(call_node):
    arguments = call_node.child_by_field_name("arguments")
    if arguments is None or arguments.named_child_count != 1:
        return None
    return arguments.named_children[0]


def collect_import_literals(root, source_bytes: bytes, module_resolution: ModuleResolution) -> list[ImportLiteral]:
    """Walk a syntax tree and return every module-specifier literal in source order.

    Recognised forms: ``import ... from "x"``, ``export ... from "x"``,
    ``import "x"``, ``import x = require("x")``, ``import("x")`` (also in
    type positions) and, for the dynamic convention only, ``require("x")``.
    """
    literals: list[ImportLiteral] = []
    stack = [root]

    while stack:
        node = stack.pop()

        if node.type in _MODULE_DECLARATIONS:
            source = node.child_by_field_name("source")
            if source is None and node.type == "import_require_clause":
                # Older typescript grammars leave the string unlabelled
                source = next((child for child in node.named_children if child.type == "string"), None)
            literal = _string_literal(source, source_bytes)
            if literal is not None:
                literals.append(literal)
        elif node.type == "call_expression":
            callee = node.child_by_field_name("function")
            if callee is not None and (
                callee.type == "import"
                or (
                    module_resolution is ModuleResolution.DYNAMIC
                    and callee.type == "identifier"
                    and callee.text == b"require"
                )
            ):
                literal = _string_literal(_first_argument(node), source_bytes)
                if literal is not None:
                    literals.append(literal)
        else:
            # import("x") used as a type: a flat `import ( string )` token run
            children = node.children
            for index in range(len(children) - 2):
                if (
                    children[index].type == "import"
                    and children[index + 1].type == "("
                    and children[index + 2].type == "string"
                ):
                    literal = _string_literal(children[index + 2], source_bytes)
                    if literal is not None:
                        literals.append(literal)

        stack.extend(reversed(node.children))

    literals.sort(key=lambda literal: literal.start)
    return literals


class TreeSitterProject(ProjectAnalysis):
    """Analysis context for one folder; parsed trees are cached per file."""

    def __init__(self, root_folder: str, options: AnalysisOptions):
        self.root_folder = root_folder
        self.options = options
        self.resolver = ModuleResolver(
            module_resolution=options.module_resolution,
            resolve_declaration_files=options.resolve_declaration_files,
        )
        self._parser_cache: dict[str, object] = {}
        self._literal_cache: dict[str, list[ImportLiteral]] = {}

    def __repr__(self) -> str:
        return f"TreeSitterProject({self.root_folder!r})"

    def _get_parser(self, grammar_name: str):
        if grammar_name not in self._parser_cache:
            self._parser_cache[grammar_name] = get_parser(grammar_name)
        return self._parser_cache[grammar_name]

    def parse(self, file_path: str, source_bytes: bytes):
        grammar_name = grammar_for(file_path)
        if grammar_name is None:
            return None
        return self._get_parser(grammar_name).parse(source_bytes)

    def find_import_literals(self, file_path: str, content: str) -> list[ImportLiteral]:
        source_bytes = content.encode("utf-8")
        tree = self.parse(file_path, source_bytes)
        if tree is None:
            return []
        return collect_import_literals(tree.root_node, source_bytes, self.options.module_resolution)

    def _literals_of_file(self, file_path: str) -> list[ImportLiteral]:
        cached = self._literal_cache.get(file_path)
        if cached is not None:
            return cached

        if grammar_for(file_path) is None or not os.path.isfile(file_path):
            literals: list[ImportLiteral] = []
        else:
            with open(file_path, encoding="utf-8", newline="") as fh:
                literals = self.find_import_literals(file_path, fh.read())

        self._literal_cache[file_path] = literals
        return literals

    def resolve_literal(self, specifier: str, containing_file: str) -> str | None:
        if is_builtin_module(specifier):
            return None
        return self.resolver.resolve(specifier, containing_file)

    def get_referenced_file_paths(self, file_path: str) -> list[str]:
        referenced: list[str] = []
        for literal in self._literals_of_file(file_path):
            if is_builtin_module(literal.value):
                continue
            resolved = self.resolver.resolve(literal.value, file_path)
            if resolved is None:
                raise ResolutionError(
                    f'Failed to resolve file for import "{literal.value}" in containing file "{file_path}"'
                )
            referenced.append(resolved)
        return unique_list(referenced)

    def collect_syntax_errors(self) -> list[str]:
        """Parse every analyzable file below the root and list those with syntax errors."""
        failing: list[str] = []
        for folder, dirs, files in os.walk(self.root_folder):
            dirs[:] = sorted(d for d in dirs if d != "node_modules")
            for file_name in sorted(files):
                file_path = os.path.join(folder, file_name)
                if self.options.resolve_declaration_files != is_declaration_file(file_path):
                    continue
                if grammar_for(file_path) is None:
                    continue
                with open(file_path, "rb") as fh:
                    tree = self.parse(file_path, fh.read())
                if tree is not None and tree.root_node.has_error:
                    failing.append(file_path)
        return failing


class TreeSitterProjectAnalyzer(ProjectAnalyzer):

    def analyze_project(self, folder: str, options: AnalysisOptions) -> TreeSitterProject:
        project = TreeSitterProject(folder, options)

        if options.fail_on_compile_errors:
            failing = project.collect_syntax_errors()
            if failing:
                logger.debug("Syntax errors in %d file(s) below %s", len(failing), folder)
                raise AnalysisError("Failed to analyze source files", files=failing)

        return project
