"""Shared extension and builtin-module tables for the analyzer and resolver."""

from __future__ import annotations

# Maps file extension -> tree-sitter grammar name
EXT_TO_GRAMMAR: dict[str, str] = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
}

DECLARATION_EXTENSIONS: tuple[str, ...] = (".d.ts", ".d.mts", ".d.cts")

EXECUTABLE_EXTENSIONS: tuple[str, ...] = (".js", ".mjs", ".cjs")

# Executable extension -> declaration counterpart
DECLARATION_COUNTERPARTS: dict[str, str] = {
    ".js": ".d.ts",
    ".mjs": ".d.mts",
    ".cjs": ".d.cts",
}

# Extensions tried for extension-less specifiers in the dynamic convention
DYNAMIC_EXTENSIONS: tuple[str, ...] = (".js", ".cjs", ".mjs", ".json")

NODE_BUILTIN_MODULES: frozenset[str] = frozenset({
    "assert", "async_hooks", "buffer", "child_process", "cluster", "console",
    "constants", "crypto", "dgram", "diagnostics_channel", "dns", "domain",
    "events", "fs", "http", "http2", "https", "inspector", "module", "net",
    "os", "path", "perf_hooks", "process", "punycode", "querystring",
    "readline", "repl", "stream", "string_decoder", "sys", "timers", "tls",
    "trace_events", "tty", "url", "util", "v8", "vm", "wasi",
    "worker_threads", "zlib",
})


def is_declaration_file(file_path: str) -> bool:
    lowered = file_path.lower()
    return any(lowered.endswith(ext) for ext in DECLARATION_EXTENSIONS)


def grammar_for(file_path: str) -> str | None:
    """Return the tree-sitter grammar for a file, or None for non-script files."""
    if is_declaration_file(file_path):
        return "typescript"
    for ext, grammar in EXT_TO_GRAMMAR.items():
        if file_path.endswith(ext):
            return grammar
    return None


def is_builtin_module(specifier: str) -> bool:
    """``fs``, ``fs/promises`` and ``node:fs`` are builtins; ``node:`` always is."""
    if specifier.startswith("node:"):
        return True
    return specifier.split("/", 1)[0] in NODE_BUILTIN_MODULES
