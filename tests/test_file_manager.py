"""Tests for async file access and source-map lookup."""

import asyncio
import os
import stat
from pathlib import Path

from monopack.file_manager import FileManager, is_executable_file_mode
from monopack.scanner.source_maps import SourceMapFileLocator

MONOREPO = (Path(__file__).parent / "fixtures" / "monorepo").resolve()
SRC = MONOREPO / "src"


def test_executable_needs_all_execute_bits():
    assert is_executable_file_mode(stat.S_IFREG | 0o755)
    assert is_executable_file_mode(stat.S_IFREG | 0o111)
    assert not is_executable_file_mode(stat.S_IFREG | 0o744)
    assert not is_executable_file_mode(stat.S_IFREG | 0o644)


class TestFileManager:
    def test_write_creates_parent_folders(self, tmp_path):
        target = tmp_path / "a" / "b" / "file.txt"
        asyncio.run(FileManager().write_file(str(target), "content ✓"))
        assert target.read_text(encoding="utf-8") == "content ✓"

    def test_copy_file(self, tmp_path):
        source = tmp_path / "source.js"
        source.write_text("export {};\n")
        target = tmp_path / "out" / "target.js"
        asyncio.run(FileManager().copy_file(str(source), str(target)))
        assert target.read_text() == "export {};\n"

    def test_crlf_line_endings_survive_read_and_write(self, tmp_path):
        source = tmp_path / "a.js"
        source.write_bytes(b'import "./b.js";\r\nexport const x = 1;\r\n')
        manager = FileManager()

        content = asyncio.run(manager.read_file(str(source)))
        assert content == 'import "./b.js";\r\nexport const x = 1;\r\n'

        target = tmp_path / "out" / "a.js"
        asyncio.run(manager.write_file(str(target), content))
        assert target.read_bytes() == source.read_bytes()

    def test_check_readability(self, tmp_path):
        existing = tmp_path / "file.txt"
        existing.write_text("")
        manager = FileManager()
        assert asyncio.run(manager.check_readability(str(existing)))
        assert not asyncio.run(manager.check_readability(str(tmp_path / "missing.txt")))

    def test_transferable_file_description(self, tmp_path):
        script = tmp_path / "cli.js"
        script.write_text("#!/usr/bin/env node\n")
        os.chmod(script, 0o755)
        plain = tmp_path / "lib.js"
        plain.write_text("export {};\n")
        os.chmod(plain, 0o644)

        manager = FileManager()
        described = asyncio.run(manager.get_transferable_file_description(str(script), "bin/cli.js"))
        assert described.source_file_path == str(script)
        assert described.target_file_path == "bin/cli.js"
        assert described.content == "#!/usr/bin/env node\n"
        assert described.is_executable

        assert not asyncio.run(manager.get_transferable_file_description(str(plain), "lib.js")).is_executable


class TestSourceMapFileLocator:
    def test_locates_trailing_directive(self):
        located = asyncio.run(SourceMapFileLocator().locate(str(SRC / "core" / "helper.js")))
        assert located == str(SRC / "core" / "helper.js.map")

    def test_no_directive(self):
        assert asyncio.run(SourceMapFileLocator().locate(str(SRC / "core" / "index.js"))) is None

    def test_missing_map_file_is_not_an_error(self, tmp_path):
        source = tmp_path / "index.js"
        source.write_text("export {};\n//# sourceMappingURL=index.js.map\n")
        assert asyncio.run(SourceMapFileLocator().locate(str(source))) is None

    def test_inline_maps_are_skipped(self, tmp_path):
        source = tmp_path / "index.js"
        source.write_text("export {};\n//# sourceMappingURL=data:application/json;base64,e30=\n")
        assert asyncio.run(SourceMapFileLocator().locate(str(source))) is None
