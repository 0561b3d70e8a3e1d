"""
Tests for atomic output writing.
"""

from __future__ import annotations

import pytest

from metamodel_to_code.pipeline import AtomicWriter, OutputConfig, OutputMode, OutputValidationError, write_outputs


class TestAtomicWriter:
    def test_write_creates_parent_directories(self, tmp_path):
        path = tmp_path / "out" / "nested" / "protocol.kt"
        AtomicWriter().write(path, b"package lsp\n")

        assert path.read_bytes() == b"package lsp\n"
        # No temporary file is left behind
        assert [p.name for p in path.parent.iterdir()] == ["protocol.kt"]

    def test_write_replaces_existing_file(self, tmp_path):
        path = tmp_path / "protocol.kt"
        path.write_text("old")

        AtomicWriter().write(path, b"new\n")
        assert path.read_text() == "new\n"

    def test_non_atomic_write(self, tmp_path):
        path = tmp_path / "protocol.kt"
        AtomicWriter(atomic=False).write(path, b"content\n")
        assert path.read_bytes() == b"content\n"

    def test_write_if_not_exists(self, tmp_path):
        path = tmp_path / "protocol.kt"
        path.write_text("keep me")

        with pytest.raises(FileExistsError, match="Use --force to overwrite"):
            AtomicWriter().write_if_not_exists(path, b"new\n")
        assert path.read_text() == "keep me"

    def test_empty_content_is_rejected(self, tmp_path):
        path = tmp_path / "protocol.kt"
        with pytest.raises(OutputValidationError, match="empty"):
            AtomicWriter().write(path, b"  \n")
        assert not path.exists()

    def test_invalid_utf8_is_rejected(self, tmp_path):
        with pytest.raises(OutputValidationError, match="UTF-8"):
            AtomicWriter().write(tmp_path / "protocol.kt", b"\xff\xfe\x00")

    def test_custom_validator(self, tmp_path):
        def validate(content: bytes) -> None:
            if b"package" not in content:
                raise OutputValidationError("missing package")

        writer = AtomicWriter(validate=validate)
        with pytest.raises(OutputValidationError, match="missing package"):
            writer.write(tmp_path / "protocol.kt", b"class A\n")
        writer.write(tmp_path / "protocol.kt", b"class A\n", validate=False)
        assert (tmp_path / "protocol.kt").exists()


class TestWriteOutputs:
    def test_single_file_to_path(self, tmp_path):
        target = tmp_path / "Protocol.kt"
        written = write_outputs({"protocol.kt": b"x\n"}, target, OutputConfig())

        assert written == [target]
        assert target.read_bytes() == b"x\n"

    def test_existing_directory(self, tmp_path):
        written = write_outputs({"protocol.proto": b"x\n"}, tmp_path, OutputConfig())
        assert written == [tmp_path / "protocol.proto"]

    def test_trailing_separator_means_directory(self, tmp_path):
        output = str(tmp_path / "generated") + "/"
        written = write_outputs({"protocol.kt": b"x\n"}, output, OutputConfig())

        assert written == [tmp_path / "generated" / "protocol.kt"]
        assert (tmp_path / "generated" / "protocol.kt").is_file()

    def test_several_files_need_a_directory(self, tmp_path):
        with pytest.raises(ValueError, match="must be a directory"):
            write_outputs({"a.kt": b"a\n", "b.kt": b"b\n"}, tmp_path / "out.kt", OutputConfig())

    def test_existing_file_errors_without_force(self, tmp_path):
        target = tmp_path / "protocol.kt"
        target.write_text("old")

        with pytest.raises(FileExistsError):
            write_outputs({"protocol.kt": b"new\n"}, target, OutputConfig())

        write_outputs({"protocol.kt": b"new\n"}, target, OutputConfig(mode=OutputMode.FORCE))
        assert target.read_text() == "new\n"


if __name__ == "__main__":
    pytest.main([__file__])
