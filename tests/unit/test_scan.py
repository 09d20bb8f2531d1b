"""Unit tests for extension scanning."""
import os
import sys
from pathlib import Path

import pytest

from actionguard.errors import ErrorCode, FileOperationError
from actionguard.scan import find_files_with_extension, find_workflow_files


class TestFindFilesWithExtension:
    def test_finds_matching_files_recursively(self, base_dir: Path):
        found = find_files_with_extension(base_dir, ".yml")
        assert found == [str(base_dir / ".github" / "workflows" / "ci.yml")]

    def test_returns_full_paths_in_lexical_order(self, base_dir: Path):
        (base_dir / "b").mkdir()
        (base_dir / "b" / "z.yml").write_text("")
        (base_dir / "a.yml").write_text("")
        found = find_files_with_extension(base_dir, ".yml")
        assert found == [
            str(base_dir / ".github" / "workflows" / "ci.yml"),
            str(base_dir / "a.yml"),
            str(base_dir / "b" / "z.yml"),
        ]

    def test_directories_with_matching_names_skipped(self, base_dir: Path):
        (base_dir / "dir.yml").mkdir()
        assert str(base_dir / "dir.yml") not in find_files_with_extension(base_dir, ".yml")

    def test_no_matches(self, base_dir: Path):
        assert find_files_with_extension(base_dir, ".toml") == []

    def test_root_file_is_checked(self, base_dir: Path):
        readme = base_dir / "README.md"
        assert find_files_with_extension(readme, ".md") == [str(readme)]

    def test_missing_directory_is_an_error(self, base_dir: Path):
        with pytest.raises(FileOperationError) as exc_info:
            find_files_with_extension(base_dir / "ghost", ".yml")
        assert exc_info.value.code == ErrorCode.SCAN_FAILED

    @pytest.mark.skipif(sys.platform == "win32" or os.geteuid() == 0, reason="needs POSIX non-root permissions")
    def test_unreadable_subdirectory_aborts_scan(self, base_dir: Path):
        locked = base_dir / "locked"
        locked.mkdir()
        (locked / "x.yml").write_text("")
        locked.chmod(0)
        try:
            with pytest.raises(FileOperationError):
                find_files_with_extension(base_dir, ".yml")
        finally:
            locked.chmod(0o755)


class TestFindWorkflowFiles:
    def test_both_extensions(self, base_dir: Path):
        found = find_workflow_files(base_dir)
        assert [Path(p).name for p in found] == ["ci.yml", "release.yaml"]

    def test_custom_extensions(self, base_dir: Path):
        found = find_workflow_files(base_dir, [".yaml"])
        assert [Path(p).name for p in found] == ["release.yaml"]

    def test_overlapping_extensions_deduplicated(self, base_dir: Path):
        found = find_workflow_files(base_dir, [".yml", "ci.yml"])
        assert [Path(p).name for p in found] == ["ci.yml"]

    def test_no_workflows_directory(self, tmp_path: Path):
        assert find_workflow_files(tmp_path) == []
