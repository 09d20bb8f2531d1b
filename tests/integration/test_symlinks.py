"""Symlink handling in path validation and the file store, against a real filesystem."""
import os
import sys
from pathlib import Path

import pytest

from actionguard.errors import ErrorCode, FileOperationError, PathValidationError
from actionguard.fileio import FileOptions, read_file_with_options, write_file_with_options
from actionguard.paths import PathValidationOptions, validate_path, validate_path_with_defaults

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="symlinks need privileges on Windows")

NO_SYMLINK_CHECK = PathValidationOptions(check_symlinks=False)


def _code(base: Path, path: Path, options: PathValidationOptions | None = None) -> ErrorCode:
    with pytest.raises(PathValidationError) as exc_info:
        validate_path(str(base), str(path), options or PathValidationOptions())
    return exc_info.value.code


class TestSymlinkTargets:
    def test_link_to_file_inside(self, base_dir: Path):
        link = base_dir / "ci-link.yml"
        link.symlink_to(base_dir / ".github/workflows/ci.yml")
        validate_path_with_defaults(str(base_dir), str(link))

    def test_relative_link_inside(self, base_dir: Path):
        link = base_dir / "readme-link"
        link.symlink_to("README.md")
        validate_path_with_defaults(str(base_dir), str(link))

    def test_link_to_file_outside(self, base_dir: Path, outside: Path):
        link = base_dir / "escape.yml"
        link.symlink_to(outside)
        assert _code(base_dir, link) == ErrorCode.SYMLINK_OUTSIDE_ALLOWED_DIR

    def test_link_outside_allowed_without_check(self, base_dir: Path, outside: Path):
        link = base_dir / "escape.yml"
        link.symlink_to(outside)
        validate_path(str(base_dir), str(link), NO_SYMLINK_CHECK)

    def test_link_to_directory_outside(self, base_dir: Path, tmp_path: Path):
        elsewhere = tmp_path / "elsewhere"
        elsewhere.mkdir()
        link = base_dir / "linked-dir"
        link.symlink_to(elsewhere, target_is_directory=True)
        assert _code(base_dir, link) == ErrorCode.SYMLINK_OUTSIDE_ALLOWED_DIR

    def test_dangling_link(self, base_dir: Path):
        link = base_dir / "dangling.yml"
        link.symlink_to(base_dir / "nowhere.yml")
        assert _code(base_dir, link) == ErrorCode.FAILED_TO_EVALUATE_SYMLINK

    def test_self_referential_link(self, base_dir: Path):
        link = base_dir / "loop"
        link.symlink_to(link)
        assert _code(base_dir, link) == ErrorCode.FAILED_TO_EVALUATE_SYMLINK

    def test_cyclic_links(self, base_dir: Path):
        a = base_dir / "a"
        b = base_dir / "b"
        a.symlink_to(b)
        b.symlink_to(a)
        assert _code(base_dir, a) == ErrorCode.FAILED_TO_EVALUATE_SYMLINK

    def test_base_reached_through_symlink(self, base_dir: Path, tmp_path: Path):
        alias = tmp_path / "alias"
        alias.symlink_to(base_dir, target_is_directory=True)
        link = base_dir / "ci-link.yml"
        link.symlink_to(base_dir / ".github/workflows/ci.yml")
        validate_path_with_defaults(str(alias), str(alias / "ci-link.yml"))


class TestStoreRefusesSymlinkEscape:
    def test_read_through_escaping_link_rejected(self, base_dir: Path, outside: Path):
        link = base_dir / "escape.yml"
        link.symlink_to(outside)
        with pytest.raises(FileOperationError) as exc_info:
            read_file_with_options(link, FileOptions(base_dir=str(base_dir)))
        assert exc_info.value.code == ErrorCode.INVALID_FILE_PATH
        assert exc_info.value.__cause__.code == ErrorCode.SYMLINK_OUTSIDE_ALLOWED_DIR

    def test_write_through_escaping_link_leaves_target_alone(self, base_dir: Path, outside: Path):
        link = base_dir / "escape.yml"
        link.symlink_to(outside)
        with pytest.raises(FileOperationError):
            write_file_with_options(link, b"pwned", FileOptions(base_dir=str(base_dir)))
        assert outside.read_text() == "top secret\n"
        assert os.path.islink(link)

    def test_planted_tmp_link_is_not_followed(self, base_dir: Path, outside: Path):
        target = base_dir / ".github" / "workflows" / "ci.yml"
        (base_dir / ".github" / "workflows" / "ci.yml.tmp").symlink_to(outside)
        write_file_with_options(target, b"pwned\n", FileOptions(base_dir=str(base_dir)))
        assert outside.read_text() == "top secret\n"
        assert not os.path.islink(target)
        assert target.read_bytes() == b"pwned\n"
