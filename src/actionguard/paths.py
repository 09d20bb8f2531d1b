"""Path validation against a base directory.

Every privileged read or write goes through validate_path() first. The checks
run in a fixed order and stop at the first failure:

    base set -> path non-empty -> no NUL bytes -> length -> resolve ->
    containment -> traversal -> symlink target -> existence / type

Nothing here touches the filesystem except the symlink and stat checks at
the end, and nothing here keeps state.
"""
from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass

from actionguard.errors import ErrorCode, PathValidationError

logger = logging.getLogger(__name__)

MAX_PATH_LENGTH = 255


@dataclass(frozen=True)
class PathValidationOptions:
    require_regular_file: bool = False
    allow_non_existent: bool = True
    check_symlinks: bool = True
    # <= 0 falls back to MAX_PATH_LENGTH
    max_path_length: int = MAX_PATH_LENGTH

    @property
    def effective_max_length(self) -> int:
        return self.max_path_length if self.max_path_length > 0 else MAX_PATH_LENGTH


def default_path_validation_options() -> PathValidationOptions:
    return PathValidationOptions()


def _escapes(rel: str) -> bool:
    """True if a relpath() result climbs out of its start directory."""
    return rel == os.pardir or rel.startswith(os.pardir + os.sep) or os.path.isabs(rel)


def _within(abs_path: str, abs_base: str) -> bool:
    """Containment with a separator boundary: /data/app does not contain /data/app-other."""
    if abs_path == abs_base:
        return True
    prefix = abs_base if abs_base.endswith(os.sep) else abs_base + os.sep
    return abs_path.startswith(prefix)


def _check_symlink(base_dir: str, path: str) -> None:
    try:
        is_link = stat.S_ISLNK(os.lstat(path).st_mode)
    except OSError:
        # absent or unreadable: the existence check reports it
        return
    if not is_link:
        return

    try:
        target = os.path.realpath(path, strict=True)
    except (OSError, RuntimeError) as e:
        raise PathValidationError(
            ErrorCode.FAILED_TO_EVALUATE_SYMLINK, f"failed to evaluate symlink: {e}"
        ) from e

    try:
        real_base = os.path.realpath(base_dir, strict=True)
    except (OSError, RuntimeError) as e:
        raise PathValidationError(
            ErrorCode.FAILED_TO_EVALUATE_BASE_DIR, f"failed to evaluate base directory: {e}"
        ) from e

    try:
        rel = os.path.relpath(target, real_base)
    except ValueError:
        rel = None
    if rel is None or _escapes(rel):
        logger.warning("Symlink escapes base directory: %s -> %s", path, target)
        raise PathValidationError(
            ErrorCode.SYMLINK_OUTSIDE_ALLOWED_DIR,
            f"symlink points outside allowed directory: path is outside of allowed directory: {path}",
        )


def validate_path(base_dir: str, path: str, options: PathValidationOptions) -> None:
    """Ensure *path* is safe to access and resolves inside *base_dir*.

    Raises PathValidationError with the code of the first failing check.
    Returns None on success.
    """
    base_dir, path = os.fspath(base_dir), os.fspath(path)
    if not base_dir:
        raise PathValidationError(ErrorCode.BASE_DIRECTORY_NOT_SET, "base directory not set")

    if not path or not path.strip():
        raise PathValidationError(ErrorCode.EMPTY_PATH, "path is empty")

    if "\x00" in base_dir or "\x00" in path:
        raise PathValidationError(ErrorCode.PATH_CONTAINS_NULL_BYTES, "path contains null bytes")

    max_length = options.effective_max_length
    if len(path.encode("utf-8", "surrogateescape")) > max_length:
        raise PathValidationError(
            ErrorCode.PATH_EXCEEDS_MAX_LENGTH,
            f"path exceeds maximum length of {max_length} characters",
        )

    try:
        abs_base = os.path.abspath(os.path.normpath(base_dir))
    except OSError as e:
        raise PathValidationError(
            ErrorCode.FAILED_TO_RESOLVE_BASE_PATH, f"failed to resolve base path: {e}"
        ) from e

    try:
        abs_path = os.path.abspath(os.path.normpath(path))
    except OSError as e:
        raise PathValidationError(
            ErrorCode.FAILED_TO_RESOLVE_PATH, f"failed to resolve path: {e}"
        ) from e

    if not _within(abs_path, abs_base):
        logger.warning("Path outside base directory rejected: %s (base %s)", path, base_dir)
        raise PathValidationError(
            ErrorCode.PATH_OUTSIDE_ALLOWED_DIR, f"path is outside of allowed directory: {path}"
        )

    try:
        rel = os.path.relpath(abs_path, abs_base)
    except ValueError:
        rel = None
    if rel is None or _escapes(rel):
        logger.warning("Path traversal rejected: %s (base %s)", path, base_dir)
        raise PathValidationError(ErrorCode.PATH_TRAVERSAL_DETECTED, "path traversal attempt detected")

    if options.check_symlinks:
        _check_symlink(base_dir, path)

    try:
        st = os.stat(path)
    except FileNotFoundError:
        if not options.allow_non_existent:
            raise PathValidationError(ErrorCode.PATH_DOES_NOT_EXIST, f"path does not exist: {path}")
        return
    except OSError as e:
        raise PathValidationError(
            ErrorCode.FAILED_TO_ACCESS_PATH, f"failed to access path: {e}"
        ) from e

    if options.require_regular_file and not stat.S_ISREG(st.st_mode):
        raise PathValidationError(ErrorCode.NOT_REGULAR_FILE, f"not a regular file: {path}")


def validate_path_with_defaults(base_dir: str, path: str) -> None:
    validate_path(base_dir, path, default_path_validation_options())


def is_path_safe(base_dir: str, path: str) -> bool:
    """Boolean form of validate_path_with_defaults()."""
    try:
        validate_path_with_defaults(base_dir, path)
    except PathValidationError:
        return False
    return True


def join_and_validate_path(base_dir: str, *elements: str) -> str:
    """Join *elements*, validate the result against *base_dir* and return the join.

    Relative joins are validated as base_dir/joined but returned relative,
    e.g. join_and_validate_path("/tmp/base", "a", "b.txt") == "a/b.txt".
    """
    joined = os.path.join(*elements) if elements else ""
    if not joined:
        raise PathValidationError(ErrorCode.EMPTY_PATH, "path is empty")
    joined = os.path.normpath(joined)

    if os.path.isabs(joined):
        validate_path_with_defaults(base_dir, joined)
    else:
        validate_path_with_defaults(base_dir, os.path.join(base_dir, joined))
    return joined


def safe_abs(base_dir: str, path: str) -> str:
    """Validate *path* and return its absolute form."""
    validate_path_with_defaults(base_dir, path)
    try:
        return os.path.abspath(path)
    except OSError as e:
        raise PathValidationError(
            ErrorCode.FAILED_TO_RESOLVE_PATH, f"failed to resolve path: {e}"
        ) from e
