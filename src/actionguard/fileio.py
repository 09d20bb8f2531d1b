"""Validated, atomic file operations.

Reads and writes that receive FileOptions with a non-empty base_dir validate
the path before touching disk; an empty base_dir skips validation. Writes go
to an exclusively created sibling ``.tmp`` file and become visible through a single os.replace(),
so the target is either untouched or fully replaced.

Appends are neither validated nor atomic: they target log-like files outside
the sandboxed tree.
"""
from __future__ import annotations

import contextlib
import logging
import os
import shutil
import stat
import tempfile
from dataclasses import dataclass, field
from typing import Callable

from actionguard.errors import ErrorCode, FileOperationError, PathValidationError
from actionguard.locks import FileLockRegistry
from actionguard.paths import PathValidationOptions, validate_path

logger = logging.getLogger(__name__)

_DIR_MODE = 0o750
_APPEND_MODE = 0o600
_TMP_SUFFIX = ".tmp"
# surrogateescape keeps undecodable bytes intact across a read/write round trip
_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


@dataclass(frozen=True)
class FileOptions:
    create_dirs: bool = True
    mode: int = 0o600
    # "" disables validation for the call
    base_dir: str = ""
    validate_options: PathValidationOptions = field(default_factory=PathValidationOptions)
    # when set, mutating operations hold the path's lock for their critical section
    locks: FileLockRegistry | None = None


def default_file_options() -> FileOptions:
    return FileOptions()


def _options(options: FileOptions | None) -> FileOptions:
    return options if options is not None else default_file_options()


def _validate(path: str, options: FileOptions) -> None:
    if not options.base_dir:
        return
    try:
        validate_path(options.base_dir, path, options.validate_options)
    except PathValidationError as e:
        raise FileOperationError(ErrorCode.INVALID_FILE_PATH, f"invalid file path: {e}") from e


def _guard(path: str, options: FileOptions):
    if options.locks is None:
        return contextlib.nullcontext()
    return options.locks.locked(path)


def _remove_quietly(path: str) -> None:
    try:
        os.remove(path)
    except OSError as e:
        logger.debug("Could not remove temp file %s: %s", path, e)


# --- read ---

def _read(path: str, options: FileOptions) -> bytes:
    _validate(path, options)
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise FileOperationError(ErrorCode.READ_FAILED, f"error reading file: {e}") from e


def read_file_with_options(path: str | os.PathLike[str], options: FileOptions) -> bytes:
    return _read(os.fspath(path), options)


def read_file(path: str | os.PathLike[str]) -> bytes:
    return read_file_with_options(path, default_file_options())


def read_file_string(path: str | os.PathLike[str], options: FileOptions | None = None) -> str:
    return read_file_with_options(path, _options(options)).decode(_ENCODING, _ERRORS)


# --- write ---

def _write(path: str, data: bytes, options: FileOptions) -> None:
    _validate(path, options)

    if options.create_dirs:
        parent = os.path.dirname(path)
        if parent:
            try:
                os.makedirs(parent, mode=_DIR_MODE, exist_ok=True)
            except OSError as e:
                raise FileOperationError(
                    ErrorCode.CREATE_DIRS_FAILED, f"error creating directories: {e}"
                ) from e

    parent = os.path.dirname(path) or os.curdir
    tmp = None
    try:
        # exclusive create, so an existing entry or link at the temp name is never opened
        fd, tmp = tempfile.mkstemp(dir=parent, prefix=f".{os.path.basename(path)}.", suffix=_TMP_SUFFIX)
        with os.fdopen(fd, "wb") as f:
            os.fchmod(f.fileno(), options.mode)
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
    except OSError as e:
        if tmp is not None:
            _remove_quietly(tmp)
        raise FileOperationError(ErrorCode.WRITE_TEMP_FAILED, f"error writing temporary file: {e}") from e

    try:
        os.replace(tmp, path)
    except OSError as e:
        _remove_quietly(tmp)
        raise FileOperationError(ErrorCode.REPLACE_FAILED, f"error replacing original file: {e}") from e

    logger.debug("Wrote %d bytes to %s", len(data), path)


def write_file_with_options(path: str | os.PathLike[str], data: bytes, options: FileOptions) -> None:
    """Atomically replace *path* with *data*.

    On any failure the temp file is removed and the target is left as it was.
    """
    path = os.fspath(path)
    with _guard(path, options):
        _write(path, data, options)


def write_file(path: str | os.PathLike[str], data: bytes) -> None:
    write_file_with_options(path, data, default_file_options())


def write_file_string(path: str | os.PathLike[str], content: str, options: FileOptions | None = None) -> None:
    write_file_with_options(path, content.encode(_ENCODING, _ERRORS), _options(options))


# --- append / copy ---

def append_to_file(path: str | os.PathLike[str], data: bytes) -> None:
    path = os.fspath(path)
    try:
        fd = os.open(path, os.O_WRONLY | os.O_APPEND | os.O_CREAT, _APPEND_MODE)
    except OSError as e:
        raise FileOperationError(ErrorCode.OPEN_APPEND_FAILED, f"error opening file for append: {e}") from e
    try:
        with os.fdopen(fd, "ab") as f:
            f.write(data)
    except OSError as e:
        raise FileOperationError(ErrorCode.APPEND_FAILED, f"error appending to file: {e}") from e


def append_to_file_string(path: str | os.PathLike[str], content: str) -> None:
    append_to_file(path, content.encode(_ENCODING, _ERRORS))


def copy_file(
    src: str | os.PathLike[str],
    dst: str | os.PathLike[str],
    options: FileOptions | None = None,
) -> None:
    """Copy *src* to *dst* and fsync the destination before returning.

    When *options* carries a base_dir both paths are validated first.
    """
    src, dst = os.fspath(src), os.fspath(dst)
    if options is not None:
        _validate(src, options)
        _validate(dst, options)

    try:
        src_file = open(src, "rb")
    except OSError as e:
        raise FileOperationError(ErrorCode.OPEN_SOURCE_FAILED, f"error opening source file: {e}") from e

    with src_file:
        try:
            dst_file = open(dst, "wb")
        except OSError as e:
            raise FileOperationError(ErrorCode.CREATE_DEST_FAILED, f"error creating destination file: {e}") from e

        with dst_file:
            try:
                shutil.copyfileobj(src_file, dst_file)
            except OSError as e:
                raise FileOperationError(ErrorCode.COPY_FAILED, f"error copying file contents: {e}") from e
            try:
                dst_file.flush()
                os.fsync(dst_file.fileno())
            except OSError as e:
                raise FileOperationError(ErrorCode.SYNC_FAILED, f"error syncing file: {e}") from e

    logger.debug("Copied %s to %s", src, dst)


# --- line-oriented helpers ---

def read_lines(path: str | os.PathLike[str], options: FileOptions | None = None) -> list[str]:
    """Split the file on "\\n". A trailing newline yields a trailing empty string."""
    return read_file_string(path, options).split("\n")


def write_lines(path: str | os.PathLike[str], lines: list[str], options: FileOptions | None = None) -> None:
    write_file_string(path, "\n".join(lines), options)


def modify_lines(
    path: str | os.PathLike[str],
    fn: Callable[[str, int], str],
    options: FileOptions | None = None,
) -> None:
    """Rewrite every line through fn(line, index) and write the result back.

    The whole file is buffered in memory. With options.locks set, the read
    and the write happen under one hold of the path's lock.
    """
    path = os.fspath(path)
    opts = _options(options)
    with _guard(path, opts):
        lines = _read(path, opts).decode(_ENCODING, _ERRORS).split("\n")
        new_lines = [fn(line, i) for i, line in enumerate(lines)]
        _write(path, "\n".join(new_lines).encode(_ENCODING, _ERRORS), opts)


def replace_in_file(
    path: str | os.PathLike[str],
    old: str,
    new: str,
    options: FileOptions | None = None,
) -> int:
    """Replace every occurrence of *old* with *new*; return how many were replaced.

    The file is not rewritten when nothing matches.
    """
    path = os.fspath(path)
    opts = _options(options)
    with _guard(path, opts):
        content = _read(path, opts).decode(_ENCODING, _ERRORS)
        count = content.count(old) if old else 0
        if count:
            _write(path, content.replace(old, new).encode(_ENCODING, _ERRORS), opts)
    return count


# --- predicates ---

def file_exists(path: str | os.PathLike[str]) -> bool:
    try:
        os.stat(path)
    except (OSError, ValueError):
        return False
    return True


def is_directory(path: str | os.PathLike[str]) -> bool:
    try:
        return stat.S_ISDIR(os.stat(path).st_mode)
    except (OSError, ValueError):
        return False


def is_regular_file(path: str | os.PathLike[str]) -> bool:
    try:
        return stat.S_ISREG(os.stat(path).st_mode)
    except (OSError, ValueError):
        return False
