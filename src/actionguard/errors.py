"""Structured error codes and exceptions for actionguard.

Validators and file operations raise SafeFileError subclasses carrying an
ErrorCode. The FastMCP registration wrappers in each tool module catch these
and return structured error strings via error().

Error string format: "ERROR [{CODE}]: {message}"
"""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    # input
    BASE_DIRECTORY_NOT_SET = "BASE_DIRECTORY_NOT_SET"
    EMPTY_PATH = "EMPTY_PATH"
    PATH_CONTAINS_NULL_BYTES = "PATH_CONTAINS_NULL_BYTES"
    PATH_EXCEEDS_MAX_LENGTH = "PATH_EXCEEDS_MAX_LENGTH"
    # resolution
    FAILED_TO_RESOLVE_BASE_PATH = "FAILED_TO_RESOLVE_BASE_PATH"
    FAILED_TO_RESOLVE_PATH = "FAILED_TO_RESOLVE_PATH"
    FAILED_TO_EVALUATE_SYMLINK = "FAILED_TO_EVALUATE_SYMLINK"
    FAILED_TO_EVALUATE_BASE_DIR = "FAILED_TO_EVALUATE_BASE_DIR"
    # policy
    PATH_OUTSIDE_ALLOWED_DIR = "PATH_OUTSIDE_ALLOWED_DIR"
    PATH_TRAVERSAL_DETECTED = "PATH_TRAVERSAL_DETECTED"
    SYMLINK_OUTSIDE_ALLOWED_DIR = "SYMLINK_OUTSIDE_ALLOWED_DIR"
    # existence / type
    PATH_DOES_NOT_EXIST = "PATH_DOES_NOT_EXIST"
    FAILED_TO_ACCESS_PATH = "FAILED_TO_ACCESS_PATH"
    NOT_REGULAR_FILE = "NOT_REGULAR_FILE"
    # file operations
    INVALID_FILE_PATH = "INVALID_FILE_PATH"
    READ_FAILED = "READ_FAILED"
    CREATE_DIRS_FAILED = "CREATE_DIRS_FAILED"
    WRITE_TEMP_FAILED = "WRITE_TEMP_FAILED"
    REPLACE_FAILED = "REPLACE_FAILED"
    OPEN_SOURCE_FAILED = "OPEN_SOURCE_FAILED"
    CREATE_DEST_FAILED = "CREATE_DEST_FAILED"
    COPY_FAILED = "COPY_FAILED"
    SYNC_FAILED = "SYNC_FAILED"
    OPEN_APPEND_FAILED = "OPEN_APPEND_FAILED"
    APPEND_FAILED = "APPEND_FAILED"
    SCAN_FAILED = "SCAN_FAILED"
    # tool surface
    INVALID_ARGUMENT = "INVALID_ARGUMENT"


# Bare name for the code the tool wrappers emit directly.
INVALID_ARGUMENT = ErrorCode.INVALID_ARGUMENT


class ErrorKind(str, Enum):
    INPUT = "input"
    RESOLUTION = "resolution"
    POLICY = "policy"
    EXISTENCE = "existence"
    IO = "io"
    USAGE = "usage"


_KINDS: dict[ErrorCode, ErrorKind] = {
    ErrorCode.BASE_DIRECTORY_NOT_SET: ErrorKind.INPUT,
    ErrorCode.EMPTY_PATH: ErrorKind.INPUT,
    ErrorCode.PATH_CONTAINS_NULL_BYTES: ErrorKind.INPUT,
    ErrorCode.PATH_EXCEEDS_MAX_LENGTH: ErrorKind.INPUT,
    ErrorCode.FAILED_TO_RESOLVE_BASE_PATH: ErrorKind.RESOLUTION,
    ErrorCode.FAILED_TO_RESOLVE_PATH: ErrorKind.RESOLUTION,
    ErrorCode.FAILED_TO_EVALUATE_SYMLINK: ErrorKind.RESOLUTION,
    ErrorCode.FAILED_TO_EVALUATE_BASE_DIR: ErrorKind.RESOLUTION,
    ErrorCode.PATH_OUTSIDE_ALLOWED_DIR: ErrorKind.POLICY,
    ErrorCode.PATH_TRAVERSAL_DETECTED: ErrorKind.POLICY,
    ErrorCode.SYMLINK_OUTSIDE_ALLOWED_DIR: ErrorKind.POLICY,
    ErrorCode.PATH_DOES_NOT_EXIST: ErrorKind.EXISTENCE,
    ErrorCode.FAILED_TO_ACCESS_PATH: ErrorKind.EXISTENCE,
    ErrorCode.NOT_REGULAR_FILE: ErrorKind.EXISTENCE,
    ErrorCode.INVALID_ARGUMENT: ErrorKind.USAGE,
}


def kind_of(code: ErrorCode) -> ErrorKind:
    """Return the taxonomy bucket for *code*. Unlisted codes are I/O failures."""
    return _KINDS.get(code, ErrorKind.IO)


class SafeFileError(Exception):
    """Base exception for everything the file-access layer reports."""

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    @property
    def kind(self) -> ErrorKind:
        return kind_of(self.code)


class PathValidationError(SafeFileError, ValueError):
    """Raised when a path fails validation against its base directory."""


class FileOperationError(SafeFileError):
    """Raised when a read, write, copy, append or scan fails.

    The underlying exception (OSError or PathValidationError) is chained as
    __cause__.
    """


def error(code: ErrorCode, message: str) -> str:
    """Format a structured error string for tool return values."""
    return f"ERROR [{code.value}]: {message}"


def error_from(exc: SafeFileError) -> str:
    """Format *exc*, reporting a chained validation failure by its own code."""
    cause = exc.__cause__
    code = cause.code if isinstance(cause, SafeFileError) else exc.code
    return error(code, exc.message)
