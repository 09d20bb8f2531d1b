"""Directory scanning for candidate workflow files."""
from __future__ import annotations

import logging
import os
from collections.abc import Iterable

from actionguard.errors import ErrorCode, FileOperationError

logger = logging.getLogger(__name__)

WORKFLOWS_DIR = os.path.join(".github", "workflows")
WORKFLOW_EXTENSIONS = (".yml", ".yaml")


def _walk(directory: str, ext: str, found: list[str]) -> None:
    # sorted for a stable, lexical result order
    with os.scandir(directory) as it:
        entries = sorted(it, key=lambda e: e.name)
    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            _walk(entry.path, ext, found)
        elif entry.name.endswith(ext):
            found.append(entry.path)


def find_files_with_extension(directory: str | os.PathLike[str], ext: str) -> list[str]:
    """Return full paths of all non-directory entries under *directory* ending in *ext*.

    Any error during the walk aborts the scan; no partial results are returned.
    """
    directory = os.fspath(directory)
    found: list[str] = []
    try:
        if os.path.isdir(directory):
            _walk(directory, ext, found)
        else:
            os.lstat(directory)
            if os.path.basename(directory).endswith(ext):
                found.append(directory)
    except OSError as e:
        raise FileOperationError(ErrorCode.SCAN_FAILED, f"error scanning directory: {e}") from e
    return found


def find_workflow_files(
    repo_dir: str | os.PathLike[str],
    extensions: Iterable[str] = WORKFLOW_EXTENSIONS,
) -> list[str]:
    """Return the workflow files under repo_dir/.github/workflows, sorted.

    A repository without a workflows directory has no workflows.
    """
    workflows = os.path.join(os.fspath(repo_dir), WORKFLOWS_DIR)
    if not os.path.isdir(workflows):
        logger.debug("No workflows directory at %s", workflows)
        return []
    files: set[str] = set()
    for ext in extensions:
        files.update(find_files_with_extension(workflows, ext))
    return sorted(files)
