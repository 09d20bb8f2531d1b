"""Write tools: write_workflow, replace_in_workflow, backup_workflow.

Every mutation goes through the atomic store with base_dir set, under the
path's lock from the shared FileLockRegistry.
"""
from pathlib import Path

from fastmcp import FastMCP
from actionguard.errors import error, error_from, SafeFileError, INVALID_ARGUMENT
from actionguard.fileio import copy_file, replace_in_file, write_file_string
from actionguard.locks import FileLockRegistry
from actionguard.tools.read import file_options, resolve_workflow_path

BACKUP_SUFFIX = ".bak"


def write_workflow(relative_path: str, content: str, base_dir: Path, locks: FileLockRegistry) -> None:
    path = resolve_workflow_path(relative_path, base_dir)
    write_file_string(path, content, file_options(base_dir, locks))


def replace_in_workflow(
    relative_path: str,
    old: str,
    new: str,
    base_dir: Path,
    locks: FileLockRegistry,
) -> int:
    """Replace every occurrence of *old* in a workflow file; return the count."""
    if not old:
        raise ValueError("Text to replace must not be empty")
    path = resolve_workflow_path(relative_path, base_dir)
    return replace_in_file(path, old, new, file_options(base_dir, locks, must_exist=True))


def backup_workflow(relative_path: str, base_dir: Path, locks: FileLockRegistry) -> str:
    """Copy a workflow file to a sibling .bak file and return the backup's relative path."""
    src = resolve_workflow_path(relative_path, base_dir)
    dst = resolve_workflow_path(relative_path + BACKUP_SUFFIX, base_dir)
    # always src before dst, so concurrent backups cannot deadlock
    with locks.locked(src), locks.locked(dst):
        copy_file(src, dst, file_options(base_dir))
    return dst.relative_to(base_dir).as_posix()


# --- FastMCP tool registration ---

def _register(mcp: FastMCP, base_dir: Path, locks: FileLockRegistry) -> None:
    @mcp.tool()
    def write_workflow_tool(path: str, content: str) -> str:
        """Atomically write a workflow file inside the repository."""
        try:
            write_workflow(path, content, base_dir, locks)
        except SafeFileError as e:
            return error_from(e)
        return f"Wrote `{path}`."

    @mcp.tool()
    def replace_in_workflow_tool(path: str, old: str, new: str) -> str:
        """Replace every occurrence of a string in a workflow file."""
        try:
            count = replace_in_workflow(path, old, new, base_dir, locks)
        except SafeFileError as e:
            return error_from(e)
        except ValueError as e:
            return error(INVALID_ARGUMENT, str(e))
        return f"Replaced {count} occurrence(s) in `{path}`."

    @mcp.tool()
    def backup_workflow_tool(path: str) -> str:
        """Copy a workflow file to a .bak file next to it."""
        try:
            backup = backup_workflow(path, base_dir, locks)
        except SafeFileError as e:
            return error_from(e)
        return f"Backed up `{path}` to `{backup}`."
