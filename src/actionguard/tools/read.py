"""Read tools: read_workflow, list_workflows, check_path."""
import dataclasses
from pathlib import Path

from fastmcp import FastMCP
from actionguard.config import get_validation_options, get_workflow_extensions
from actionguard.errors import error, error_from, SafeFileError, INVALID_ARGUMENT
from actionguard.fileio import FileOptions, read_file_string
from actionguard.locks import FileLockRegistry
from actionguard.paths import join_and_validate_path, validate_path
from actionguard.scan import find_workflow_files


def file_options(
    base_dir: Path,
    locks: FileLockRegistry | None = None,
    must_exist: bool = False,
) -> FileOptions:
    """FileOptions sandboxed to *base_dir*, using the configured validation limits."""
    validate = get_validation_options()
    if must_exist:
        validate = dataclasses.replace(validate, require_regular_file=True, allow_non_existent=False)
    return FileOptions(base_dir=str(base_dir), validate_options=validate, locks=locks)


def resolve_workflow_path(relative_path: str, base_dir: Path) -> Path:
    """Join *relative_path* onto *base_dir*, rejecting anything that escapes it."""
    joined = join_and_validate_path(str(base_dir), relative_path)
    return base_dir / joined


def read_workflow(relative_path: str, base_dir: Path) -> str:
    path = resolve_workflow_path(relative_path, base_dir)
    return read_file_string(path, file_options(base_dir, must_exist=True))


def list_workflows(base_dir: Path, extensions: list[str] | None = None) -> list[str]:
    """Return workflow paths relative to *base_dir*, sorted."""
    exts = extensions or get_workflow_extensions()
    return [Path(p).relative_to(base_dir).as_posix() for p in find_workflow_files(base_dir, exts)]


def check_path(relative_path: str, base_dir: Path) -> None:
    """Raise PathValidationError unless *relative_path* is safe to write."""
    path = resolve_workflow_path(relative_path, base_dir)
    validate_path(str(base_dir), str(path), get_validation_options())


# --- FastMCP tool registration ---

def _register(mcp: FastMCP, base_dir: Path) -> None:
    @mcp.tool()
    def read_workflow_tool(path: str) -> str:
        """Return the content of a workflow file inside the repository."""
        try:
            return read_workflow(path, base_dir)
        except SafeFileError as e:
            return error_from(e)

    @mcp.tool()
    def list_workflows_tool() -> str:
        """List workflow files under .github/workflows."""
        try:
            paths = list_workflows(base_dir)
        except SafeFileError as e:
            return error_from(e)
        if not paths:
            return "No workflow files found."
        return "\n".join(paths)

    @mcp.tool()
    def check_path_tool(path: str) -> str:
        """Check whether a path is safe to read or write inside the repository."""
        if not path.strip():
            return error(INVALID_ARGUMENT, "path must not be empty")
        try:
            check_path(path, base_dir)
        except SafeFileError as e:
            return error_from(e)
        return f"`{path}` is inside the repository."
