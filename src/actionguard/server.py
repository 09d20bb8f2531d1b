import logging
from pathlib import Path

from fastmcp import FastMCP

from actionguard.config import get_base_dir, get_log_level, ConfigError
from actionguard.locks import FileLockRegistry

logger = logging.getLogger(__name__)

mcp = FastMCP(
    name="actionguard",
    instructions=(
        "You are connected to a repository's GitHub Actions workflow files. "
        "Use the available tools to list, read, back up, and update workflows. "
        "Every path is checked against the repository root; paths that escape it are rejected. "
        "Back up a workflow before rewriting it."
    ),
)

# Explicit registration: server -> tools (one direction only).
# base_dir and the lock registry are created once here and closed over in each tool wrapper.
from actionguard.tools import read, write  # noqa: E402


def _register_all(base_dir: Path, locks: FileLockRegistry) -> None:
    read._register(mcp, base_dir)
    write._register(mcp, base_dir, locks)


def main() -> None:
    logging.basicConfig(level=get_log_level(), format="%(asctime)s %(name)s %(levelname)s %(message)s")
    try:
        base_dir = get_base_dir()
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        raise SystemExit(1)

    logger.info("actionguard starting, base directory: %s", base_dir)

    _register_all(base_dir, FileLockRegistry())
    mcp.run()


if __name__ == "__main__":
    main()
