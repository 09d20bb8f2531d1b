from pathlib import Path

import pytest

from actionguard.locks import FileLockRegistry


CI_WORKFLOW = """name: CI
on: [push]
jobs:
  build:
    runs-on: ubuntu-latest
    steps:
      - uses: actions/checkout@v3
      - uses: actions/setup-python@v4
"""

RELEASE_WORKFLOW = """name: Release
on:
  push:
    tags: ["v*"]
jobs:
  release:
    runs-on: ubuntu-latest
    steps:
      - uses: actions/checkout@v3
"""


@pytest.fixture
def base_dir(tmp_path: Path) -> Path:
    """A throwaway repository with two workflows and a README."""
    repo = tmp_path / "repo"
    workflows = repo / ".github" / "workflows"
    workflows.mkdir(parents=True)
    (workflows / "ci.yml").write_text(CI_WORKFLOW)
    (workflows / "release.yaml").write_text(RELEASE_WORKFLOW)
    (repo / "README.md").write_text("# repo\n")
    return repo


@pytest.fixture
def outside(tmp_path: Path) -> Path:
    """A file next to the repository, never inside it."""
    path = tmp_path / "secret.txt"
    path.write_text("top secret\n")
    return path


@pytest.fixture
def locks() -> FileLockRegistry:
    return FileLockRegistry()


@pytest.fixture(autouse=True)
def set_base_dir_env(base_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Point ACTIONGUARD_BASE_DIR at the temp repository and clear other settings."""
    for name in ("ACTIONGUARD_EXTENSIONS", "ACTIONGUARD_MAX_PATH_LENGTH", "ACTIONGUARD_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ACTIONGUARD_BASE_DIR", str(base_dir))
