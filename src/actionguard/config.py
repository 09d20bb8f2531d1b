import os
from pathlib import Path

from actionguard.paths import MAX_PATH_LENGTH, PathValidationOptions


class ConfigError(Exception):
    pass


def get_base_dir() -> Path:
    raw = os.environ.get("ACTIONGUARD_BASE_DIR")
    if not raw:
        raise ConfigError("ACTIONGUARD_BASE_DIR environment variable is not set")

    path = Path(raw).expanduser().resolve()

    if not path.exists():
        raise ConfigError(f"Base directory does not exist: {path}")

    if not path.is_dir():
        raise ConfigError(f"Base directory is not a directory: {path}")

    return path


def get_workflow_extensions() -> list[str]:
    raw = os.environ.get("ACTIONGUARD_EXTENSIONS", ".yml,.yaml")
    return [e.strip() for e in raw.split(",") if e.strip()]


def get_max_path_length() -> int:
    raw = os.environ.get("ACTIONGUARD_MAX_PATH_LENGTH")
    if not raw:
        return MAX_PATH_LENGTH
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"ACTIONGUARD_MAX_PATH_LENGTH must be an integer, got {raw!r}")
    if value <= 0:
        raise ConfigError(f"ACTIONGUARD_MAX_PATH_LENGTH must be positive, got {value}")
    return value


def get_log_level() -> str:
    return os.environ.get("ACTIONGUARD_LOG_LEVEL", "INFO").upper()


def get_validation_options() -> PathValidationOptions:
    return PathValidationOptions(max_path_length=get_max_path_length())
