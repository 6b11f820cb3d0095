"""
RepoChat Data Paths

Locations of the data directory (config.yaml, logs) and the local codebase
checkout that projects are read from.
"""

import os
from pathlib import Path

DEFAULT_DATA_PATH = Path.home() / ".repochat"
DEFAULT_CODEBASE_ROOT = "../codebase"


def get_data_path() -> Path:
    """Get the RepoChat data directory path."""
    data_path = os.environ.get("REPOCHAT_DATA_PATH")
    if data_path:
        return Path(data_path).expanduser()
    return DEFAULT_DATA_PATH


def ensure_data_dir() -> Path:
    """Ensure the data directory exists and return it."""
    data_path = get_data_path()
    data_path.mkdir(parents=True, exist_ok=True)
    return data_path


def resolve_codebase_root(value: str | None = None) -> Path:
    """Resolve the codebase root, expanding ~ and making it absolute."""
    return Path(value or DEFAULT_CODEBASE_ROOT).expanduser().resolve()
