"""
RepoChat YAML Configuration

Loading, saving, and defaults for ~/.repochat/config.yaml.
"""

from pathlib import Path

import yaml

from repochat.configs.logging import get_logger
from repochat.configs.paths import ensure_data_dir, get_data_path
from repochat.exceptions import ConfigurationError

logger = get_logger("config")

# --- Default Config Template ---

DEFAULT_CONFIG_YAML = """\
# RepoChat Configuration
# Edit this file to describe the codebases the assistant answers questions about.

# Directory holding one sub-folder per synced project
codebase_root: ../codebase

# HTTP server port
http_port: 3001

# Enable debug logging
debug: false

# Context settings
cache_ttl_seconds: 600      # Rebuild a project's context after this many seconds
max_tokens: 500000          # Approximate token budget per project (chars / 4)
# allowed_extensions: [".js", ".md", ".txt", ".json", ".css", ".html", ".py", ".tsx", ".ts"]

# Projects available in the chat UI
projects:
  frontend:
    name: "Frontend"
    folder: project-frontend
    model: gpt-4.1-mini-2025-04-14
    description: "Frontend components and user interface code"
  backend:
    name: "Backend"
    folder: project-backend
    model: gpt-4.1-mini-2025-04-14
    description: "Backend API and server-side logic"
  docs:
    name: "Documentation"
    folder: documentation
    model: gpt-4.1-mini-2025-04-14
    description: "Project documentation and guides"

# Folders refreshed from GitHub by the webhook and the manual sync endpoints
sync_projects:
  - project-frontend
  - project-backend
  - documentation

# Remote repository (token read from GITHUB_PAT env var)
github:
  owner: ""
  repo: ""
  branches: ["main", "master"]

# Text generation
llm:
  provider: openai          # openai or anthropic
  temperature: 0.2
"""


def get_config_path() -> Path:
    """Get the path to config.yaml."""
    return get_data_path() / "config.yaml"


def load_yaml_config(path: Path | None = None) -> dict:
    """
    Load configuration from ~/.repochat/config.yaml.

    Args:
        path: Optional explicit config file path

    Returns:
        Configuration dictionary (empty if file doesn't exist)

    Raises:
        ConfigurationError: If the file exists but is not valid YAML
    """
    config_path = path or get_config_path()
    if not config_path.exists():
        return {}

    try:
        data = yaml.safe_load(config_path.read_text())
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Invalid YAML in {config_path}", {"error": str(e)}
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Expected a mapping at top level of {config_path}")
    return data


def save_yaml_config(config: dict, path: Path | None = None) -> None:
    """Save configuration to ~/.repochat/config.yaml."""
    config_path = path or get_config_path()
    ensure_data_dir()
    config_path.write_text(yaml.safe_dump(config, default_flow_style=False, sort_keys=False))
    logger.info(f"Saved configuration to {config_path}")


def create_default_config() -> bool:
    """
    Create default config.yaml if it doesn't exist.

    Returns:
        True if file was created, False if it already exists
    """
    config_path = get_config_path()
    if config_path.exists():
        return False

    ensure_data_dir()
    config_path.write_text(DEFAULT_CONFIG_YAML)
    return True
