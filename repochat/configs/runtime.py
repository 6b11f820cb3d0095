"""
RepoChat Runtime Configuration

Defaults and configuration merging logic. Combines DEFAULT_CONFIG, the YAML
config file and environment variables, then validates the result into an
immutable Settings object.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from repochat.configs.constants import (
    DEFAULT_CACHE_TTL_SECONDS,
    DEFAULT_EXTENSIONS,
    DEFAULT_MAX_TOKENS,
    DEFAULT_PRIMARY_BRANCHES,
)
from repochat.configs.logging import get_logger
from repochat.configs.paths import DEFAULT_CODEBASE_ROOT, resolve_codebase_root
from repochat.configs.yaml_config import load_yaml_config
from repochat.exceptions import ConfigurationError, MissingConfigError, ProjectNotFoundError
from repochat.projects.models import ProjectDescriptor

logger = get_logger("config")

DEFAULT_MODEL = "gpt-4.1-mini-2025-04-14"

# --- Default Runtime Configuration ---

DEFAULT_CONFIG = {
    "codebase_root": DEFAULT_CODEBASE_ROOT,
    "staging_dir": None,  # defaults to <codebase_root>/.staging
    "http_port": 3001,
    "debug": False,
    "cache_ttl_seconds": DEFAULT_CACHE_TTL_SECONDS,
    "max_tokens": DEFAULT_MAX_TOKENS,
    "allowed_extensions": sorted(DEFAULT_EXTENSIONS),
    "projects": {},
    "sync_projects": [],
    "github": {
        "owner": "",
        "repo": "",
        "branches": list(DEFAULT_PRIMARY_BRANCHES),
        "api_url": "https://api.github.com",
    },
    "llm": {
        "provider": "openai",
        "temperature": 0.2,
    },
}


def get_full_config(config_path: Optional[Path] = None, env: Optional[dict] = None) -> dict:
    """
    Get full configuration merged from defaults, YAML, and environment.

    Priority (highest wins):
    1. Environment variables
    2. YAML config file
    3. DEFAULT_CONFIG

    Args:
        config_path: Optional explicit YAML file (defaults to ~/.repochat/config.yaml)
        env: Environment mapping (defaults to os.environ)

    Returns:
        Merged configuration dictionary
    """
    env = os.environ if env is None else env
    config = {
        key: dict(value) if isinstance(value, dict) else value
        for key, value in DEFAULT_CONFIG.items()
    }

    yaml_config = load_yaml_config(config_path)
    for key, value in yaml_config.items():
        if key not in config:
            logger.debug(f"Ignoring unknown config key: {key}")
            continue
        if isinstance(config[key], dict) and isinstance(value, dict) and key != "projects":
            config[key].update(value)
        elif value is not None:
            config[key] = value

    # Environment overrides
    if env.get("REPOCHAT_CODEBASE_ROOT"):
        config["codebase_root"] = env["REPOCHAT_CODEBASE_ROOT"]
    if env.get("REPOCHAT_CACHE_TTL"):
        try:
            config["cache_ttl_seconds"] = float(env["REPOCHAT_CACHE_TTL"])
        except ValueError:
            logger.warning(f"Ignoring invalid REPOCHAT_CACHE_TTL: {env['REPOCHAT_CACHE_TTL']}")
    if env.get("REPOCHAT_MAX_TOKENS"):
        try:
            config["max_tokens"] = int(env["REPOCHAT_MAX_TOKENS"])
        except ValueError:
            logger.warning(f"Ignoring invalid REPOCHAT_MAX_TOKENS: {env['REPOCHAT_MAX_TOKENS']}")
    if env.get("REPOCHAT_LLM_PROVIDER"):
        config["llm"]["provider"] = env["REPOCHAT_LLM_PROVIDER"].lower()
    if env.get("GITHUB_OWNER"):
        config["github"]["owner"] = env["GITHUB_OWNER"]
    if env.get("GITHUB_REPO"):
        config["github"]["repo"] = env["GITHUB_REPO"]
    config["github"]["token"] = env.get("GITHUB_PAT") or None

    return config


@dataclass(frozen=True)
class Settings:
    """Validated, immutable configuration consumed by the services."""

    codebase_root: Path
    staging_dir: Path
    projects: tuple[ProjectDescriptor, ...] = ()
    sync_projects: tuple[str, ...] = ()
    cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS
    max_tokens: int = DEFAULT_MAX_TOKENS
    allowed_extensions: frozenset[str] = DEFAULT_EXTENSIONS
    github_owner: str = ""
    github_repo: str = ""
    github_token: Optional[str] = field(default=None, repr=False)
    github_api_url: str = "https://api.github.com"
    primary_branches: tuple[str, ...] = DEFAULT_PRIMARY_BRANCHES
    llm_provider: str = "openai"
    temperature: float = 0.2
    http_port: int = 3001
    debug: bool = False

    def get_project(self, project_id: str) -> ProjectDescriptor:
        for project in self.projects:
            if project.key == project_id:
                return project
        raise ProjectNotFoundError(project_id)

    def projects_for_folder(self, folder: str) -> list[ProjectDescriptor]:
        """Projects reading from the live path that syncing folder rewrites."""
        live = self.folder_path(folder)
        return [p for p in self.projects if p.path == live]

    def folder_path(self, folder: str) -> Path:
        return self.codebase_root / folder


def _validate_folder_name(folder: str) -> str:
    if not isinstance(folder, str) or not folder.strip():
        raise ConfigurationError("Sync folder names must be non-empty strings")
    if "/" in folder or "\\" in folder or folder in (".", "..") or folder.startswith("."):
        raise ConfigurationError(f"Sync folder must be a plain directory name: {folder!r}")
    return folder


def _build_project(key: str, raw: dict, codebase_root: Path) -> ProjectDescriptor:
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Project {key} must be a mapping")

    folder = raw.get("folder") or ""
    if raw.get("path"):
        path = Path(raw["path"]).expanduser().resolve()
    elif folder:
        path = codebase_root / _validate_folder_name(folder)
    else:
        raise MissingConfigError(f"Project {key} needs a 'path' or a 'folder'")

    return ProjectDescriptor(
        key=key,
        name=raw.get("name") or key,
        path=path,
        model=raw.get("model") or DEFAULT_MODEL,
        description=raw.get("description") or "",
        folder=folder,
    )


def settings_from_config(config: dict) -> Settings:
    """
    Validate a merged config dict into Settings.

    Raises:
        ConfigurationError: On malformed projects, folders or numeric values
    """
    codebase_root = resolve_codebase_root(config.get("codebase_root"))
    staging_dir = (
        Path(config["staging_dir"]).expanduser().resolve()
        if config.get("staging_dir")
        else codebase_root / ".staging"
    )

    raw_projects = config.get("projects") or {}
    if not isinstance(raw_projects, dict):
        raise ConfigurationError("'projects' must be a mapping of id to project settings")
    projects = tuple(_build_project(key, raw, codebase_root) for key, raw in raw_projects.items())

    sync_projects = tuple(_validate_folder_name(f) for f in config.get("sync_projects") or [])
    if len(set(sync_projects)) != len(sync_projects):
        raise ConfigurationError("Duplicate entries in 'sync_projects'")

    try:
        ttl = float(config["cache_ttl_seconds"])
        max_tokens = int(config["max_tokens"])
    except (TypeError, ValueError) as e:
        raise ConfigurationError("cache_ttl_seconds and max_tokens must be numbers") from e
    if ttl < 0 or max_tokens <= 0:
        raise ConfigurationError("cache_ttl_seconds must be >= 0 and max_tokens > 0")

    github = config.get("github") or {}
    llm = config.get("llm") or {}

    settings = Settings(
        codebase_root=codebase_root,
        staging_dir=staging_dir,
        projects=projects,
        sync_projects=sync_projects,
        cache_ttl_seconds=ttl,
        max_tokens=max_tokens,
        allowed_extensions=frozenset(
            e.lower() if e.startswith(".") else f".{e.lower()}"
            for e in config.get("allowed_extensions") or DEFAULT_EXTENSIONS
        ),
        github_owner=github.get("owner") or "",
        github_repo=github.get("repo") or "",
        github_token=github.get("token"),
        github_api_url=github.get("api_url") or "https://api.github.com",
        primary_branches=tuple(github.get("branches") or DEFAULT_PRIMARY_BRANCHES),
        llm_provider=(llm.get("provider") or "openai").lower(),
        temperature=float(llm.get("temperature", 0.2)),
        http_port=int(config.get("http_port") or 3001),
        debug=bool(config.get("debug")),
    )

    # Every synced folder must be the root of at least one project
    for folder in settings.sync_projects:
        if not settings.projects_for_folder(folder):
            raise ConfigurationError(
                f"Sync folder {folder!r} is not the root of any project",
                {"expected_path": str(settings.folder_path(folder))},
            )
    return settings


def load_settings(config_path: Optional[Path] = None, env: Optional[dict] = None) -> Settings:
    """Load, merge and validate configuration."""
    return settings_from_config(get_full_config(config_path, env))
