"""
RepoChat Configuration Module

Re-exports commonly used functions for cleaner imports across the codebase.
"""

# Logging (most commonly used)
from repochat.configs.logging import get_logger, setup_logging

# Paths
from repochat.configs.paths import ensure_data_dir, get_data_path, resolve_codebase_root

# Constants
from repochat.configs.constants import (
    CODE_EXTENSIONS,
    DEFAULT_CACHE_TTL_SECONDS,
    DEFAULT_EXTENSIONS,
    DEFAULT_IGNORE_DIRS,
    DEFAULT_MAX_TOKENS,
    TIMEOUTS,
    get_timeout,
)

# YAML config
from repochat.configs.yaml_config import (
    DEFAULT_CONFIG_YAML,
    create_default_config,
    get_config_path,
    load_yaml_config,
    save_yaml_config,
)

# Runtime
from repochat.configs.runtime import (
    DEFAULT_CONFIG,
    Settings,
    get_full_config,
    load_settings,
    settings_from_config,
)

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",
    # Paths
    "ensure_data_dir",
    "get_data_path",
    "resolve_codebase_root",
    # Constants
    "CODE_EXTENSIONS",
    "DEFAULT_CACHE_TTL_SECONDS",
    "DEFAULT_EXTENSIONS",
    "DEFAULT_IGNORE_DIRS",
    "DEFAULT_MAX_TOKENS",
    "TIMEOUTS",
    "get_timeout",
    # YAML config
    "DEFAULT_CONFIG_YAML",
    "create_default_config",
    "get_config_path",
    "load_yaml_config",
    "save_yaml_config",
    # Runtime
    "DEFAULT_CONFIG",
    "Settings",
    "get_full_config",
    "load_settings",
    "settings_from_config",
]
