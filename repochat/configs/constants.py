"""
RepoChat Constants

Static configuration values that rarely change: file extension sets,
directories skipped while walking, context budgets and timeouts.
"""

# --- File Extensions ---

# Extensions read into a project's context unless overridden by config
DEFAULT_EXTENSIONS = frozenset(
    {
        ".js",
        ".md",
        ".txt",
        ".json",
        ".css",
        ".html",
        ".py",
        ".tsx",
        ".ts",
    }
)

# Files with these extensions are placed ahead of everything else in the context
CODE_EXTENSIONS = frozenset({".js", ".ts", ".tsx", ".py", ".css", ".html"})

# --- Ignored Directories ---
# Hidden directories (leading ".") are always skipped in addition to these

DEFAULT_IGNORE_DIRS = frozenset(
    {
        "node_modules",
        "bower_components",
        "__pycache__",
        "venv",
        "site-packages",
    }
)

# --- Context Budget ---

CHARS_PER_TOKEN = 4
DEFAULT_MAX_TOKENS = 500_000  # per project
DEFAULT_CACHE_TTL_SECONDS = 10 * 60

# --- Sync ---

BACKUP_MARKER = "-backup-"
SYNC_MARKER = "-sync-"
DEFAULT_PRIMARY_BRANCHES = ("main", "master")

# --- Timeout Configuration ---
# Centralized timeout values (in seconds)

TIMEOUTS = {
    # HTTP requests
    "http_default": 10,
    "github_metadata": 10,
    "github_contents": 30,
    # LLM providers
    "llm_request": 120,
}


def get_timeout(key: str, default: int | float | None = None) -> int | float:
    """
    Get a timeout value by key.

    Args:
        key: Timeout key from TIMEOUTS dict
        default: Default value if key not found

    Returns:
        Timeout value in seconds
    """
    if default is None:
        default = TIMEOUTS.get("http_default", 10)
    return TIMEOUTS.get(key, default)
