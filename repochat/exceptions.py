"""
RepoChat Exception Hierarchy

Centralized exception classes for structured error handling across the codebase.
All RepoChat-specific exceptions inherit from RepoChatError.

Usage:
    from repochat.exceptions import RepoChatError, SyncError

    try:
        engine.sync_project(folder)
    except SyncError as e:
        logger.error(f"Sync failed: {e}")
"""


class RepoChatError(Exception):
    """Base exception for all RepoChat errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(RepoChatError):
    """Error in RepoChat configuration."""

    pass


class MissingConfigError(ConfigurationError):
    """Required configuration value is missing."""

    pass


# =============================================================================
# Project Errors
# =============================================================================


class ProjectNotFoundError(RepoChatError):
    """Project id is not configured."""

    def __init__(self, project_id: str):
        super().__init__(f"Unknown project: {project_id}")
        self.project_id = project_id


# =============================================================================
# Sync Errors
# =============================================================================


class SyncError(RepoChatError):
    """Base class for remote sync errors."""

    pass


class RemoteUnavailableError(SyncError):
    """Remote repository could not be reached or rejected our credentials."""

    pass


class DownloadError(SyncError):
    """Downloading the remote folder into staging failed."""

    pass


class SwapError(SyncError):
    """Renaming the backup or staging directory failed."""

    pass


class RestoreError(SyncError):
    """Putting the backup back into the live path failed."""

    pass


class SyncNotAllowedError(SyncError):
    """Folder is not in the sync-eligible list."""

    def __init__(self, folder: str, allowed: list[str] | tuple[str, ...]):
        super().__init__(f"Project {folder} is not in sync list", {"sync_projects": list(allowed)})
        self.folder = folder
        self.allowed = list(allowed)


# =============================================================================
# HTTP/Client Errors
# =============================================================================


class ClientError(RepoChatError):
    """Base class for HTTP client errors."""

    pass


class HTTPRequestError(ClientError):
    """HTTP request failed."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_text: str | None = None,
    ):
        details = {}
        if status_code is not None:
            details["status_code"] = status_code
        if response_text:
            details["response_text"] = response_text[:200]
        super().__init__(message, details)
        self.status_code = status_code
        self.response_text = response_text


class HTTPConnectionError(ClientError):
    """Failed to connect to HTTP endpoint."""

    pass


class HTTPTimeoutError(ClientError):
    """HTTP request timed out."""

    pass


# =============================================================================
# LLM Provider Errors
# =============================================================================


class LLMError(RepoChatError):
    """Base class for LLM provider errors."""

    pass


class LLMConnectionError(LLMError):
    """Failed to connect to LLM provider."""

    pass


class LLMTimeoutError(LLMError):
    """LLM request timed out."""

    pass


class LLMResponseError(LLMError):
    """Invalid or unexpected response from LLM."""

    pass
