"""
Remote Sync

Keeps local project folders in step with the remote repository.
"""

from repochat.sync.engine import SyncEngine, SyncState
from repochat.sync.filesystem import FileSystem, LocalFileSystem
from repochat.sync.orchestrator import SyncOrchestrator, WebhookResult, branch_from_ref
from repochat.sync.remote import (
    GitHubRepository,
    RemoteDirectory,
    RemoteEntry,
    RemoteFile,
    RemoteRepository,
    iter_remote_tree,
)

__all__ = [
    "SyncEngine",
    "SyncState",
    "FileSystem",
    "LocalFileSystem",
    "SyncOrchestrator",
    "WebhookResult",
    "branch_from_ref",
    "GitHubRepository",
    "RemoteDirectory",
    "RemoteEntry",
    "RemoteFile",
    "RemoteRepository",
    "iter_remote_tree",
]
