"""
Remote Sync Engine

Replaces a project's live folder with a fresh copy of the remote folder.

Protocol for one folder:
    DOWNLOADING  remote tree -> staging dir (live tree untouched)
    BACKING_UP   live -> live-backup-<ms> (rename, not copy)
    SWAPPING     staging -> live (commit point)
    CLEANING_UP  remove backups and stale staging, notify the cache
Any failure before the commit removes staging and, if a backup was taken,
renames it back into the live path. A crash between BACKING_UP and SWAPPING
leaves "live missing, backup present"; the next sync of that folder restores
the newest backup before doing anything else.
"""

import threading
import time
import uuid
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from repochat.configs.constants import BACKUP_MARKER, SYNC_MARKER
from repochat.configs.logging import get_logger
from repochat.exceptions import DownloadError, RestoreError, SwapError, SyncError
from repochat.projects.models import SyncOutcome
from repochat.sync.filesystem import FileSystem, LocalFileSystem
from repochat.sync.remote import RemoteRepository, iter_remote_tree

logger = get_logger("sync.engine")


class SyncState(str, Enum):
    IDLE = "idle"
    DOWNLOADING = "downloading"
    BACKING_UP = "backing_up"
    SWAPPING = "swapping"
    CLEANING_UP = "cleaning_up"
    DONE = "done"
    ERROR = "error"


def _parse_stamp(name: str, prefix: str) -> int:
    stamp = name[len(prefix):].split("-", 1)[0]
    return int(stamp) if stamp.isdigit() else -1


class SyncEngine:
    """
    Syncs folders under codebase_root from a RemoteRepository.

    Syncs of the same folder are serialized by a per-folder lock; different
    folders may sync concurrently.

    Args:
        remote: Source-of-truth repository
        codebase_root: Directory holding the live project folders
        staging_root: Where downloads are staged; must be on the same volume
                      as codebase_root (default: <codebase_root>/.staging)
        fs: Filesystem capability (default: LocalFileSystem)
        on_synced: Called with the folder name after a successful commit
        remote_prefix: Path inside the remote repository holding the folders
        clock: Wall-clock seconds, used for backup and staging names
    """

    def __init__(
        self,
        remote: RemoteRepository,
        codebase_root: Path,
        staging_root: Optional[Path] = None,
        fs: Optional[FileSystem] = None,
        on_synced: Optional[Callable[[str], None]] = None,
        remote_prefix: str = "",
        clock: Callable[[], float] = time.time,
    ):
        self.remote = remote
        self.codebase_root = Path(codebase_root)
        self.staging_root = Path(staging_root) if staging_root else self.codebase_root / ".staging"
        self.fs = fs or LocalFileSystem()
        self._on_synced = on_synced
        self._remote_prefix = remote_prefix.strip("/")
        self._clock = clock
        self._states: dict[str, SyncState] = {}
        self._folder_locks: dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    # --- Paths ---

    def live_path(self, folder: str) -> Path:
        return self.codebase_root / folder

    def remote_path(self, folder: str) -> str:
        return f"{self._remote_prefix}/{folder}" if self._remote_prefix else folder

    def _millis(self) -> int:
        return int(self._clock() * 1000)

    def _staging_path(self, folder: str) -> Path:
        return self.staging_root / f"{folder}{SYNC_MARKER}{self._millis()}-{uuid.uuid4().hex[:8]}"

    def _backup_path(self, folder: str) -> Path:
        base = self.codebase_root / f"{folder}{BACKUP_MARKER}{self._millis()}"
        candidate, n = base, 1
        while self.fs.exists(candidate):
            candidate = base.with_name(f"{base.name}-{n}")
            n += 1
        return candidate

    def find_backups(self, folder: str) -> list[Path]:
        """Backup directories left for a folder, newest first."""
        if not self.fs.exists(self.codebase_root):
            return []
        prefix = f"{folder}{BACKUP_MARKER}"
        names = [n for n in self.fs.list_dir(self.codebase_root) if n.startswith(prefix)]
        names.sort(key=lambda n: (_parse_stamp(n, prefix), n), reverse=True)
        return [self.codebase_root / n for n in names]

    def _stale_staging(self, folder: str) -> list[Path]:
        if not self.fs.exists(self.staging_root):
            return []
        prefix = f"{folder}{SYNC_MARKER}"
        return [self.staging_root / n for n in self.fs.list_dir(self.staging_root) if n.startswith(prefix)]

    # --- State ---

    def state_of(self, folder: str) -> SyncState:
        with self._lock:
            return self._states.get(folder, SyncState.IDLE)

    def _set_state(self, folder: str, state: SyncState) -> None:
        with self._lock:
            self._states[folder] = state
        logger.debug(f"{folder}: {state.value}")

    def _folder_lock(self, folder: str) -> threading.Lock:
        with self._lock:
            lock = self._folder_locks.get(folder)
            if lock is None:
                lock = self._folder_locks[folder] = threading.Lock()
            return lock

    # --- Public API ---

    def recover(self, folder: str) -> Optional[Path]:
        """
        Repair an interrupted swap: if the live folder is missing but a
        backup exists, rename the newest backup back into place.

        Returns:
            The backup path that was restored, or None if nothing was needed

        Raises:
            RestoreError: If the rename back fails
        """
        live = self.live_path(folder)
        if self.fs.exists(live):
            return None
        backups = self.find_backups(folder)
        if not backups:
            return None

        newest = backups[0]
        logger.warning(f"Live folder {live} is missing; restoring interrupted sync backup {newest}")
        try:
            self.fs.rename(newest, live)
        except OSError as e:
            raise RestoreError(f"Failed to restore backup {newest}: {e}") from e
        return newest

    def sync_project(self, folder: str, ref: Optional[str] = None) -> SyncOutcome:
        """
        Sync one folder from the remote repository.

        Args:
            folder: Folder key under codebase_root
            ref: Branch or commit to read (the remote's default if None)

        Never raises for sync failures; they are reported in the outcome
        after the live folder has been left untouched or restored.
        """
        with self._folder_lock(folder):
            return self._sync_locked(folder, ref)

    # --- Protocol ---

    def _sync_locked(self, folder: str, ref: Optional[str]) -> SyncOutcome:
        logger.info(f"Starting sync for {folder}...")
        live = self.live_path(folder)
        staging: Optional[Path] = None
        backup: Optional[Path] = None
        self._set_state(folder, SyncState.IDLE)

        try:
            self.recover(folder)

            self.remote.get_metadata()
            logger.info(f"Remote connection OK ({self.remote.description})")

            self._set_state(folder, SyncState.DOWNLOADING)
            staging = self._staging_path(folder)
            files_written = self._download(folder, staging, ref)

            self._set_state(folder, SyncState.BACKING_UP)
            self._ensure_dir(self.codebase_root)
            if self.fs.exists(live):
                backup = self._backup_path(folder)
                self._rename(live, backup)
                logger.info(f"Backed up existing folder to {backup}")

            self._set_state(folder, SyncState.SWAPPING)
            self._rename(staging, live)
            staging = None
            logger.info(f"Updated {folder} from {self.remote.description}")

        except Exception as e:
            self._set_state(folder, SyncState.ERROR)
            logger.error(f"Sync failed for {folder}: {e}")
            restore_error = self._rollback(folder, live, backup, staging)
            error = str(e) if restore_error is None else f"{e}; {restore_error}"
            return SyncOutcome(
                folder=folder,
                success=False,
                message=f"Kept existing files for {folder} - sync failed safely",
                error=error,
            )

        self._set_state(folder, SyncState.CLEANING_UP)
        self._cleanup(folder)
        self._notify(folder)
        self._set_state(folder, SyncState.DONE)

        return SyncOutcome(
            folder=folder,
            success=True,
            message=f"Successfully synced {folder} from GitHub",
            files_written=files_written,
        )

    def _download(self, folder: str, staging: Path, ref: Optional[str]) -> int:
        logger.info(f"Downloading {self.remote_path(folder)} into {staging}")
        count = 0
        try:
            self.fs.makedirs(staging)
            for rel_path, content in iter_remote_tree(self.remote, self.remote_path(folder), ref=ref):
                self.fs.write_bytes(staging.joinpath(*rel_path.split("/")), content)
                count += 1
        except SyncError:
            raise
        except OSError as e:
            raise DownloadError(f"Download failed: {e}") from e
        logger.info(f"Downloaded {count} files for {folder}")
        return count

    def _ensure_dir(self, path: Path) -> None:
        try:
            self.fs.makedirs(path)
        except OSError as e:
            raise SwapError(f"Cannot create {path}: {e}") from e

    def _rename(self, src: Path, dst: Path) -> None:
        try:
            self.fs.rename(src, dst)
        except OSError as e:
            raise SwapError(f"Rename {src} -> {dst} failed: {e}") from e

    def _rollback(
        self,
        folder: str,
        live: Path,
        backup: Optional[Path],
        staging: Optional[Path],
    ) -> Optional[str]:
        """Undo a failed sync. Returns a restore error message, if any."""
        if staging is not None and self.fs.exists(staging):
            try:
                self.fs.remove_tree(staging)
            except OSError as e:
                logger.warning(f"Failed to remove staging dir {staging}: {e}")

        if backup is None or not self.fs.exists(backup):
            return None

        try:
            if self.fs.exists(live):
                if self.fs.list_dir(live):
                    message = f"Live folder {live} is not empty; backup left at {backup}"
                    logger.error(message)
                    return message
                self.fs.remove_tree(live)
            self.fs.rename(backup, live)
        except OSError as e:
            logger.error(f"Failed to restore backup: {e}")
            return f"Failed to restore backup {backup}: {e}"

        logger.info(f"Restored backup after failed sync of {folder}")
        return None

    def _cleanup(self, folder: str) -> None:
        """Best-effort removal of backups and stale staging dirs."""
        for path in self.find_backups(folder) + self._stale_staging(folder):
            try:
                self.fs.remove_tree(path)
                logger.info(f"Cleaned up {path}")
            except OSError as e:
                logger.warning(f"Failed to remove {path}: {e}")

    def _notify(self, folder: str) -> None:
        if self._on_synced is None:
            return
        try:
            self._on_synced(folder)
        except Exception as e:
            logger.error(f"Post-sync callback failed for {folder}: {e}")
