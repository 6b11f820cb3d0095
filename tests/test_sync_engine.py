"""
Tests for the remote sync engine: backup/swap protocol, rollback and recovery.
"""

import threading
import time
from pathlib import Path

import pytest

from repochat.sync.engine import SyncEngine, SyncState
from conftest import FakeRemote, snapshot

EXPECTED_FRONTEND = {
    "index.ts": b"export const version = 2;\n",
    "README.md": b"# Frontend v2\n",
    "src/app.ts": b"console.log('app');\n",
    "src/lib/util.ts": b"export const x = 1;\n",
}


def leftovers(codebase_root: Path, staging_root: Path) -> list[str]:
    """Backup dirs in the codebase root plus anything left in staging."""
    names = [p.name for p in codebase_root.iterdir() if "-backup-" in p.name]
    if staging_root.exists():
        names += [p.name for p in staging_root.iterdir()]
    return names


@pytest.fixture
def synced():
    return []


@pytest.fixture
def engine(fake_remote, codebase_root, flaky_fs, synced):
    return SyncEngine(
        remote=fake_remote,
        codebase_root=codebase_root,
        fs=flaky_fs,
        on_synced=synced.append,
    )


class TestSuccessfulSync:
    def test_replaces_live_folder(self, engine, codebase_root, synced):
        """The live folder ends up with exactly the remote contents."""
        outcome = engine.sync_project("project-frontend")

        assert outcome.success is True
        assert outcome.files_written == 4
        assert snapshot(codebase_root / "project-frontend") == EXPECTED_FRONTEND
        assert synced == ["project-frontend"]
        assert engine.state_of("project-frontend") == SyncState.DONE

    def test_creates_missing_live_folder(self, engine, codebase_root):
        outcome = engine.sync_project("documentation")

        assert outcome.success is True
        assert snapshot(codebase_root / "documentation") == {"guide.md": b"# Guide\n"}

    def test_resync_is_idempotent(self, engine, codebase_root):
        """Two syncs of an unchanged remote give the same files and leave no residue."""
        engine.sync_project("project-frontend")
        first = snapshot(codebase_root / "project-frontend")
        outcome = engine.sync_project("project-frontend")

        assert outcome.success is True
        assert snapshot(codebase_root / "project-frontend") == first
        assert leftovers(codebase_root, engine.staging_root) == []

    def test_outcome_serializes(self, engine):
        data = engine.sync_project("project-frontend").to_dict()
        assert data["project"] == "project-frontend"
        assert data["success"] is True
        assert "error" not in data
        assert data["timestamp"]

    def test_callback_failure_does_not_fail_sync(self, fake_remote, codebase_root):
        def boom(folder):
            raise RuntimeError("cache unavailable")

        engine = SyncEngine(fake_remote, codebase_root, on_synced=boom)
        assert engine.sync_project("project-frontend").success is True


class TestFailedSync:
    def test_remote_unavailable_changes_nothing(self, engine, fake_remote, codebase_root, flaky_fs, synced):
        """The connectivity check fails before any filesystem mutation."""
        before = snapshot(codebase_root)
        fake_remote.available = False

        outcome = engine.sync_project("project-frontend")

        assert outcome.success is False
        assert "Bad credentials" in outcome.error
        assert snapshot(codebase_root) == before
        assert flaky_fs.renames == []
        assert synced == []
        assert engine.state_of("project-frontend") == SyncState.ERROR

    def test_download_failure_leaves_live_untouched(self, engine, fake_remote, codebase_root, synced):
        """Live bytes are identical after a failed download; staging is removed."""
        before = snapshot(codebase_root / "project-frontend")
        fake_remote.fail_paths.add("project-frontend/src/lib/util.ts")

        outcome = engine.sync_project("project-frontend")

        assert outcome.success is False
        assert "connection reset" in outcome.error
        assert outcome.message == "Kept existing files for project-frontend - sync failed safely"
        assert snapshot(codebase_root / "project-frontend") == before
        assert leftovers(codebase_root, engine.staging_root) == []
        assert synced == []

    def test_commit_failure_restores_backup(self, engine, codebase_root, flaky_fs):
        """Failure after the backup rename restores the live folder exactly."""
        live = codebase_root / "project-frontend"
        before = snapshot(live)
        flaky_fs.fail_rename = lambda src, dst: dst == live and src.parent == engine.staging_root

        outcome = engine.sync_project("project-frontend")

        assert outcome.success is False
        assert "simulated rename failure" in outcome.error
        assert snapshot(live) == before
        assert leftovers(codebase_root, engine.staging_root) == []
        assert any("-backup-" in dst.name for _, dst in flaky_fs.renames)

    def test_backup_rename_failure_leaves_live_untouched(self, engine, codebase_root, flaky_fs):
        live = codebase_root / "project-frontend"
        before = snapshot(live)
        flaky_fs.fail_rename = lambda src, dst: src == live

        outcome = engine.sync_project("project-frontend")

        assert outcome.success is False
        assert snapshot(live) == before
        assert leftovers(codebase_root, engine.staging_root) == []

    def test_restore_failure_is_reported_with_sync_error(self, engine, codebase_root, flaky_fs):
        """When the rollback rename also fails, both errors are reported."""
        live = codebase_root / "project-frontend"
        flaky_fs.fail_rename = lambda src, dst: dst == live

        outcome = engine.sync_project("project-frontend")

        assert outcome.success is False
        assert "simulated rename failure" in outcome.error
        assert "Failed to restore backup" in outcome.error
        assert not live.exists()
        assert len(engine.find_backups("project-frontend")) == 1


class TestRecovery:
    def test_recover_restores_interrupted_swap(self, engine, codebase_root):
        """Live missing + backup present is repaired by renaming the backup back."""
        live = codebase_root / "project-frontend"
        before = snapshot(live)
        backup = codebase_root / "project-frontend-backup-1700000000000"
        live.rename(backup)

        restored = engine.recover("project-frontend")

        assert restored == backup
        assert snapshot(live) == before
        assert engine.find_backups("project-frontend") == []

    def test_recover_noop_when_live_exists(self, engine):
        assert engine.recover("project-frontend") is None

    def test_recover_picks_newest_backup(self, engine, codebase_root):
        live = codebase_root / "project-frontend"
        older = codebase_root / "project-frontend-backup-1000"
        older.mkdir()
        (older / "old.txt").write_text("old")
        live.rename(codebase_root / "project-frontend-backup-2000")

        assert engine.find_backups("project-frontend")[0].name == "project-frontend-backup-2000"
        engine.recover("project-frontend")
        assert (live / "index.ts").exists()

    def test_sync_recovers_before_probing_remote(self, engine, fake_remote, codebase_root):
        """Even a sync that fails its connectivity check first repairs a crashed swap."""
        live = codebase_root / "project-frontend"
        before = snapshot(live)
        live.rename(codebase_root / "project-frontend-backup-1700000000000")
        fake_remote.available = False

        outcome = engine.sync_project("project-frontend")

        assert outcome.success is False
        assert snapshot(live) == before

    def test_sync_after_failed_restore_recovers_and_succeeds(self, engine, codebase_root, flaky_fs):
        live = codebase_root / "project-frontend"
        flaky_fs.fail_rename = lambda src, dst: dst == live
        assert engine.sync_project("project-frontend").success is False
        assert not live.exists()

        flaky_fs.fail_rename = None
        outcome = engine.sync_project("project-frontend")

        assert outcome.success is True
        assert snapshot(live) == EXPECTED_FRONTEND
        assert leftovers(codebase_root, engine.staging_root) == []


class SlowMetadataRemote(FakeRemote):
    """Remote whose metadata request is slow and which records sync start events."""

    def __init__(self, tree, events):
        super().__init__(tree)
        self.events = events

    def get_metadata(self) -> dict:
        self.events.append("start")
        time.sleep(0.1)
        return super().get_metadata()


class TestSerialization:
    def test_same_folder_syncs_do_not_overlap(self, remote_tree, codebase_root):
        events: list[str] = []
        remote = SlowMetadataRemote(remote_tree, events)
        engine = SyncEngine(remote, codebase_root, on_synced=lambda folder: events.append("end"))

        outcomes = []
        threads = [
            threading.Thread(target=lambda: outcomes.append(engine.sync_project("project-frontend")))
            for _ in range(3)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join(10)

        assert [o.success for o in outcomes] == [True, True, True]
        assert events == ["start", "end"] * 3
        assert snapshot(codebase_root / "project-frontend") == EXPECTED_FRONTEND
        assert leftovers(codebase_root, engine.staging_root) == []
