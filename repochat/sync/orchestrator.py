"""
Sync Orchestrator

Runs the sync engine over the configured sync-eligible folders, in response
to a push webhook or a manual request.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from repochat.configs.constants import DEFAULT_PRIMARY_BRANCHES
from repochat.configs.logging import get_logger
from repochat.exceptions import SyncNotAllowedError
from repochat.projects.models import SyncOutcome, utc_now
from repochat.sync.engine import SyncEngine

logger = get_logger("sync.orchestrator")


@dataclass
class WebhookResult:
    """What a push notification caused."""

    triggered: bool
    message: str
    ref: Optional[str] = None
    outcomes: list[SyncOutcome] = field(default_factory=list)


def branch_from_ref(ref: Optional[str]) -> Optional[str]:
    """'refs/heads/main' -> 'main'. Tags and other refs give None."""
    if not ref or not ref.startswith("refs/heads/"):
        return None
    return ref[len("refs/heads/"):]


class SyncOrchestrator:
    """
    Sequences syncs of the configured folders.

    Args:
        engine: Engine performing individual folder syncs
        sync_projects: Folder keys allowed to be synced, in sync order
        primary_branches: Branch names whose pushes trigger a full sync
        has_token: Whether a remote access token is configured (status only)
    """

    def __init__(
        self,
        engine: SyncEngine,
        sync_projects: Iterable[str],
        primary_branches: Iterable[str] = DEFAULT_PRIMARY_BRANCHES,
        has_token: bool = False,
    ):
        self.engine = engine
        self.sync_projects = tuple(sync_projects)
        self.primary_branches = tuple(primary_branches)
        self.has_token = has_token

    def is_sync_eligible(self, folder: str) -> bool:
        return folder in self.sync_projects

    def sync_all(self, ref: Optional[str] = None) -> list[SyncOutcome]:
        """
        Sync every configured folder, one at a time, continuing past failures.

        Args:
            ref: Branch to read; the remote's configured ref if None
        """
        outcomes = []
        for folder in self.sync_projects:
            outcome = self.engine.sync_project(folder, ref=ref)
            outcomes.append(outcome)

        failed = [o.folder for o in outcomes if not o.success]
        if failed:
            logger.warning(f"Sync finished with failures: {', '.join(failed)}")
        else:
            logger.info(f"Synced {len(outcomes)} folders")
        return outcomes

    def sync_one(self, folder: str) -> SyncOutcome:
        """
        Sync a single folder.

        Raises:
            SyncNotAllowedError: If folder is not sync-eligible
        """
        if not self.is_sync_eligible(folder):
            raise SyncNotAllowedError(folder, self.sync_projects)
        logger.info(f"Manual sync requested for {folder}...")
        return self.engine.sync_project(folder)

    def handle_push(self, ref: Optional[str]) -> WebhookResult:
        """Sync everything for pushes to a primary branch; acknowledge anything else."""
        logger.info(f"Push notification received: {ref or 'unknown ref'}")
        branch = branch_from_ref(ref)
        if branch not in self.primary_branches:
            return WebhookResult(triggered=False, message="Ignoring non-main branch push", ref=ref)

        logger.info(f"Starting auto-sync of {branch} from push webhook...")
        outcomes = self.sync_all(ref=branch)
        return WebhookResult(
            triggered=True,
            message="GitHub webhook processed",
            ref=ref,
            outcomes=outcomes,
        )

    def status(self) -> dict[str, Any]:
        return {
            "syncProjects": list(self.sync_projects),
            "remote": self.engine.remote.description,
            "hasGithubToken": self.has_token,
            "states": {f: self.engine.state_of(f).value for f in self.sync_projects},
            "timestamp": utc_now().isoformat(),
        }
