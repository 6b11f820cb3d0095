"""
Shared Services

The process-wide service objects (context cache, sync engine and
orchestrator, chat service), built once from Settings at startup and handed
to the HTTP layer.
"""

from typing import Optional

from repochat.chat import ChatService
from repochat.configs.logging import get_logger
from repochat.configs.runtime import Settings
from repochat.llm import LLMProvider, get_provider
from repochat.projects import ContextBundle, ContextCache, build_project_context
from repochat.sync import (
    FileSystem,
    GitHubRepository,
    RemoteRepository,
    SyncEngine,
    SyncOrchestrator,
)

logger = get_logger("services")


class Services:
    """
    Wires the core components together.

    Args:
        settings: Validated configuration
        remote: Remote repository (default: GitHubRepository from settings)
        provider: LLM provider (default: from settings.llm_provider)
        fs: Filesystem capability for the sync engine
    """

    def __init__(
        self,
        settings: Settings,
        remote: Optional[RemoteRepository] = None,
        provider: Optional[LLMProvider] = None,
        fs: Optional[FileSystem] = None,
    ):
        self.settings = settings
        self.cache = ContextCache(self._load_context, settings.cache_ttl_seconds)

        self.remote = remote or GitHubRepository(
            owner=settings.github_owner,
            repo=settings.github_repo,
            token=settings.github_token,
            ref=settings.primary_branches[0],
            api_url=settings.github_api_url,
        )
        self.engine = SyncEngine(
            remote=self.remote,
            codebase_root=settings.codebase_root,
            staging_root=settings.staging_dir,
            fs=fs,
            on_synced=self.invalidate_folder,
        )
        self.orchestrator = SyncOrchestrator(
            self.engine,
            settings.sync_projects,
            primary_branches=settings.primary_branches,
            has_token=bool(settings.github_token),
        )

        self.provider = provider or get_provider(settings.llm_provider)
        self.chat = ChatService(
            self.cache,
            settings.get_project,
            self.provider,
            temperature=settings.temperature,
        )

    def _load_context(self, project_id: str) -> ContextBundle:
        project = self.settings.get_project(project_id)
        return build_project_context(
            project,
            max_tokens=self.settings.max_tokens,
            extensions=self.settings.allowed_extensions,
        )

    def invalidate_folder(self, folder: str) -> None:
        """Drop cached context for every project rooted at a synced folder."""
        for project in self.settings.projects_for_folder(folder):
            self.cache.invalidate(project.key)
