"""
Remote Repository Access

Read-only view of the source-of-truth repository. The sync engine only needs
two operations: a metadata probe (connectivity/auth check) and "get contents
of path", which returns either one file or a directory listing.
"""

import base64
from urllib.parse import quote
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Union

import requests

from repochat.configs.constants import get_timeout
from repochat.configs.logging import get_logger
from repochat.exceptions import ClientError, DownloadError, RemoteUnavailableError
from repochat.utils.http_client import http_get, http_json_get

logger = get_logger("sync.remote")


@dataclass(frozen=True)
class RemoteFile:
    """A file entry. content is None when it came from a directory listing."""

    path: str
    name: str
    content: Optional[bytes] = None


@dataclass(frozen=True)
class RemoteDirectory:
    """A directory entry to recurse into."""

    path: str
    name: str


RemoteEntry = Union[RemoteFile, RemoteDirectory]


class RemoteRepository(ABC):
    """Source-of-truth repository the local codebase is synced from."""

    @abstractmethod
    def get_metadata(self) -> dict[str, Any]:
        """
        Fetch repository metadata.

        Raises:
            RemoteUnavailableError: If the repository cannot be reached or
                                    the credentials are rejected
        """

    @abstractmethod
    def get_contents(self, path: str, ref: Optional[str] = None) -> Union[RemoteFile, list[RemoteEntry]]:
        """
        Fetch a path: a RemoteFile with content, or a directory listing.

        Args:
            path: Repository path, "/"-separated
            ref: Branch, tag or commit to read (implementation default if None)

        Raises:
            DownloadError: If the path cannot be fetched
        """

    @property
    def description(self) -> str:
        return self.__class__.__name__


def _check_entry_name(name: str) -> str:
    if not name or name in (".", "..") or "/" in name or "\\" in name:
        raise DownloadError(f"Refusing unsafe remote entry name: {name!r}")
    return name


def iter_remote_tree(
    remote: RemoteRepository,
    path: str,
    prefix: str = "",
    ref: Optional[str] = None,
) -> Iterator[tuple[str, bytes]]:
    """
    Walk a remote folder depth-first.

    Yields:
        (relative_path, content) for every file below path, where
        relative_path uses "/" separators and is relative to path
    """
    listing = remote.get_contents(path, ref=ref)
    if isinstance(listing, RemoteFile):
        raise DownloadError(f"Remote path is a file, not a folder: {path}")

    for entry in listing:
        rel_path = f"{prefix}{_check_entry_name(entry.name)}"
        if isinstance(entry, RemoteDirectory):
            yield from iter_remote_tree(remote, entry.path, prefix=f"{rel_path}/", ref=ref)
            continue

        content = entry.content
        if content is None:
            fetched = remote.get_contents(entry.path, ref=ref)
            if not isinstance(fetched, RemoteFile) or fetched.content is None:
                raise DownloadError(f"Expected file content for {entry.path}")
            content = fetched.content
        logger.debug(f"  Downloaded: {entry.path}")
        yield rel_path, content


class GitHubRepository(RemoteRepository):
    """
    GitHub REST API implementation.

    Uses GET /repos/{owner}/{repo} as the probe and
    GET /repos/{owner}/{repo}/contents/{path} for files and listings.

    Args:
        owner: Repository owner (user or organization)
        repo: Repository name
        token: Personal access token (GITHUB_PAT); anonymous if None
        ref: Branch, tag or commit to read (repository default if None)
        api_url: API base URL
    """

    def __init__(
        self,
        owner: str,
        repo: str,
        token: Optional[str] = None,
        ref: Optional[str] = None,
        api_url: str = "https://api.github.com",
        session: Optional[requests.Session] = None,
    ):
        self.owner = owner
        self.repo = repo
        self.ref = ref
        self._api_url = api_url.rstrip("/")
        self._session = session or requests.Session()
        self._headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            self._headers["Authorization"] = f"Bearer {token}"

    @property
    def description(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def repo_url(self) -> str:
        return f"{self._api_url}/repos/{self.owner}/{self.repo}"

    def get_metadata(self) -> dict[str, Any]:
        if not self.owner or not self.repo:
            raise RemoteUnavailableError("GitHub repository is not configured (owner/repo missing)")
        try:
            return http_json_get(
                self.repo_url,
                headers=self._headers,
                timeout=get_timeout("github_metadata"),
                session=self._session,
            )
        except ClientError as e:
            raise RemoteUnavailableError(f"GitHub connection failed: {e.message}", e.details) from e

    def get_contents(self, path: str, ref: Optional[str] = None) -> Union[RemoteFile, list[RemoteEntry]]:
        # Names may contain "#", "?" or spaces; keep only the separators literal
        url = f"{self.repo_url}/contents/{quote(path.strip('/'), safe='/')}"
        ref = ref or self.ref
        params = {"ref": ref} if ref else None
        try:
            data = http_json_get(
                url,
                headers=self._headers,
                params=params,
                timeout=get_timeout("github_contents"),
                session=self._session,
            )
        except ClientError as e:
            raise DownloadError(f"Failed to fetch {path}: {e.message}", e.details) from e

        if isinstance(data, list):
            return self._parse_listing(data)
        if isinstance(data, dict) and data.get("type") == "file":
            return RemoteFile(path=data["path"], name=data["name"], content=self._decode_file(data))
        raise DownloadError(f"Unexpected contents response for {path}")

    def _parse_listing(self, items: list[dict]) -> list[RemoteEntry]:
        entries: list[RemoteEntry] = []
        for item in items:
            item_type = item.get("type")
            if item_type == "file":
                entries.append(RemoteFile(path=item["path"], name=item["name"]))
            elif item_type == "dir":
                entries.append(RemoteDirectory(path=item["path"], name=item["name"]))
            else:
                # symlinks and submodules are not mirrored
                logger.debug(f"Skipping {item_type} entry: {item.get('path')}")
        return entries

    def _decode_file(self, data: dict) -> bytes:
        if data.get("encoding") == "base64":
            try:
                return base64.b64decode(data.get("content") or "")
            except ValueError as e:
                raise DownloadError(f"Invalid base64 content for {data['path']}") from e

        # Files over 1MB come back without inline content
        download_url = data.get("download_url")
        if not download_url:
            raise DownloadError(f"No content available for {data['path']}")
        try:
            response = http_get(
                download_url,
                headers=self._headers,
                timeout=get_timeout("github_contents"),
                session=self._session,
            )
        except ClientError as e:
            raise DownloadError(f"Failed to download {data['path']}: {e.message}", e.details) from e
        return response.content
