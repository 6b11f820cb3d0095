"""
Project Data Models

Value types shared by the walker, assembler, cache and sync engine.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ProjectDescriptor:
    """A configured codebase the assistant can answer questions about."""

    key: str
    name: str
    path: Path
    model: str
    description: str = ""
    folder: str = ""  # sync folder key; defaults to the last path component

    def __post_init__(self) -> None:
        if not self.folder:
            object.__setattr__(self, "folder", Path(self.path).name)

    def to_dict(self) -> dict:
        return {
            "id": self.key,
            "name": self.name,
            "description": self.description,
            "model": self.model,
        }


@dataclass(frozen=True)
class FileRecord:
    """One file read from a project tree."""

    path: str  # POSIX path relative to the project root
    content: str
    size: int  # bytes on disk

    @property
    def suffix(self) -> str:
        return Path(self.path).suffix.lower()


@dataclass(frozen=True)
class ContextBundle:
    """
    Assembled, size-bounded context for one project.

    file_count and total_size describe everything the walker found,
    including files that did not fit the token budget.
    """

    context: str
    file_count: int
    total_size: int
    loaded_at: datetime = field(default_factory=utc_now)
    included_count: int = 0
    estimated_tokens: int = 0

    @property
    def total_size_kb(self) -> int:
        return round(self.total_size / 1024)

    def to_dict(self) -> dict:
        return {
            "fileCount": self.file_count,
            "totalSize": self.total_size,
            "includedCount": self.included_count,
            "estimatedTokens": self.estimated_tokens,
            "loadedAt": self.loaded_at.isoformat(),
        }


@dataclass
class SyncOutcome:
    """Result of one sync attempt for a folder."""

    folder: str
    success: bool
    message: str
    error: Optional[str] = None
    timestamp: datetime = field(default_factory=utc_now)
    files_written: int = 0

    def to_dict(self) -> dict:
        data = asdict(self)
        data["project"] = data.pop("folder")
        data["timestamp"] = self.timestamp.isoformat()
        if data["error"] is None:
            del data["error"]
        return data
