"""
Project Walker

File system traversal that reads a project's text files for context assembly.
"""

import os
from pathlib import Path
from typing import Generator, Iterable, Optional

from repochat.configs.constants import DEFAULT_EXTENSIONS, DEFAULT_IGNORE_DIRS
from repochat.configs.logging import get_logger
from repochat.projects.models import FileRecord

logger = get_logger("walker")


def _normalize_extensions(extensions: Iterable[str]) -> set[str]:
    normalized = set()
    for ext in extensions:
        ext = ext.strip().lower()
        if ext and not ext.startswith("."):
            ext = f".{ext}"
        if ext:
            normalized.add(ext)
    return normalized


def walk_project(
    root_path: str | Path,
    extensions: Optional[Iterable[str]] = None,
    ignore_dirs: Optional[Iterable[str]] = None,
) -> Generator[FileRecord, None, None]:
    """
    Walk a project tree yielding a FileRecord for every allowed file.

    Hidden directories and dependency directories (node_modules etc.) are
    pruned. Files that cannot be read or decoded are logged and skipped.

    Args:
        root_path: Root directory to walk
        extensions: Extensions to include, matched case-insensitively
                    (defaults to DEFAULT_EXTENSIONS)
        ignore_dirs: Directory names to skip (defaults to DEFAULT_IGNORE_DIRS)

    Yields:
        FileRecord with path relative to root_path
    """
    allowed = _normalize_extensions(extensions if extensions is not None else DEFAULT_EXTENSIONS)
    ignore = set(ignore_dirs) if ignore_dirs is not None else set(DEFAULT_IGNORE_DIRS)

    root = Path(root_path)
    if not root.is_dir():
        logger.warning(f"Directory does not exist: {root}")
        return

    def _on_walk_error(error: OSError) -> None:
        logger.warning(f"Cannot list directory {error.filename}: {error.strerror}")

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_walk_error):
        # Filter out ignored directories (in-place modification)
        dirnames[:] = [d for d in dirnames if d not in ignore and not d.startswith(".")]

        for filename in filenames:
            file_path = Path(dirpath) / filename

            if file_path.suffix.lower() not in allowed:
                continue

            try:
                raw = file_path.read_bytes()
                content = raw.decode("utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Error reading file {file_path}: {e}")
                continue

            yield FileRecord(
                path=file_path.relative_to(root).as_posix(),
                content=content,
                size=len(raw),
            )


def collect_files(
    root_path: str | Path,
    extensions: Optional[Iterable[str]] = None,
    ignore_dirs: Optional[Iterable[str]] = None,
) -> list[FileRecord]:
    """Eager variant of walk_project."""
    return list(walk_project(root_path, extensions, ignore_dirs))
