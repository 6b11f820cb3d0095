"""
Context Assembler

Turns a project's files into one text blob that fits an approximate token
budget. Code files come first; files are included whole or not at all.
"""

import math
from datetime import datetime
from typing import Iterable, Optional

from repochat.configs.constants import CHARS_PER_TOKEN, CODE_EXTENSIONS
from repochat.configs.logging import get_logger
from repochat.projects.models import ContextBundle, FileRecord, ProjectDescriptor, utc_now
from repochat.projects.walker import walk_project

logger = get_logger("assembler")


def estimate_tokens(text: str) -> int:
    """Rough token estimate: one token per four characters, rounded up."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def render_header(name: str, description: str) -> str:
    return f"# {name}\n{description}\n\n"


def render_file_block(record: FileRecord) -> str:
    return f"## File: {record.path}\n```\n{record.content}\n```\n\n"


def is_code_file(record: FileRecord) -> bool:
    return record.suffix in CODE_EXTENSIONS


def order_files(files: Iterable[FileRecord]) -> list[FileRecord]:
    """Stable partition: code files first, everything else after."""
    return sorted(files, key=lambda record: not is_code_file(record))


def assemble_context(
    files: Iterable[FileRecord],
    name: str,
    description: str,
    max_tokens: int,
    now: Optional[datetime] = None,
) -> ContextBundle:
    """
    Build a ContextBundle from walked files.

    Inclusion stops at the first file whose block would push the running
    estimate past max_tokens; later (possibly smaller) files are not tried.

    Args:
        files: Files found by the walker
        name: Project display name for the header
        description: Project description for the header
        max_tokens: Ceiling on the summed per-file token estimates
        now: Timestamp to record as loaded_at (defaults to current UTC time)

    Returns:
        ContextBundle whose file_count and total_size cover all files,
        including any left out by the budget
    """
    ordered = order_files(files)

    parts = [render_header(name, description)]
    total_tokens = 0
    included = 0

    for record in ordered:
        block = render_file_block(record)
        block_tokens = estimate_tokens(block)

        if total_tokens + block_tokens > max_tokens:
            logger.info(f"Stopping file inclusion at {record.path} - token limit reached")
            break

        parts.append(block)
        total_tokens += block_tokens
        included += 1

    bundle = ContextBundle(
        context="".join(parts),
        file_count=len(ordered),
        total_size=sum(record.size for record in ordered),
        loaded_at=now or utc_now(),
        included_count=included,
        estimated_tokens=total_tokens,
    )

    logger.info(
        f"Loaded {bundle.file_count} files ({bundle.total_size_kb}KB) for project: {name} "
        f"({included} included, ~{total_tokens} tokens)"
    )
    return bundle


def build_project_context(
    project: ProjectDescriptor,
    max_tokens: int,
    extensions: Optional[Iterable[str]] = None,
) -> ContextBundle:
    """Walk a project's root and assemble its context."""
    logger.info(f"Loading files from: {project.path}")
    files = walk_project(project.path, extensions)
    return assemble_context(files, project.name, project.description, max_tokens)
