"""
Project Context

Walking project trees, assembling bounded context and caching it per project.
"""

from repochat.projects.assembler import (
    assemble_context,
    build_project_context,
    estimate_tokens,
    order_files,
    render_file_block,
)
from repochat.projects.cache import ContextCache
from repochat.projects.models import ContextBundle, FileRecord, ProjectDescriptor, SyncOutcome
from repochat.projects.walker import collect_files, walk_project

__all__ = [
    "assemble_context",
    "build_project_context",
    "estimate_tokens",
    "order_files",
    "render_file_block",
    "ContextCache",
    "ContextBundle",
    "FileRecord",
    "ProjectDescriptor",
    "SyncOutcome",
    "collect_files",
    "walk_project",
]
