"""
RepoChat HTTP Server

FastAPI app exposing chat, project status and sync endpoints under /api.
"""

from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from repochat import __version__
from repochat.services import Services

from .api import router as api_router
from .sync import router as sync_router


def create_app(services: Services, static_dir: Optional[Path] = None) -> FastAPI:
    """
    Build the FastAPI app around an already constructed Services container.

    Args:
        services: Process-wide services
        static_dir: Optional built frontend to serve for non-API routes
    """
    app = FastAPI(
        title="RepoChat Server",
        description="Chat about your codebases, kept in sync with GitHub",
        version=__version__,
    )
    app.state.services = services

    app.include_router(api_router, prefix="/api", tags=["api"])
    app.include_router(sync_router, prefix="/api", tags=["sync"])

    if static_dir is not None and static_dir.exists():
        assets_dir = static_dir / "assets"
        if assets_dir.exists():
            app.mount("/assets", StaticFiles(directory=assets_dir), name="assets")

        @app.get("/{full_path:path}", include_in_schema=False)
        async def serve_spa(full_path: str = "") -> FileResponse:
            """Serve the SPA for all non-API routes."""
            return FileResponse(static_dir / "index.html")

    return app


__all__ = ["create_app"]
