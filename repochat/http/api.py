"""
Chat and Project API Endpoints

Chat streaming (server-sent events), project listing, status and refresh.
"""

import json
from typing import Any, Iterator, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, Field

from repochat.chat import ChatEvent
from repochat.configs.logging import get_logger
from repochat.projects.models import utc_now
from repochat.services import Services

from .dependencies import get_services, require_project

logger = get_logger("http.api")

router = APIRouter()


# --- Request Models ---


class HistoryTurn(BaseModel):
    role: str
    content: str


class ChatRequest(BaseModel):
    """Request body for the chat endpoint."""

    message: str = ""
    project: Optional[str] = None  # defaults to the first configured project
    history: list[HistoryTurn] = Field(default_factory=list)
    isErrorCheck: bool = False
    code: str = ""


# --- Helpers ---


def sse_stream(events: Iterator[ChatEvent]) -> Iterator[str]:
    """Render chat events as server-sent event lines."""
    for event in events:
        payload = event.to_payload()
        if payload is None:
            yield "data: [DONE]\n\n"
        else:
            yield f"data: {json.dumps(payload)}\n\n"


# --- Endpoints ---


@router.post("/chat")
def chat(request: ChatRequest, services: Services = Depends(get_services)):
    """
    Answer a question about a project, streamed as server-sent events.

    Each event is `data: {"content": ...}`, `data: {"status": ...}` or
    `data: {"error": ...}`; a successful stream ends with `data: [DONE]`.
    """
    projects = services.settings.projects
    if not projects:
        raise HTTPException(status_code=503, detail="No projects configured")
    project_id = request.project or projects[0].key
    require_project(services, project_id)

    history = [turn.model_dump() for turn in request.history]
    try:
        if request.isErrorCheck:
            events = services.chat.stream_error_check(project_id, request.code or request.message, history)
        else:
            events = services.chat.stream_reply(project_id, request.message, history)
    except Exception as e:
        logger.error(f"Chat error: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "details": str(e)},
        )

    return StreamingResponse(
        sse_stream(events),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )


@router.get("/projects")
def list_projects(services: Services = Depends(get_services)) -> list[dict[str, Any]]:
    """List configured projects."""
    return [project.to_dict() for project in services.settings.projects]


@router.get("/projects/{project_id}/status")
def project_status(project_id: str, services: Services = Depends(get_services)):
    """Load (or reuse) a project's context and report its size."""
    project = require_project(services, project_id)
    try:
        bundle = services.cache.get(project_id)
    except Exception as e:
        logger.error(f"Status check failed for {project_id}: {e}")
        return JSONResponse(
            status_code=500,
            content={"id": project_id, "name": project.name, "status": "error", "error": str(e)},
        )

    return {
        "id": project_id,
        "name": project.name,
        "status": "online",
        "fileCount": bundle.file_count,
        "totalSize": bundle.total_size,
        "lastLoaded": bundle.loaded_at.isoformat(),
    }


@router.post("/projects/{project_id}/refresh")
def refresh_project(project_id: str, services: Services = Depends(get_services)):
    """Drop a project's cached context and rebuild it from disk."""
    project = require_project(services, project_id)
    try:
        bundle = services.cache.refresh(project_id)
    except Exception as e:
        logger.error(f"Refresh failed for {project_id}: {e}")
        return JSONResponse(status_code=500, content={"success": False, "error": str(e)})

    return {
        "success": True,
        "message": f"Project {project.name} refreshed successfully",
        "fileCount": bundle.file_count,
        "totalSize": bundle.total_size,
        "loadedAt": bundle.loaded_at.isoformat(),
    }


@router.get("/health")
def health(services: Services = Depends(get_services)) -> dict[str, Any]:
    """Health check endpoint."""
    return {
        "status": "ok",
        "timestamp": utc_now().isoformat(),
        "projects": [project.key for project in services.settings.projects],
    }
