"""
Sync API Endpoints

Push webhook, manual sync of all or one folder, and sync configuration.
Webhook signature verification is expected to happen in front of this
service.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from repochat.configs.logging import get_logger
from repochat.exceptions import SyncNotAllowedError
from repochat.projects.models import utc_now
from repochat.services import Services

from .dependencies import get_services

logger = get_logger("http.sync")

router = APIRouter()


def _failure(message: str, error: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": str(error), "message": message},
    )


@router.post("/github-webhook")
def github_webhook(
    payload: dict[str, Any] = Body(default={}),
    services: Services = Depends(get_services),
):
    """Sync all folders when a push lands on a primary branch."""
    try:
        result = services.orchestrator.handle_push(payload.get("ref"))
    except Exception as e:
        logger.error(f"GitHub webhook error: {e}")
        return _failure("Webhook failed safely - existing files preserved", e)

    if not result.triggered:
        return {"message": result.message}

    return {
        "success": True,
        "message": result.message,
        "results": [outcome.to_dict() for outcome in result.outcomes],
        "timestamp": utc_now().isoformat(),
    }


@router.post("/sync-from-github")
def sync_from_github(services: Services = Depends(get_services)):
    """Manually sync every sync-eligible folder."""
    logger.info("Manual sync requested...")
    try:
        outcomes = services.orchestrator.sync_all()
    except Exception as e:
        logger.error(f"Manual sync error: {e}")
        return _failure("Sync failed safely - existing files preserved", e)

    return {
        "success": True,
        "message": "Manual sync completed",
        "results": [outcome.to_dict() for outcome in outcomes],
        "timestamp": utc_now().isoformat(),
    }


@router.post("/sync-project/{folder}")
def sync_project(folder: str, services: Services = Depends(get_services)):
    """Manually sync one folder; folders outside the sync list are rejected."""
    try:
        outcome = services.orchestrator.sync_one(folder)
    except SyncNotAllowedError as e:
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": e.message, "syncProjects": e.allowed},
        )
    except Exception as e:
        logger.error(f"Manual sync error for {folder}: {e}")
        return _failure("Sync failed safely - existing files preserved", e)

    return outcome.to_dict()


@router.get("/sync-status")
def sync_status(services: Services = Depends(get_services)) -> dict[str, Any]:
    """Sync configuration; reports only whether a token is set, never the token."""
    return services.orchestrator.status()
