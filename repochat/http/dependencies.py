"""
Request Dependencies

FastAPI dependencies giving route handlers access to the app's services.
"""

from fastapi import HTTPException, Request

from repochat.exceptions import ProjectNotFoundError
from repochat.projects.models import ProjectDescriptor
from repochat.services import Services


def get_services(request: Request) -> Services:
    return request.app.state.services


def require_project(services: Services, project_id: str) -> ProjectDescriptor:
    """Look up a project or answer 404."""
    try:
        return services.settings.get_project(project_id)
    except ProjectNotFoundError:
        raise HTTPException(status_code=404, detail="Project not found")
