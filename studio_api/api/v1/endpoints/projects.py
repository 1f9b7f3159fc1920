"""Project management API endpoints."""

import structlog
from fastapi import APIRouter

from studio_api.api.deps import EntityId, StorageDep
from studio_api.errors import NotFoundError
from studio_api.schemas import Project, ProjectCreate, ProjectUpdate

logger = structlog.get_logger()
router = APIRouter()


@router.post("", response_model=Project)
async def create_project(request: ProjectCreate, storage: StorageDep) -> Project:
    """Create a project."""
    project = await storage.create_project(request)
    logger.info("Project created via API", project_id=project.id, template=project.template)
    return project


@router.get("", response_model=list[Project])
async def list_projects(storage: StorageDep) -> list[Project]:
    """List projects, newest first."""
    return await storage.list_projects()


@router.get("/{project_id}", response_model=Project)
async def get_project(project_id: EntityId, storage: StorageDep) -> Project:
    project = await storage.get_project(project_id)
    if project is None:
        raise NotFoundError("Project not found")
    return project


@router.patch("/{project_id}", response_model=Project)
async def update_project(
    project_id: EntityId,
    update: ProjectUpdate,
    storage: StorageDep,
) -> Project:
    """Update a project's name, description or template."""
    project = await storage.update_project(project_id, update)
    if project is None:
        raise NotFoundError("Project not found")
    return project


@router.delete("/{project_id}")
async def delete_project(project_id: EntityId, storage: StorageDep) -> dict:
    """Delete a project together with its files and messages."""
    if not await storage.delete_project(project_id):
        raise NotFoundError("Project not found")
    logger.info("Project deleted via API", project_id=project_id)
    return {"success": True}

