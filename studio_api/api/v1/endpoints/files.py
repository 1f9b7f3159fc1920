"""File and version history API endpoints."""

import structlog
from fastapi import APIRouter

from studio_api.api.deps import EntityId, StorageDep
from studio_api.errors import NotFoundError
from studio_api.schemas import File, FileContentUpdate, FileCreate, FileVersion

logger = structlog.get_logger()
router = APIRouter()


@router.post("/files", response_model=File)
async def create_file(request: FileCreate, storage: StorageDep) -> File:
    file = await storage.create_file(request)
    logger.info("File created via API", file_id=file.id, project_id=file.project_id, path=file.path)
    return file


@router.get("/projects/{project_id}/files", response_model=list[File])
async def list_project_files(project_id: EntityId, storage: StorageDep) -> list[File]:
    return await storage.list_files_by_project(project_id)


@router.get("/files/{file_id}", response_model=File)
async def get_file(file_id: EntityId, storage: StorageDep) -> File:
    file = await storage.get_file(file_id)
    if file is None:
        raise NotFoundError("File not found")
    return file


@router.patch("/files/{file_id}", response_model=File)
async def update_file(
    file_id: EntityId,
    update: FileContentUpdate,
    storage: StorageDep,
) -> File:
    """Replace a file's content. The previous content is kept as a new version."""
    file = await storage.update_file_content(file_id, update.content)
    if file is None:
        raise NotFoundError("File not found")
    return file


@router.delete("/files/{file_id}")
async def delete_file(file_id: EntityId, storage: StorageDep) -> dict:
    if not await storage.delete_file(file_id):
        raise NotFoundError("File not found")
    return {"success": True}


@router.get("/files/{file_id}/versions", response_model=list[FileVersion])
async def list_file_versions(file_id: EntityId, storage: StorageDep) -> list[FileVersion]:
    """List a file's versions, newest first."""
    return await storage.list_file_versions(file_id)


@router.post("/files/{file_id}/restore/{version_id}", response_model=File)
async def restore_file_version(
    file_id: EntityId,
    version_id: EntityId,
    storage: StorageDep,
) -> File:
    """Overwrite a file with the content of one of its versions.

    The version must belong to the file; the restore itself is not recorded
    as a new version.
    """
    file = await storage.restore_file_version(file_id, version_id)
    if file is None:
        raise NotFoundError("File or version not found")
    logger.info("File restored via API", file_id=file_id, version_id=version_id)
    return file
