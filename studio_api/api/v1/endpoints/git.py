"""Read-only git-style views over file version history."""

from datetime import datetime

from fastapi import APIRouter, Query
from pydantic import BaseModel

from studio_api.api.deps import EntityId, StorageDep

router = APIRouter()

COMMIT_AUTHOR = "AI Agent"


class GitStatus(BaseModel):
    modified: list[str]
    added: list[str]
    deleted: list[str]
    untracked: list[str]


class Commit(BaseModel):
    """One file version presented as a commit."""

    hash: str
    message: str
    author: str
    date: datetime
    files: list[str]


@router.get("/{project_id}/status", response_model=GitStatus)
async def get_status(project_id: EntityId, storage: StorageDep) -> GitStatus:
    """Every file of the project is reported as modified."""
    files = await storage.list_files_by_project(project_id)
    return GitStatus(modified=[f.path for f in files], added=[], deleted=[], untracked=[])


@router.get("/{project_id}/commits", response_model=list[Commit])
async def list_commits(
    project_id: EntityId,
    storage: StorageDep,
    limit: int = Query(10, ge=1, le=100, description="Maximum commits to return"),
) -> list[Commit]:
    """List versions of all project files as commits, most recent first."""
    entries = []
    for file in await storage.list_files_by_project(project_id):
        for version in await storage.list_file_versions(file.id):
            entries.append((version, file))

    entries.sort(key=lambda entry: (entry[0].created_at, entry[0].id), reverse=True)

    return [
        Commit(
            hash=f"commit-{version.id}",
            message=f"Updated {file.name} (version {version.version})",
            author=COMMIT_AUTHOR,
            date=version.created_at,
            files=[file.path],
        )
        for version, file in entries[:limit]
    ]
