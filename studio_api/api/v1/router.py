"""API v1 router aggregating all endpoints."""

from fastapi import APIRouter

from studio_api.api.v1.endpoints import analyses, assistant, file_tests, files, git, messages, projects

api_router = APIRouter()

api_router.include_router(projects.router, prefix="/projects", tags=["projects"])
api_router.include_router(messages.router, prefix="/projects", tags=["messages"])
api_router.include_router(files.router, tags=["files"])
api_router.include_router(file_tests.router, tags=["tests"])
api_router.include_router(analyses.router, prefix="/files", tags=["analyses"])
api_router.include_router(git.router, prefix="/git", tags=["git"])
api_router.include_router(assistant.router, tags=["assistant"])
